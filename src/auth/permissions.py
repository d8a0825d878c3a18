"""Role-based access control for course access management.

Hierarchical roles:
- ADMIN (level 3): Manages every course
- TEACHER (level 2): Manages own courses, decides access requests
- STUDENT (level 1): Requests access, watches lessons
- USER (level 0): Registered user without student profile

Managing a course (deciding requests, assigning, revoking) is allowed for the
course owner and for admins only.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID


if TYPE_CHECKING:
    from src.courses.models import CourseConfig


class UserRole(str, Enum):
    """User roles with hierarchical levels."""

    USER = "user"
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


# Role hierarchy mapping (role -> permission level)
ROLE_HIERARCHY: dict[UserRole, int] = {
    UserRole.USER: 0,
    UserRole.STUDENT: 1,
    UserRole.TEACHER: 2,
    UserRole.ADMIN: 3,
}


@dataclass(frozen=True)
class Actor:
    """Authenticated caller: user id and role from the access token."""

    id: UUID
    role: UserRole


def get_role_level(role: UserRole | str) -> int:
    """Get the permission level for a role (0 for unknown roles)."""
    if isinstance(role, str):
        try:
            role = UserRole(role)
        except ValueError:
            return 0
    return ROLE_HIERARCHY.get(role, 0)


def has_permission(user_role: UserRole | str, required_role: UserRole | str) -> bool:
    """Check if user has at least the required permission level.

    Examples:
        >>> has_permission(UserRole.ADMIN, UserRole.TEACHER)
        True
        >>> has_permission(UserRole.STUDENT, UserRole.TEACHER)
        False
    """
    return get_role_level(user_role) >= get_role_level(required_role)


def is_admin(role: UserRole | str) -> bool:
    """Check if role is ADMIN."""
    if isinstance(role, str):
        return role == UserRole.ADMIN.value
    return role == UserRole.ADMIN


def is_course_owner(actor: Actor, course: "CourseConfig") -> bool:
    """Check if the actor is the teacher who owns the course."""
    return course.teacher_id == actor.id


def can_manage_course(actor: Actor, course: "CourseConfig") -> bool:
    """Check if actor may decide, assign or revoke access for the course."""
    return is_admin(actor.role) or is_course_owner(actor, course)
