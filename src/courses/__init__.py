"""Course configuration module.

Read-only view of course subscription settings consumed by the access engine.
"""

from .models import (
    COURSES_TABLES_CQL,
    CourseConfig,
    LessonRef,
    PeriodToken,
    SubscriptionType,
)
from .service import CourseConfigReader, require_course, require_lesson


__all__ = [
    "COURSES_TABLES_CQL",
    "CourseConfig",
    "CourseConfigReader",
    "LessonRef",
    "PeriodToken",
    "SubscriptionType",
    "require_course",
    "require_lesson",
]
