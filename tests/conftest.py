"""Shared fixtures: fixed clock, in-memory stores, wired services, HTTP client."""

from decimal import Decimal
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from src.access.decision import AccessDecisionService
from src.access.extension import SubscriptionExtensionService
from src.access.workflow import AccessRequestWorkflow
from src.auth.permissions import Actor, UserRole
from src.courses.models import CourseConfig, LessonRef, PeriodToken, SubscriptionType
from src.progress.service import ProgressService
from tests.fakes import (
    FixedClock,
    InMemoryAccessRepository,
    InMemoryCourseReader,
    InMemoryProgressRepository,
    RecordingLedger,
    RecordingNotifier,
    T0,
    make_token,
)


# ==============================================================================
# Identities
# ==============================================================================


@pytest.fixture
def student_id() -> UUID:
    return uuid4()


@pytest.fixture
def teacher() -> Actor:
    return Actor(id=uuid4(), role=UserRole.TEACHER)


@pytest.fixture
def admin() -> Actor:
    return Actor(id=uuid4(), role=UserRole.ADMIN)


# ==============================================================================
# Courses
# ==============================================================================


@pytest.fixture
def course_reader() -> InMemoryCourseReader:
    return InMemoryCourseReader()


@pytest.fixture
def make_course(course_reader: InMemoryCourseReader, teacher: Actor):
    """Factory registering a course owned by ``teacher``."""

    def _make(**overrides) -> CourseConfig:
        values = {
            "course_id": uuid4(),
            "teacher_id": teacher.id,
            "title": "Pharmacology 101",
            "price": Decimal("99.90"),
            "subscription_type": SubscriptionType.PAID,
            "prices": {
                PeriodToken.DAYS_30: Decimal("29.90"),
                PeriodToken.MONTHS_3: Decimal("79.90"),
                PeriodToken.MONTHS_6: Decimal("149.90"),
                PeriodToken.YEAR_1: Decimal("249.90"),
            },
        }
        values.update(overrides)
        return course_reader.add_course(CourseConfig(**values))

    return _make


@pytest.fixture
def paid_course(make_course) -> CourseConfig:
    return make_course()


@pytest.fixture
def lesson(course_reader: InMemoryCourseReader, paid_course: CourseConfig) -> LessonRef:
    return course_reader.add_lesson(
        LessonRef(lesson_id=uuid4(), course_id=paid_course.course_id)
    )


# ==============================================================================
# Stores and services
# ==============================================================================


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(T0)


@pytest.fixture
def access_repo() -> InMemoryAccessRepository:
    return InMemoryAccessRepository()


@pytest.fixture
def progress_repo() -> InMemoryProgressRepository:
    return InMemoryProgressRepository()


@pytest.fixture
def ledger() -> RecordingLedger:
    return RecordingLedger()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def decisions(access_repo, course_reader, clock) -> AccessDecisionService:
    return AccessDecisionService(access_repo, course_reader, clock)


@pytest.fixture
def workflow(access_repo, clock) -> AccessRequestWorkflow:
    return AccessRequestWorkflow(access_repo, clock)


@pytest.fixture
def extensions(access_repo, clock) -> SubscriptionExtensionService:
    return SubscriptionExtensionService(access_repo, clock)


@pytest.fixture
def progress_service(progress_repo, ledger, decisions, clock) -> ProgressService:
    return ProgressService(
        repository=progress_repo,
        ledger=ledger,
        decisions=decisions,
        clock=clock,
        reward_coins=10,
    )


# ==============================================================================
# HTTP
# ==============================================================================


@pytest.fixture
def app(
    course_reader,
    decisions,
    workflow,
    extensions,
    progress_service,
    notifier,
):
    """Application wired to in-memory services (lifespan is not run)."""
    from src.main import create_app

    application = create_app()
    application.state.course_reader = course_reader
    application.state.access_decisions = decisions
    application.state.access_workflow = workflow
    application.state.extension_service = extensions
    application.state.progress_service = progress_service
    application.state.notification_service = notifier
    return application


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth_headers():
    """Factory for Authorization headers."""

    def _headers(user_id: UUID, role: UserRole) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user_id, role)}"}

    return _headers
