"""HTTP-level tests for the access and progress endpoints."""

from datetime import datetime, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from src.access.models import AccessRecord, AccessStatus
from src.auth.permissions import UserRole
from src.notifications.models import NotificationType
from tests.fakes import T0


def parse_dt(value: str) -> datetime:
    return datetime.fromisoformat(value)


@pytest.fixture
def student_headers(auth_headers, student_id):
    return auth_headers(student_id, UserRole.STUDENT)


@pytest.fixture
def teacher_headers(auth_headers, teacher):
    return auth_headers(teacher.id, UserRole.TEACHER)


@pytest.fixture
def pending(access_repo, paid_course, student_id) -> AccessRecord:
    return access_repo.seed(
        AccessRecord(student_id, paid_course.course_id, AccessStatus.PENDING, T0)
    )


class TestAuthentication:
    def test_missing_token(self, client: TestClient, paid_course) -> None:
        response = client.post(f"/v1/access/courses/{paid_course.course_id}/request")

        assert response.status_code == 401
        body = response.json()
        assert body["error"] is True
        assert response.headers["www-authenticate"] == "Bearer"

    def test_teacher_cannot_request_access(
        self, client: TestClient, paid_course, teacher_headers
    ) -> None:
        response = client.post(
            f"/v1/access/courses/{paid_course.course_id}/request",
            headers=teacher_headers,
        )
        assert response.status_code == 403


class TestStudentRequest:
    def test_request_creates_pending(
        self, client: TestClient, paid_course, student_headers, notifier, teacher
    ) -> None:
        response = client.post(
            f"/v1/access/courses/{paid_course.course_id}/request",
            headers=student_headers,
        )

        assert response.status_code == 201
        assert response.json()["status"] == "PENDING"
        [effect] = notifier.dispatched
        assert effect.recipient_id == teacher.id
        assert effect.type == NotificationType.COURSE_REQUEST

    def test_duplicate_request_conflicts(
        self, client: TestClient, paid_course, student_headers, pending
    ) -> None:
        response = client.post(
            f"/v1/access/courses/{paid_course.course_id}/request",
            headers=student_headers,
        )

        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "conflict"
        assert body["status_code"] == 409

    def test_unknown_course(self, client: TestClient, student_headers) -> None:
        response = client.post(
            f"/v1/access/courses/{uuid4()}/request", headers=student_headers
        )

        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    def test_my_records(
        self, client: TestClient, student_headers, pending
    ) -> None:
        data = client.get("/v1/access/my", headers=student_headers).json()

        assert data["total"] == 1
        assert data["items"][0]["course_id"] == str(pending.course_id)


class TestTeacherDecision:
    def test_approve_with_period(
        self,
        client: TestClient,
        paid_course,
        student_id,
        teacher_headers,
        pending,
        notifier,
    ) -> None:
        response = client.post(
            f"/v1/access/courses/{paid_course.course_id}/students/{student_id}/decision",
            json={"action": "approve", "period": "3_MONTHS"},
            headers=teacher_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "APPROVED"
        assert parse_dt(data["access_end_date"]) == T0.replace(month=4)
        assert notifier.dispatched[0].type == NotificationType.COURSE_APPROVED

    def test_invalid_period(
        self, client: TestClient, paid_course, student_id, teacher_headers, pending
    ) -> None:
        response = client.post(
            f"/v1/access/courses/{paid_course.course_id}/students/{student_id}/decision",
            json={"action": "approve", "period": "2_WEEKS"},
            headers=teacher_headers,
        )

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_operation"

    def test_unknown_action_is_a_validation_error(
        self, client: TestClient, paid_course, student_id, teacher_headers, pending
    ) -> None:
        response = client.post(
            f"/v1/access/courses/{paid_course.course_id}/students/{student_id}/decision",
            json={"action": "maybe"},
            headers=teacher_headers,
        )
        assert response.status_code == 422

    def test_other_teacher_forbidden(
        self, client: TestClient, auth_headers, paid_course, student_id, pending
    ) -> None:
        response = client.post(
            f"/v1/access/courses/{paid_course.course_id}/students/{student_id}/decision",
            json={"action": "reject"},
            headers=auth_headers(uuid4(), UserRole.TEACHER),
        )

        assert response.status_code == 403
        assert response.json()["code"] == "forbidden"

    def test_list_requests_by_status(
        self, client: TestClient, access_repo, paid_course, teacher_headers, pending
    ) -> None:
        access_repo.seed(
            AccessRecord(uuid4(), paid_course.course_id, AccessStatus.REJECTED, T0)
        )

        data = client.get(
            f"/v1/access/courses/{paid_course.course_id}/requests",
            params={"status": "PENDING"},
            headers=teacher_headers,
        ).json()

        assert data["total"] == 1
        assert data["items"][0]["student_id"] == str(pending.student_id)

    def test_assign_end_before_start(
        self, client: TestClient, paid_course, student_id, teacher_headers
    ) -> None:
        response = client.put(
            f"/v1/access/courses/{paid_course.course_id}/students/{student_id}",
            json={
                "access_start_date": T0.isoformat(),
                "access_end_date": (T0 - timedelta(days=1)).isoformat(),
            },
            headers=teacher_headers,
        )
        assert response.status_code == 400

    def test_revoke(
        self,
        client: TestClient,
        access_repo,
        paid_course,
        student_id,
        teacher_headers,
        pending,
    ) -> None:
        response = client.delete(
            f"/v1/access/courses/{paid_course.course_id}/students/{student_id}",
            headers=teacher_headers,
        )

        assert response.status_code == 204
        assert access_repo.records == {}


class TestAccessChecks:
    def test_student_without_record(
        self, client: TestClient, paid_course, student_headers
    ) -> None:
        data = client.get(
            f"/v1/access/courses/{paid_course.course_id}/check", headers=student_headers
        ).json()

        assert data["has_access"] is False
        assert data["reason"] == "NO_RECORD"

    def test_owner_always_has_access(
        self, client: TestClient, paid_course, teacher_headers
    ) -> None:
        data = client.get(
            f"/v1/access/courses/{paid_course.course_id}/check", headers=teacher_headers
        ).json()

        assert data["has_access"] is True
        assert data["reason"] == "COURSE_OWNER"

    def test_trial_lesson_is_open(
        self, client: TestClient, make_course, course_reader, student_headers
    ) -> None:
        from src.courses.models import LessonRef

        trial_id = uuid4()
        course = make_course(trial_lesson_id=trial_id)
        course_reader.add_lesson(LessonRef(lesson_id=trial_id, course_id=course.course_id))

        data = client.get(
            f"/v1/access/lessons/{trial_id}/check", headers=student_headers
        ).json()

        assert data["has_access"] is True
        assert data["reason"] == "TRIAL_LESSON"


class TestExtension:
    def test_extend(
        self, client: TestClient, access_repo, paid_course, student_id, student_headers
    ) -> None:
        access_repo.seed(
            AccessRecord(
                student_id,
                paid_course.course_id,
                AccessStatus.APPROVED,
                T0,
                access_start_date=T0,
                access_end_date=T0 + timedelta(days=10),
            )
        )

        response = client.post(
            f"/v1/access/courses/{paid_course.course_id}/extend",
            json={"period": "30_DAYS"},
            headers=student_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert parse_dt(data["new_end_date"]) == T0 + timedelta(days=40)
        assert Decimal(str(data["price"])) == Decimal("29.90")
        assert data["period"] == "30_DAYS"


class TestProgress:
    def test_denied_without_access(
        self, client: TestClient, lesson, student_headers, ledger
    ) -> None:
        response = client.post(
            f"/v1/progress/lessons/{lesson.lesson_id}",
            json={"completed": True},
            headers=student_headers,
        )

        assert response.status_code == 403
        body = response.json()
        assert body["code"] == "access_denied"
        assert body["reason"] == "NO_RECORD"
        assert ledger.increments == []

    def test_completion_rewards_once(
        self,
        client: TestClient,
        access_repo,
        lesson,
        student_id,
        student_headers,
        ledger,
    ) -> None:
        access_repo.seed(
            AccessRecord(
                student_id,
                lesson.course_id,
                AccessStatus.APPROVED,
                T0,
                access_start_date=T0,
            )
        )
        url = f"/v1/progress/lessons/{lesson.lesson_id}"

        first = client.post(
            url, json={"completed": True, "position": 900}, headers=student_headers
        )
        second = client.post(url, json={"completed": True}, headers=student_headers)

        assert first.status_code == 200
        assert second.status_code == 200
        assert second.json()["completed"] is True
        assert ledger.increments == [(student_id, 10)]

    def test_negative_position_rejected(
        self, client: TestClient, lesson, student_headers
    ) -> None:
        response = client.post(
            f"/v1/progress/lessons/{lesson.lesson_id}",
            json={"completed": False, "position": -1},
            headers=student_headers,
        )
        assert response.status_code == 422

    def test_service_unavailable(
        self, app, client: TestClient, lesson, student_headers
    ) -> None:
        app.state.progress_service = None

        response = client.post(
            f"/v1/progress/lessons/{lesson.lesson_id}",
            json={"completed": True},
            headers=student_headers,
        )
        assert response.status_code == 503
