"""Tests for notification factories and best-effort dispatch."""

import json
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from src.core.redis import notification_channel
from src.notifications.models import (
    NotificationType,
    access_approved,
    access_rejected,
    subscription_extended,
)
from src.notifications.service import NotificationService
from tests.fakes import T0


@pytest.fixture
def session() -> MagicMock:
    session = MagicMock()
    session.aexecute = AsyncMock()
    return session


class TestFactories:
    def test_approval_mentions_end_date(self) -> None:
        effect = access_approved(uuid4(), uuid4(), "Pharmacology", T0 + timedelta(days=30))

        assert effect.type == NotificationType.COURSE_APPROVED
        assert "2025-02-14" in effect.message

    def test_rejection_targets_student(self) -> None:
        student_id, course_id = uuid4(), uuid4()

        effect = access_rejected(student_id, course_id, "Pharmacology")

        assert effect.recipient_id == student_id
        assert effect.course_id == course_id

    def test_extension(self) -> None:
        effect = subscription_extended(uuid4(), uuid4(), "Pharmacology", T0)
        assert effect.type == NotificationType.SUBSCRIPTION_EXTENDED


class TestDispatch:
    @pytest.mark.asyncio
    async def test_stores_and_counts(self, session) -> None:
        service = NotificationService(session, "coursegate_test")
        effects = [
            access_rejected(uuid4(), uuid4(), "A"),
            access_rejected(uuid4(), uuid4(), "B"),
        ]

        assert await service.dispatch(effects) == 2
        # Insert plus unread counter for each notification
        assert session.aexecute.await_count == 4

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_other_deliveries(self, session) -> None:
        session.aexecute.side_effect = [RuntimeError("node down"), None, None]
        service = NotificationService(session, "coursegate_test")
        effects = [
            access_rejected(uuid4(), uuid4(), "A"),
            access_rejected(uuid4(), uuid4(), "B"),
        ]

        assert await service.dispatch(effects) == 1

    @pytest.mark.asyncio
    async def test_publishes_to_user_channel(self, session) -> None:
        redis = MagicMock()
        redis.publish = AsyncMock()
        service = NotificationService(session, "coursegate_test", redis)
        student_id = uuid4()

        await service.dispatch([access_rejected(student_id, uuid4(), "A")])

        channel, payload = redis.publish.await_args.args
        assert channel == notification_channel(str(student_id))
        assert json.loads(payload)["data"]["type"] == "course_rejected"

    @pytest.mark.asyncio
    async def test_publish_failure_is_ignored(self, session) -> None:
        redis = MagicMock()
        redis.publish = AsyncMock(side_effect=ConnectionError("redis down"))
        service = NotificationService(session, "coursegate_test", redis)

        assert await service.dispatch([access_rejected(uuid4(), uuid4(), "A")]) == 1
