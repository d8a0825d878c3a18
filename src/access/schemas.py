"""Pydantic schemas for course access.

Request/Response models for:
- Access requests and teacher decisions
- Direct assignment and revocation
- Access checks (course and lesson)
- Subscription extension
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.courses.models import PeriodToken

from .decision import AccessDecision
from .extension import ExtensionResult
from .models import AccessReason, AccessRecord, AccessStatus, DecisionAction


# ==============================================================================
# Request Schemas
# ==============================================================================


class DecisionRequest(BaseModel):
    """Approve or reject a student's access request."""

    action: DecisionAction
    period: str | None = Field(
        None,
        description="Period for PAID courses: 30_DAYS, 3_MONTHS, 6_MONTHS, 1_YEAR "
        "(omit = unbounded)",
    )


class AssignAccessRequest(BaseModel):
    """Grant access directly with an explicit window."""

    access_start_date: datetime | None = Field(
        None, description="Window start (default: now)"
    )
    access_end_date: datetime | None = Field(
        None, description="Window end, exclusive (omit = unbounded)"
    )


class ExtendSubscriptionRequest(BaseModel):
    """Extend a PAID subscription by one period."""

    period: str = Field(..., description="30_DAYS, 3_MONTHS, 6_MONTHS or 1_YEAR")


# ==============================================================================
# Response Schemas
# ==============================================================================


class AccessRecordResponse(BaseModel):
    """A student's access record for a course."""

    model_config = ConfigDict(from_attributes=True)

    student_id: UUID
    course_id: UUID
    status: AccessStatus
    requested_at: datetime
    approved_at: datetime | None = None
    approved_by: UUID | None = None
    access_start_date: datetime | None = None
    access_end_date: datetime | None = None

    @classmethod
    def from_record(cls, record: AccessRecord) -> "AccessRecordResponse":
        """Create response from AccessRecord entity."""
        return cls.model_validate(record)


class AccessRecordListResponse(BaseModel):
    """List of access records."""

    items: list[AccessRecordResponse]
    total: int

    @classmethod
    def from_records(cls, records: list[AccessRecord]) -> "AccessRecordListResponse":
        return cls(
            items=[AccessRecordResponse.from_record(r) for r in records],
            total=len(records),
        )


class CheckAccessResponse(BaseModel):
    """Result of an access check."""

    has_access: bool
    reason: AccessReason
    status: AccessStatus | None = None
    access_start_date: datetime | None = None
    access_end_date: datetime | None = None

    @classmethod
    def from_decision(cls, decision: AccessDecision) -> "CheckAccessResponse":
        record = decision.record
        return cls(
            has_access=decision.granted,
            reason=decision.reason,
            status=record.status if record else None,
            access_start_date=record.access_start_date if record else None,
            access_end_date=record.access_end_date if record else None,
        )


class ExtensionResponse(BaseModel):
    """Result of a subscription extension."""

    record: AccessRecordResponse
    new_end_date: datetime
    period: PeriodToken
    price: Decimal

    @classmethod
    def from_result(cls, result: ExtensionResult) -> "ExtensionResponse":
        return cls(
            record=AccessRecordResponse.from_record(result.record),
            new_end_date=result.new_end,
            period=result.period,
            price=result.price,
        )
