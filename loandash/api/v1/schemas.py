"""Pydantic schemas for API request/response validation"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from loandash.utils.date_utils import parse_timestamp


class PaymentDraft(BaseModel):
    """Request body for adding or editing a payment (camelCase, like the stored document)"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    amount: float = Field(..., gt=0, description="Payment amount")
    date: str = Field(..., min_length=1, description="ISO date or timestamp of the payment")
    method: Optional[str] = None
    notes: Optional[str] = None
    is_partial: Optional[bool] = None

    @field_validator("date")
    @classmethod
    def date_must_parse(cls, value: str) -> str:
        parse_timestamp(value)
        return value


class ArchiveRequest(BaseModel):
    """Request body for archiving a record by hand"""

    status: Literal["completed", "defaulted"] = "completed"


class MessageResponse(BaseModel):
    message: str


class SummaryResponse(BaseModel):
    """Response for GET /api/summary"""

    total_i_owe: float
    total_owed_to_me: float
    total_interest: float
    active_debts: int
    active_loans: int
    archived_debts: int
    archived_loans: int
    overdue_count: int
    has_overdue_debts: bool
    has_overdue_loans: bool


class VersionResponse(BaseModel):
    """Response for GET /api/version"""

    current: str
    latest: Optional[str] = None
    has_update: bool
    release_url: str
