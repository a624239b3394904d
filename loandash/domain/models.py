"""Domain models - the persisted LoanDash document and the records it holds.

The document is exchanged with the browser client as a single JSON object,
so every record keeps the client's camelCase keys (``totalAmount``,
``recurrenceSettings``...) through a shared alias generator. Timestamps stay
ISO strings exactly as the client wrote them; the scheduler parses them on
demand so untouched records serialize back byte for byte.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class DebtType(str, Enum):
    FRIEND = "Friend/Family Credit"
    BANK_LOAN = "Bank Loan"


class RecurrenceType(str, Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    BI_WEEKLY = "bi-weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class PaymentAutomation(str, Enum):
    MANUAL = "Manual"
    AUTO = "Auto"


class ObligationStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    DEFAULTED = "defaulted"


class AutoArchivePolicy(str, Enum):
    NEVER = "never"
    IMMEDIATELY = "immediately"
    ONE_DAY = "1day"
    SEVEN_DAYS = "7days"
    THIRTY_DAYS = "30days"


class ObligationKind(str, Enum):
    """Which side of the ledger a record lives on"""

    DEBTS = "debts"
    LOANS = "loans"


class CamelModel(BaseModel):
    """Base for records stored with camelCase keys; unknown keys are preserved"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class Payment(CamelModel):
    """One monetary movement against a debt or loan"""

    id: str
    amount: float
    date: str
    method: Optional[str] = None
    is_partial: Optional[bool] = None
    notes: Optional[str] = None
    # Set on scheduler-generated payments only (1-based occurrence number)
    auto_payment_sequence_number: Optional[int] = None


class RecurrenceSettings(CamelModel):
    type: Optional[str] = None
    end_date: Optional[str] = None
    max_occurrences: Optional[int] = None
    first_payment_date: Optional[str] = None
    payment_amount: Optional[float] = None


class ReminderSettings(CamelModel):
    enabled: bool = True
    days_before: int = 3


class NotificationSettings(CamelModel):
    enabled: bool = True
    default_reminder_days: int = 3
    browser_notifications: Optional[bool] = True
    email_notifications: Optional[bool] = False


class Obligation(CamelModel):
    """Fields shared by debts (I owe) and loans (owed to me)"""

    id: str
    name: str
    total_amount: float
    start_date: str
    due_date: str
    description: Optional[str] = None
    status: str = ObligationStatus.ACTIVE.value
    currency: Optional[str] = None
    reminder_settings: Optional[ReminderSettings] = None
    is_recurring: Optional[bool] = None
    recurrence_settings: Optional[RecurrenceSettings] = None

    # Scheduler output
    next_payment_date: Optional[str] = None
    suggested_payment_amount: Optional[float] = None

    # Interest already folded into the amount owed (Bank Loans)
    accrued_interest: Optional[float] = None

    # Archive stamp
    archived_date: Optional[str] = None
    auto_archived: Optional[bool] = None

    @property
    def history(self) -> List[Payment]:
        raise NotImplementedError


class Debt(Obligation):
    """Money the user owes"""

    type: str = DebtType.FRIEND.value
    payments: List[Payment] = Field(default_factory=list)
    interest_rate: Optional[float] = None
    payment_automation: Optional[str] = None
    last_auto_payment_date: Optional[str] = None

    @property
    def history(self) -> List[Payment]:
        return self.payments


class Loan(Obligation):
    """Money owed to the user"""

    repayments: List[Payment] = Field(default_factory=list)

    @property
    def history(self) -> List[Payment]:
        return self.repayments


class AppDocument(BaseModel):
    """Root persisted object; keys mirror the browser's storage namespace"""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    dark_mode: bool = Field(True, alias="loandash-dark-mode")
    debts: List[Debt] = Field(default_factory=list, alias="loandash-debts")
    loans: List[Loan] = Field(default_factory=list, alias="loandash-loans")
    archived_debts: List[Debt] = Field(default_factory=list, alias="loandash-archived-debts")
    archived_loans: List[Loan] = Field(default_factory=list, alias="loandash-archived-loans")
    auto_archive: str = Field(AutoArchivePolicy.NEVER.value, alias="loandash-auto-archive")
    default_currency: str = Field("MAD", alias="loandash-default-currency")
    notification_settings: NotificationSettings = Field(
        default_factory=NotificationSettings, alias="loandash-notification-settings"
    )

    def to_json_dict(self) -> Dict[str, Any]:
        """Wire/disk representation: aliased keys, unset optionals omitted"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def active(self, kind: ObligationKind) -> List[Obligation]:
        return self.debts if kind == ObligationKind.DEBTS else self.loans

    def archived(self, kind: ObligationKind) -> List[Obligation]:
        return self.archived_debts if kind == ObligationKind.DEBTS else self.archived_loans
