from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


def normalize_status_token(value) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        value = value.value
    return str(value).strip().upper()


class WorkflowStatus(str, Enum):
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    DISBURSED = "DISBURSED"
    UNRECOGNIZED = "UNRECOGNIZED"

    @classmethod
    def parse(cls, value: str | WorkflowStatus | None) -> WorkflowStatus | None:
        if isinstance(value, cls):
            return value
        normalized = normalize_status_token(value)
        if not normalized:
            return None
        try:
            return cls(normalized)
        except ValueError:
            return cls.UNRECOGNIZED


class LoanStatus(str, Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    OVERDUE = "OVERDUE"
    DEFAULTED = "DEFAULTED"
    CLOSED = "CLOSED"
    UNRECOGNIZED = "UNRECOGNIZED"

    @classmethod
    def parse(cls, value: str | LoanStatus | None) -> LoanStatus | None:
        if isinstance(value, cls):
            return value
        normalized = normalize_status_token(value)
        if not normalized:
            return None
        try:
            return cls(normalized)
        except ValueError:
            return cls.UNRECOGNIZED


class LoanState(BaseModel):
    """The two status axes of a loan as supplied by the caller."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    workflow_status: str | None = Field(default=None, alias="workflowStatus")
    loan_status: str | None = Field(default=None, alias="loanStatus")


def coerce_loan_state(loan) -> LoanState | None:
    """Read both status axes from a ``LoanState``, a mapping or any object with status attributes."""
    if loan is None:
        return None
    if isinstance(loan, LoanState):
        return loan
    if isinstance(loan, Mapping):
        workflow = loan.get("workflow_status", loan.get("workflowStatus"))
        operational = loan.get("loan_status", loan.get("loanStatus"))
    else:
        workflow = getattr(loan, "workflow_status", getattr(loan, "workflowStatus", None))
        operational = getattr(loan, "loan_status", getattr(loan, "loanStatus", None))
    return LoanState(
        workflow_status=_raw_status(workflow),
        loan_status=_raw_status(operational),
    )


def _raw_status(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


class TrackingSnapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    installments_paid: int = Field(default=0, ge=0, alias="installmentsPaid")
    total_installments: int = Field(default=0, ge=0, alias="totalInstallments")
    amount_paid: Decimal = Field(default=Decimal("0"), ge=0, alias="amountPaid")
    balance: Decimal = Field(default=Decimal("0"), ge=0)
    penalty: Decimal = Field(default=Decimal("0"), ge=0)
    next_payment_date: date | None = Field(default=None, alias="nextPaymentDate")
    next_payment_amount: Decimal | None = Field(default=None, ge=0, alias="nextPaymentAmount")
    status: str | None = None


class StatusBadge(BaseModel):
    label: str
    css_class: str


class DisplayStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    stage: str
    color: str
    icon: str
    description: str


class StatusPairingResult(BaseModel):
    valid: bool
    reason: str | None = None


class StatusValidation(BaseModel):
    is_valid: bool
    issues: list[str] = Field(default_factory=list)


class AdminActions(BaseModel):
    can_edit: bool = False
    can_approve: bool = False
    can_reject: bool = False
    can_disburse: bool = False
    can_delete: bool = False


class OperationalActions(BaseModel):
    can_record_payment: bool = False
    can_send_reminder: bool = False
    can_view_tracking: bool = False
    can_export_report: bool = False


class AvailableActions(AdminActions, OperationalActions):
    can_view: bool = True
