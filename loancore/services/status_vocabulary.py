from __future__ import annotations

from enum import Enum
from types import MappingProxyType

from loancore.schemas.loan import (
    DisplayStatus,
    LoanStatus,
    StatusBadge,
    WorkflowStatus,
    normalize_status_token,
)


DEFAULT_CSS_CLASS = "status-default"
UNKNOWN_LABEL = "Unknown"

LOAN_STATUS_CLASSES = MappingProxyType(
    {
        LoanStatus.OPEN.value: "status-open",
        LoanStatus.IN_PROGRESS.value: "status-in-progress",
        LoanStatus.CLOSED.value: "status-closed",
        LoanStatus.OVERDUE.value: "status-overdue",
        LoanStatus.DEFAULTED.value: "status-defaulted",
    }
)

LOAN_STATUS_LABELS = MappingProxyType(
    {
        LoanStatus.OPEN.value: "Open",
        LoanStatus.IN_PROGRESS.value: "In Progress",
        LoanStatus.CLOSED.value: "Closed",
        LoanStatus.OVERDUE.value: "Overdue",
        LoanStatus.DEFAULTED.value: "Defaulted",
    }
)

WORKFLOW_STATUS_CLASSES = MappingProxyType(
    {
        WorkflowStatus.PENDING_APPROVAL.value: "status-pending",
        WorkflowStatus.APPROVED.value: "status-approved",
        WorkflowStatus.REJECTED.value: "status-rejected",
        WorkflowStatus.DISBURSED.value: "status-disbursed",
    }
)

WORKFLOW_STATUS_LABELS = MappingProxyType(
    {
        WorkflowStatus.PENDING_APPROVAL.value: "Pending Approval",
        WorkflowStatus.APPROVED.value: "Approved",
        WorkflowStatus.REJECTED.value: "Rejected",
        WorkflowStatus.DISBURSED.value: "Disbursed",
    }
)


def format_status_for_display(status) -> str:
    """Turn ``SCREAMING_SNAKE_CASE`` tokens into Title Case words."""
    if status is None:
        return UNKNOWN_LABEL
    raw = status.value if isinstance(status, Enum) else str(status)
    cleaned = raw.strip()
    if not cleaned:
        return UNKNOWN_LABEL
    words = [word for word in cleaned.split("_") if word]
    return " ".join(word[0].upper() + word[1:].lower() for word in words) or UNKNOWN_LABEL


def _classify(status, table) -> str:
    normalized = normalize_status_token(status)
    return table.get(normalized, DEFAULT_CSS_CLASS)


def _label(status, table) -> str:
    normalized = normalize_status_token(status)
    if not normalized:
        return UNKNOWN_LABEL
    return table.get(normalized) or format_status_for_display(status)


def get_status_color(status) -> str:
    return _classify(status, LOAN_STATUS_CLASSES)


def get_status_label(status) -> str:
    return _label(status, LOAN_STATUS_LABELS)


def get_workflow_status_color(status) -> str:
    return _classify(status, WORKFLOW_STATUS_CLASSES)


def get_workflow_status_label(status) -> str:
    return _label(status, WORKFLOW_STATUS_LABELS)


def get_status_badge(status) -> StatusBadge:
    return StatusBadge(label=get_status_label(status), css_class=get_status_color(status))


def get_workflow_status_badge(status) -> StatusBadge:
    return StatusBadge(label=get_workflow_status_label(status), css_class=get_workflow_status_color(status))


_PENDING_DISPLAY = DisplayStatus(
    label="Awaiting Approval",
    stage="awaiting-approval",
    color="amber",
    icon="clock",
    description="Loan application pending review by cashier/manager",
)
_REJECTED_DISPLAY = DisplayStatus(
    label="Rejected",
    stage="rejected",
    color="red",
    icon="x-circle",
    description="Loan application was rejected",
)
_APPROVED_DISPLAY = DisplayStatus(
    label="Awaiting Disbursement",
    stage="awaiting-disbursement",
    color="blue",
    icon="send",
    description="Loan approved and ready for disbursement",
)
_DISBURSED_DISPLAYS = MappingProxyType(
    {
        LoanStatus.OPEN: DisplayStatus(
            label="Open Loan",
            stage="open",
            color="gray",
            icon="circle",
            description="No installment made yet",
        ),
        LoanStatus.IN_PROGRESS: DisplayStatus(
            label="In Progress",
            stage="in-progress",
            color="blue",
            icon="trending-up",
            description="At least one installment made",
        ),
        LoanStatus.CLOSED: DisplayStatus(
            label="Closed (Paid Early)",
            stage="closed",
            color="green",
            icon="check-circle",
            description="Fully paid before maturity date",
        ),
        LoanStatus.OVERDUE: DisplayStatus(
            label="Overdue",
            stage="overdue",
            color="orange",
            icon="alert-circle",
            description="Payment made after maturity date",
        ),
        LoanStatus.DEFAULTED: DisplayStatus(
            label="Defaulted",
            stage="defaulted",
            color="red",
            icon="alert-triangle",
            description="No payment for 180+ days after maturity",
        ),
    }
)
_DISBURSED_FALLBACK = DisplayStatus(
    label="Disbursed",
    stage="disbursed",
    color="blue",
    icon="dollar-sign",
    description="Loan has been disbursed",
)
_OPEN_FALLBACK = DisplayStatus(
    label="Open",
    stage="open",
    color="gray",
    icon="file",
    description="Loan is open",
)


def get_display_status(workflow_status, loan_status) -> DisplayStatus:
    """Combine both status axes into a single readable stage.

    The workflow axis wins for loans that have not been disbursed; once
    disbursed, the operational status decides.
    """
    workflow = WorkflowStatus.parse(workflow_status)
    if workflow == WorkflowStatus.PENDING_APPROVAL:
        return _PENDING_DISPLAY
    if workflow == WorkflowStatus.REJECTED:
        return _REJECTED_DISPLAY
    if workflow == WorkflowStatus.APPROVED:
        return _APPROVED_DISPLAY
    if workflow == WorkflowStatus.DISBURSED:
        return _DISBURSED_DISPLAYS.get(LoanStatus.parse(loan_status), _DISBURSED_FALLBACK)
    return _OPEN_FALLBACK


def get_loan_stage(workflow_status, loan_status) -> str:
    return get_display_status(workflow_status, loan_status).stage
