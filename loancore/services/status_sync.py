from __future__ import annotations

from types import MappingProxyType

from loancore.core.errors import StatusPairingError
from loancore.core.logging import record_audit_event
from loancore.schemas.loan import (
    LoanStatus,
    StatusPairingResult,
    StatusValidation,
    WorkflowStatus,
    coerce_loan_state,
    normalize_status_token,
)


EXPECTED_LOAN_STATUS = MappingProxyType(
    {
        WorkflowStatus.PENDING_APPROVAL: LoanStatus.OPEN,
        WorkflowStatus.APPROVED: LoanStatus.OPEN,
        WorkflowStatus.REJECTED: LoanStatus.CLOSED,
        WorkflowStatus.DISBURSED: LoanStatus.OPEN,
    }
)

ALLOWED_LOAN_STATUSES = MappingProxyType(
    {
        WorkflowStatus.PENDING_APPROVAL: frozenset({LoanStatus.OPEN}),
        WorkflowStatus.APPROVED: frozenset({LoanStatus.OPEN}),
        WorkflowStatus.REJECTED: frozenset({LoanStatus.CLOSED}),
        WorkflowStatus.DISBURSED: frozenset(
            {
                LoanStatus.OPEN,
                LoanStatus.IN_PROGRESS,
                LoanStatus.OVERDUE,
                LoanStatus.DEFAULTED,
                LoanStatus.CLOSED,
            }
        ),
    }
)


def get_expected_loan_status(workflow_status) -> LoanStatus:
    """Operational status a loan should carry right after entering ``workflow_status``."""
    workflow = WorkflowStatus.parse(workflow_status)
    return EXPECTED_LOAN_STATUS.get(workflow, LoanStatus.OPEN)


def validate_status_pairing(workflow_status, loan_status) -> StatusPairingResult:
    workflow = WorkflowStatus.parse(workflow_status)
    operational = LoanStatus.parse(loan_status)
    if workflow is None:
        return StatusPairingResult(valid=False, reason="workflowStatus is missing")
    if operational is None:
        return StatusPairingResult(valid=False, reason="loanStatus is missing")
    allowed = ALLOWED_LOAN_STATUSES.get(workflow)
    if allowed is None:
        return StatusPairingResult(valid=False, reason=f"Unknown workflowStatus {workflow_status!s}")
    if operational not in allowed:
        expected = ", ".join(sorted(status.value for status in allowed))
        return StatusPairingResult(
            valid=False,
            reason=(
                f"loanStatus={normalize_status_token(loan_status)} "
                f"is not allowed with workflowStatus={workflow.value} (expected {expected})"
            ),
        )
    return StatusPairingResult(valid=True)


def are_statuses_synchronized(workflow_status, loan_status) -> bool:
    return validate_status_pairing(workflow_status, loan_status).valid


def validate_loan_statuses(loan) -> StatusValidation:
    """Collect data-quality issues for a loan's status fields."""
    state = coerce_loan_state(loan)
    if state is None:
        return StatusValidation(is_valid=False, issues=["Missing loan"])

    issues: list[str] = []
    if not state.workflow_status:
        issues.append("Missing workflowStatus field")
    if not state.loan_status:
        issues.append("Missing loanStatus field")
    if state.workflow_status and state.loan_status:
        if not are_statuses_synchronized(state.workflow_status, state.loan_status):
            issues.append(
                f"Status mismatch: workflowStatus={state.workflow_status}, loanStatus={state.loan_status}"
            )
    return StatusValidation(is_valid=not issues, issues=issues)


def ensure_status_pairing(workflow_status, loan_status, *, actor_role=None) -> None:
    """Raise ``StatusPairingError`` unless the pair satisfies the pairing rules.

    Refusals are written to the audit stream, attributed to ``actor_role`` when given.
    """
    result = validate_status_pairing(workflow_status, loan_status)
    if not result.valid:
        record_audit_event(
            "status_pairing_refused",
            resource_type="loan",
            actor_role=actor_role,
            details={"reason": result.reason, "workflow_status": workflow_status, "loan_status": loan_status},
        )
        raise StatusPairingError(
            result.reason or "Invalid status pairing",
            details={"workflow_status": workflow_status, "loan_status": loan_status},
        )
