from __future__ import annotations

from loancore.schemas.loan import (
    AdminActions,
    AvailableActions,
    LoanStatus,
    OperationalActions,
    WorkflowStatus,
    coerce_loan_state,
    normalize_status_token,
)


def _workflow_of(loan) -> WorkflowStatus | None:
    state = coerce_loan_state(loan)
    if state is None:
        return None
    return WorkflowStatus.parse(state.workflow_status)


def should_show_approve_button(loan) -> bool:
    return _workflow_of(loan) == WorkflowStatus.PENDING_APPROVAL


def should_show_reject_button(loan) -> bool:
    return _workflow_of(loan) == WorkflowStatus.PENDING_APPROVAL


def should_show_disburse_button(loan) -> bool:
    return _workflow_of(loan) == WorkflowStatus.APPROVED


def should_show_edit_button(loan) -> bool:
    return _workflow_of(loan) == WorkflowStatus.PENDING_APPROVAL


def should_show_delete_button(loan) -> bool:
    return _workflow_of(loan) in {WorkflowStatus.PENDING_APPROVAL, WorkflowStatus.REJECTED}


_GATED_ACTIONS = {
    "APPROVE": should_show_approve_button,
    "REJECT": should_show_reject_button,
    "DISBURSE": should_show_disburse_button,
    "EDIT": should_show_edit_button,
}


def can_perform_action(loan, action) -> bool:
    """Status-only check for the gated workflow actions; does not consult a role."""
    if loan is None or not action:
        return False
    predicate = _GATED_ACTIONS.get(normalize_status_token(action))
    if predicate is None:
        return False
    return predicate(loan)


def get_available_admin_actions(workflow_status) -> AdminActions:
    workflow = WorkflowStatus.parse(workflow_status)
    if workflow == WorkflowStatus.PENDING_APPROVAL:
        return AdminActions(can_edit=True, can_approve=True, can_reject=True, can_delete=True)
    if workflow == WorkflowStatus.APPROVED:
        return AdminActions(can_disburse=True)
    if workflow == WorkflowStatus.REJECTED:
        return AdminActions(can_delete=True)
    return AdminActions()


def get_available_operational_actions(workflow_status, loan_status) -> OperationalActions:
    # Only disbursed loans carry repayment activity.
    if WorkflowStatus.parse(workflow_status) != WorkflowStatus.DISBURSED:
        return OperationalActions()

    operational = LoanStatus.parse(loan_status)
    if operational == LoanStatus.OPEN:
        return OperationalActions(can_view_tracking=True)
    if operational == LoanStatus.IN_PROGRESS:
        return OperationalActions(can_record_payment=True, can_view_tracking=True)
    if operational == LoanStatus.OVERDUE:
        return OperationalActions(can_record_payment=True, can_send_reminder=True, can_view_tracking=True)
    if operational == LoanStatus.CLOSED:
        return OperationalActions(can_view_tracking=True, can_export_report=True)
    if operational == LoanStatus.DEFAULTED:
        return OperationalActions(can_view_tracking=True, can_export_report=True, can_send_reminder=True)
    return OperationalActions()


def get_all_available_actions(workflow_status, loan_status) -> AvailableActions:
    admin = get_available_admin_actions(workflow_status)
    operational = get_available_operational_actions(workflow_status, loan_status)
    return AvailableActions(**admin.model_dump(), **operational.model_dump(), can_view=True)
