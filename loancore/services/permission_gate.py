from __future__ import annotations

import logging
from enum import Enum
from types import MappingProxyType

from loancore.core.permissions import ROLE_PERMISSIONS, Action, Role
from loancore.schemas.loan import LoanStatus, WorkflowStatus

logger = logging.getLogger(__name__)


def _token(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, str):
        return value
    return None


def allowed_actions_for_role(role: Role | str | None) -> tuple[str, ...]:
    """Actions granted to ``role`` in table order; empty for unknown roles."""
    granted = ROLE_PERMISSIONS.get(_token(role))
    if not granted:
        return ()
    return tuple(action for action in Action.list_all() if action in granted)


def can_perform(role: Role | str | None, action: Action | str | None) -> bool:
    """Role capability check. Roles are matched case-sensitively; unknown roles or actions are denied."""
    role_key = _token(role)
    action_key = _token(action)
    granted = ROLE_PERMISSIONS.get(role_key)
    if granted is None or action_key is None:
        logger.debug("Denied action=%s for unknown role=%s", action_key, role_key, extra={"actor_role": role_key})
        return False
    allowed = action_key in granted
    if not allowed:
        logger.debug("Denied action=%s for role=%s", action_key, role_key, extra={"actor_role": role_key})
    return allowed


def can_modify_loan(loan_status, role) -> bool:
    # Only loans still awaiting approval may be edited or deleted.
    if _token(loan_status) == WorkflowStatus.PENDING_APPROVAL.value:
        return can_perform(role, Action.EDIT)
    return False


def can_approve_loan(loan_status, role) -> bool:
    if _token(loan_status) == WorkflowStatus.PENDING_APPROVAL.value:
        return can_perform(role, Action.APPROVE)
    return False


def can_disburse_loan(loan_status, role) -> bool:
    if _token(loan_status) == WorkflowStatus.APPROVED.value:
        return can_perform(role, Action.DISBURSE)
    return False


_STATUS_ACTIONS = MappingProxyType(
    {
        WorkflowStatus.PENDING_APPROVAL.value: (Action.EDIT, Action.DELETE, Action.APPROVE, Action.REJECT),
        WorkflowStatus.APPROVED.value: (Action.DISBURSE,),
        WorkflowStatus.DISBURSED.value: (),
        LoanStatus.IN_PROGRESS.value: (),
        LoanStatus.OVERDUE.value: (),
        LoanStatus.CLOSED.value: (),
        WorkflowStatus.REJECTED.value: (Action.DELETE,),
    }
)


def get_allowed_actions(loan_status, role) -> list[str]:
    """Ordered list of actions ``role`` may take on a loan in ``loan_status``; ``view`` always comes first."""
    actions = [Action.VIEW.value]
    for candidate in _STATUS_ACTIONS.get(_token(loan_status), ()):
        if can_perform(role, candidate):
            actions.append(candidate.value)
    return actions
