from enum import Enum
from types import MappingProxyType
from typing import Iterable, List


class Action(str, Enum):
    # Loan records
    VIEW = "view"
    EDIT = "edit"
    DELETE = "delete"
    CREATE_LOAN = "createLoan"

    # Approval workflow
    APPROVE = "approve"
    REJECT = "reject"
    DISBURSE = "disburse"

    # Repayments
    RECORD_PAYMENT = "recordPayment"
    REVERSE_PAYMENT = "reversePayment"

    # Loan products
    EDIT_LOAN_PRODUCT = "editLoanProduct"
    DELETE_LOAN_PRODUCT = "deleteLoanProduct"

    @classmethod
    def list_all(cls) -> List[str]:
        return [action.value for action in cls]

    @classmethod
    def normalize(cls, values: Iterable[str]) -> List[str]:
        """Return unique action values that are valid members, in input order."""
        seen = set()
        normalized: list[str] = []
        for value in values:
            try:
                action = cls(value)
            except ValueError:
                continue
            if action.value not in seen:
                seen.add(action.value)
                normalized.append(action.value)
        return normalized


class Role(str, Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    LOAN_OFFICER = "LOAN_OFFICER"
    CASHIER = "CASHIER"
    VIEWER = "VIEWER"


ROLE_PERMISSIONS = MappingProxyType(
    {
        Role.ADMIN.value: frozenset(Action.list_all()),
        Role.MANAGER.value: frozenset(
            Action.normalize(
                [
                    Action.VIEW,
                    Action.APPROVE,
                    Action.REJECT,
                    Action.DISBURSE,
                    Action.RECORD_PAYMENT,
                ]
            )
        ),
        Role.LOAN_OFFICER.value: frozenset(
            Action.normalize(
                [
                    Action.VIEW,
                    Action.EDIT,
                    Action.DELETE,
                    Action.CREATE_LOAN,
                ]
            )
        ),
        Role.CASHIER.value: frozenset(
            Action.normalize(
                [
                    Action.VIEW,
                    Action.RECORD_PAYMENT,
                    Action.DISBURSE,
                ]
            )
        ),
        Role.VIEWER.value: frozenset([Action.VIEW.value]),
    }
)
