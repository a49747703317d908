from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from loancore.core.settings import settings
from loancore.schemas.loan import LoanStatus, TrackingSnapshot
from loancore.services import status_vocabulary
from loancore.utils.amounts import as_amount
from loancore.utils.dates import add_months, coerce_date


@dataclass(frozen=True)
class LoanStatusInfo:
    status: LoanStatus
    display_name: str
    css_class: str
    days_to_maturity: int | None
    days_since_maturity: int | None
    additional_info: str | None


def is_fully_paid(total_paid, total_due) -> bool:
    tolerance = settings.fully_paid_tolerance
    due = as_amount(total_due, "total_due")
    # A loan without a payable amount is misconfigured, never "paid".
    if due <= tolerance:
        return False
    return as_amount(total_paid, "total_paid") >= due - tolerance


def _months_between(start: date, end: date) -> int:
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        months -= 1
    return months


def calculate_loan_status(
    *,
    total_due,
    total_paid,
    has_any_payments: bool,
    maturity_date=None,
    as_of: date | None = None,
) -> LoanStatus:
    if is_fully_paid(total_paid, total_due):
        return LoanStatus.CLOSED
    if not has_any_payments:
        return LoanStatus.OPEN

    today = as_of or date.today()
    maturity = coerce_date(maturity_date)
    if maturity is not None:
        if today > add_months(maturity, settings.default_after_months):
            return LoanStatus.DEFAULTED
        if today > maturity + timedelta(days=settings.overdue_grace_days):
            return LoanStatus.OVERDUE
    return LoanStatus.IN_PROGRESS


def calculate_loan_status_from_tracking(
    snapshot: TrackingSnapshot,
    maturity_date=None,
    as_of: date | None = None,
) -> LoanStatus:
    return calculate_loan_status(
        total_due=snapshot.amount_paid + snapshot.balance,
        total_paid=snapshot.amount_paid,
        has_any_payments=snapshot.installments_paid > 0 or snapshot.amount_paid > 0,
        maturity_date=maturity_date,
        as_of=as_of,
    )


def _additional_info(status: LoanStatus, maturity: date, today: date) -> str | None:
    days_to_maturity = (maturity - today).days
    days_since_maturity = (today - maturity).days
    grace = settings.overdue_grace_days

    if status == LoanStatus.OVERDUE:
        return f"{days_since_maturity - grace} days overdue"
    if status == LoanStatus.DEFAULTED:
        return f"{_months_between(maturity, today)} months in default"
    if status == LoanStatus.IN_PROGRESS:
        if days_to_maturity > 0:
            return f"{days_to_maturity} days remaining"
        if days_since_maturity <= grace:
            return f"In grace period ({grace - days_since_maturity} days left)"
        return None
    if status == LoanStatus.CLOSED:
        return "Paid in full"
    if status == LoanStatus.OPEN:
        return f"{days_to_maturity} days to start" if days_to_maturity > 0 else "Payment due"
    return None


def get_status_info(
    *,
    total_due,
    total_paid,
    has_any_payments: bool,
    maturity_date=None,
    as_of: date | None = None,
) -> LoanStatusInfo:
    today = as_of or date.today()
    status = calculate_loan_status(
        total_due=total_due,
        total_paid=total_paid,
        has_any_payments=has_any_payments,
        maturity_date=maturity_date,
        as_of=today,
    )
    maturity = coerce_date(maturity_date)
    return LoanStatusInfo(
        status=status,
        display_name=status_vocabulary.get_status_label(status),
        css_class=status_vocabulary.get_status_color(status),
        days_to_maturity=(maturity - today).days if maturity else None,
        days_since_maturity=(today - maturity).days if maturity else None,
        additional_info=_additional_info(status, maturity, today) if maturity else None,
    )
