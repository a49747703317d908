from __future__ import annotations

import logging
import math
from datetime import date
from decimal import MAX_EMAX, MAX_PREC, MIN_EMIN, Decimal, ROUND_HALF_UP, localcontext
from numbers import Real

from pydantic import ValidationError

from loancore.core.errors import PenaltyInputError
from loancore.core.settings import settings
from loancore.schemas.penalty import PenaltyResult, PenaltyRule, PenaltyRuleType
from loancore.utils.amounts import as_amount
from loancore.utils.dates import whole_days_between

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def default_late_rule() -> PenaltyRule:
    return PenaltyRule(
        type=PenaltyRuleType.PERCENT_PER_DAY,
        value=settings.late_penalty_rate_percent,
        cap_percent_of_outstanding=settings.late_penalty_cap_percent,
    )


def default_after_maturity_rule() -> PenaltyRule:
    return PenaltyRule(
        type=PenaltyRuleType.PERCENT_PER_DAY,
        value=settings.after_maturity_penalty_rate_percent,
    )


def _as_rule(rule, default: PenaltyRule) -> PenaltyRule:
    if rule is None:
        return default
    if isinstance(rule, PenaltyRule):
        return rule
    try:
        return PenaltyRule.model_validate(rule)
    except ValidationError as exc:
        raise PenaltyInputError("Invalid penalty rule", details=exc.errors(include_url=False)) from exc


def _as_grace_days(grace_days, rule: PenaltyRule) -> int:
    if grace_days is None:
        return rule.grace_days
    if (
        isinstance(grace_days, bool)
        or not isinstance(grace_days, (Real, Decimal))
        or not math.isfinite(grace_days)
        or grace_days < 0
        or int(grace_days) != grace_days
    ):
        raise PenaltyInputError("grace_days must be a non-negative whole number", details={"grace_days": str(grace_days)})
    return int(grace_days)


def _days_late(start, paid_date) -> int | None:
    paid = paid_date if paid_date is not None else date.today()
    days = whole_days_between(start, paid)
    if days is None:
        logger.warning("Penalty skipped: unparsable dates start=%r paid=%r", start, paid)
        return None
    return max(0, days)


def _accrue(rule: PenaltyRule, outstanding: Decimal, chargeable_days: int) -> Decimal:
    # Products and the percent shift are exact, so unbounded precision never rounds early.
    with localcontext() as ctx:
        ctx.prec = MAX_PREC
        ctx.Emax = MAX_EMAX
        ctx.Emin = MIN_EMIN
        days = Decimal(chargeable_days)
        if rule.type == PenaltyRuleType.FIXED_PER_DAY:
            penalty = rule.value * days
        else:
            penalty = outstanding * rule.value.scaleb(-2) * days
            # A zero cap counts as no cap.
            if rule.cap_percent_of_outstanding:
                cap = outstanding * rule.cap_percent_of_outstanding.scaleb(-2)
                penalty = min(penalty, cap)
        return penalty.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


_UNCOMPUTABLE = PenaltyResult(days_late=None, chargeable_days=None, penalty=None)


def calculate_late_penalty(
    due_date,
    paid_date=None,
    outstanding_amount=0,
    grace_days: int | None = None,
    rule: PenaltyRule | dict | None = None,
) -> PenaltyResult:
    """Penalty for an installment paid after ``due_date``.

    Lateness within the grace window accrues nothing. Past it, only the days
    beyond the window are charged, either as a fixed amount per day or as a
    daily percentage of ``outstanding_amount`` (optionally capped at a
    percentage of the outstanding amount). ``paid_date`` defaults to today and
    ``grace_days`` defaults to the rule's own grace period.
    """
    resolved_rule = _as_rule(rule, default_late_rule())
    outstanding = as_amount(outstanding_amount, "outstanding_amount", error=PenaltyInputError)
    grace = _as_grace_days(grace_days, resolved_rule)

    days_late = _days_late(due_date, paid_date)
    if days_late is None:
        return _UNCOMPUTABLE
    if days_late <= grace:
        return PenaltyResult(days_late=days_late, chargeable_days=0, penalty=ZERO)

    chargeable_days = days_late - grace
    return PenaltyResult(
        days_late=days_late,
        chargeable_days=chargeable_days,
        penalty=_accrue(resolved_rule, outstanding, chargeable_days),
    )


def calculate_after_maturity_penalty(
    end_date,
    paid_date=None,
    outstanding_amount=0,
    rule: PenaltyRule | dict | None = None,
) -> PenaltyResult:
    """Penalty for a balance still outstanding after the loan's ``end_date``.

    Every day past maturity is chargeable; the rule's ``grace_days`` is ignored.
    """
    resolved_rule = _as_rule(rule, default_after_maturity_rule())
    outstanding = as_amount(outstanding_amount, "outstanding_amount", error=PenaltyInputError)

    days_late = _days_late(end_date, paid_date)
    if days_late is None:
        return _UNCOMPUTABLE
    if days_late == 0:
        return PenaltyResult(days_late=0, chargeable_days=0, penalty=ZERO)

    return PenaltyResult(
        days_late=days_late,
        chargeable_days=days_late,
        penalty=_accrue(resolved_rule, outstanding, days_late),
    )
