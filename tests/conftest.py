"""Global test fixtures and shared test infrastructure.

Provides:
- Environment variable defaults (must be set before any loancore import)
- Model factories (make_loan, make_rule, make_snapshot)
- Fixtures resetting request context and logger state between tests
"""

from __future__ import annotations

import os

# Environment defaults must be set before importing loancore, which triggers
# pydantic Settings validation on import.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import logging
from decimal import Decimal
from typing import Any

import pytest

from loancore.core.context import clear_context
from loancore.schemas.loan import LoanState, TrackingSnapshot
from loancore.schemas.penalty import PenaltyRule, PenaltyRuleType


# ---------------------------------------------------------------------------
# Status fixtures satisfying the pairing rules
# ---------------------------------------------------------------------------

VALID_STATUS_PAIRS: list[tuple[str, str]] = [
    ("PENDING_APPROVAL", "OPEN"),
    ("APPROVED", "OPEN"),
    ("REJECTED", "CLOSED"),
    ("DISBURSED", "OPEN"),
    ("DISBURSED", "IN_PROGRESS"),
    ("DISBURSED", "OVERDUE"),
    ("DISBURSED", "DEFAULTED"),
    ("DISBURSED", "CLOSED"),
]


# ---------------------------------------------------------------------------
# Model factories
# ---------------------------------------------------------------------------


def make_loan(
    *,
    workflow_status: str | None = "PENDING_APPROVAL",
    loan_status: str | None = "OPEN",
) -> LoanState:
    return LoanState(workflow_status=workflow_status, loan_status=loan_status)


def make_rule(
    *,
    type: PenaltyRuleType = PenaltyRuleType.PERCENT_PER_DAY,
    value: str | Decimal = "0.2",
    **overrides: Any,
) -> PenaltyRule:
    defaults: dict[str, Any] = dict(type=type, value=Decimal(str(value)))
    defaults.update(overrides)
    return PenaltyRule(**defaults)


def make_snapshot(**overrides: Any) -> TrackingSnapshot:
    defaults: dict[str, Any] = dict(
        installments_paid=0,
        total_installments=12,
        amount_paid=Decimal("0"),
        balance=Decimal("120000"),
        penalty=Decimal("0"),
        next_payment_date=None,
        next_payment_amount=Decimal("10000"),
        status="Open",
    )
    defaults.update(overrides)
    return TrackingSnapshot(**defaults)


# ---------------------------------------------------------------------------
# Shared pytest fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_context():
    clear_context()
    yield
    clear_context()


@pytest.fixture
def restore_loancore_loggers():
    """Undo ``configure_logging`` so caplog keeps seeing loancore records."""
    names = ("loancore", "loancore.audit")
    saved = {
        name: (logging.getLogger(name).handlers[:], logging.getLogger(name).propagate, logging.getLogger(name).level)
        for name in names
    }
    yield
    for name, (handlers, propagate, level) in saved.items():
        logger = logging.getLogger(name)
        logger.handlers = handlers
        logger.propagate = propagate
        logger.setLevel(level)
