import json
import logging
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from loancore.core import logging as core_logging
from loancore.core.context import get_request_id, set_actor_role, set_request_id
from loancore.core.errors import InvalidInputError, LoanCoreError, PenaltyInputError, build_error_payload
from loancore.core.permissions import Action
from loancore.core.settings import Settings
from loancore.utils import add_months, as_amount, coerce_date, coerce_moment, whole_days_between


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("LATE_PENALTY_RATE_PERCENT", raising=False)
    settings = Settings(_env_file=None)
    assert settings.late_penalty_rate_percent == Decimal("0.2")
    assert settings.late_penalty_cap_percent == Decimal("100")
    assert settings.after_maturity_penalty_rate_percent == Decimal("0.3")
    assert settings.overdue_grace_days == 14
    assert settings.default_after_months == 6


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("OVERDUE_GRACE_DAYS", "7")
    monkeypatch.setenv("LATE_PENALTY_RATE_PERCENT", "0.5")
    settings = Settings(_env_file=None)
    assert settings.overdue_grace_days == 7
    assert settings.late_penalty_rate_percent == Decimal("0.5")


def test_json_formatter_includes_context():
    set_request_id("req-123")
    set_actor_role("MANAGER")
    record = logging.LogRecord("loancore.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    core_logging.RequestContextFilter().filter(record)
    payload = json.loads(core_logging.JsonFormatter(stream_label="audit").format(record))
    assert payload["message"] == "hello world"
    assert payload["stream"] == "audit"
    assert payload["request_id"] == "req-123"
    assert payload["actor_role"] == "MANAGER"


def test_context_is_reset_between_tests():
    assert get_request_id() == "-"


def test_configure_logging_installs_json_handlers(restore_loancore_loggers):
    core_logging.configure_logging("warning")
    logger = logging.getLogger("loancore")
    assert logger.level == logging.WARNING
    assert logger.propagate is False
    assert isinstance(logger.handlers[0].formatter, core_logging.JsonFormatter)
    assert core_logging.get_audit_logger().name == "loancore.audit"


def test_error_payload_envelope():
    payload = build_error_payload(PenaltyInputError("bad amount", details={"outstanding_amount": "nan"}))
    assert payload == {
        "code": "invalid_penalty_input",
        "message": "bad amount",
        "data": None,
        "details": {"outstanding_amount": "nan"},
    }
    assert build_error_payload(LoanCoreError("x", code="custom", details=["a"]))["details"] == {"errors": ["a"]}
    assert build_error_payload(LoanCoreError("x", details="why"))["details"] == {"detail": "why"}
    assert build_error_payload(RuntimeError("boom"))["code"] == "internal_error"


def test_action_normalize_drops_unknown_and_duplicates():
    assert Action.normalize(["view", "fly", Action.VIEW, "disburse"]) == ["view", "disburse"]


def test_date_helpers():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2024, 8, 31), 6) == date(2025, 2, 28)
    assert coerce_date("2024-02-29") == date(2024, 2, 29)
    assert coerce_date("2024-02-29T10:00:00Z") == date(2024, 2, 29)
    assert coerce_date(datetime(2024, 5, 1, 12)) == date(2024, 5, 1)
    assert coerce_date("   ") is None
    assert coerce_date(20240101) is None
    assert whole_days_between("2024-01-01", "2024-01-06") == 5
    assert whole_days_between("2024-01-06", "2024-01-01") == -5
    assert whole_days_between("garbage", "2024-01-01") is None
    assert whole_days_between(datetime(2024, 1, 1, 23), datetime(2024, 1, 3, 1)) == 1
    assert whole_days_between(datetime(2024, 1, 3, 1), datetime(2024, 1, 1, 23)) == -2
    assert whole_days_between(date(2024, 1, 1), "2024-01-02T12:00:00") == 1
    assert whole_days_between("2024-01-01T23:00:00-05:00", "2024-01-02T01:00:00Z") == -1
    assert coerce_moment("2024-01-02T01:00:00Z") == datetime(2024, 1, 2, 1, tzinfo=timezone.utc)
    assert coerce_moment("2024-01-02") == date(2024, 1, 2)


def test_as_amount_validates_and_picks_error_type():
    assert as_amount(None, "x") == Decimal("0")
    assert as_amount("12.50", "x") == Decimal("12.50")
    with pytest.raises(InvalidInputError) as excinfo:
        as_amount("abc", "total_due")
    assert excinfo.value.code == "invalid_input"
    assert excinfo.value.details == {"total_due": "abc"}

    with pytest.raises(PenaltyInputError) as excinfo:
        as_amount(float("inf"), "outstanding_amount", error=PenaltyInputError)
    assert isinstance(excinfo.value, InvalidInputError)
    assert excinfo.value.code == "invalid_penalty_input"


def test_record_keeps_its_own_actor_role():
    set_actor_role("CASHIER")
    record = logging.LogRecord("loancore.test", logging.DEBUG, __file__, 1, "denied", (), None)
    record.actor_role = "VIEWER"
    core_logging.RequestContextFilter().filter(record)
    assert record.actor_role == "VIEWER"

    bare = logging.LogRecord("loancore.test", logging.DEBUG, __file__, 1, "denied", (), None)
    core_logging.RequestContextFilter().filter(bare)
    assert bare.actor_role == "CASHIER"


def test_audit_event_renders_structured_fields(caplog):
    set_request_id("req-9")
    with caplog.at_level(logging.INFO, logger="loancore.audit"):
        core_logging.record_audit_event(
            "status_pairing_refused",
            resource_type="loan",
            actor_role="ADMIN",
            details={"workflow_status": "REJECTED", "loan_status": "OPEN"},
        )
    (record,) = caplog.records
    assert record.levelno == logging.WARNING
    assert record.getMessage() == "status_pairing_refused: workflow_status=REJECTED, loan_status=OPEN"

    core_logging.RequestContextFilter().filter(record)
    payload = json.loads(core_logging.JsonFormatter(stream_label="audit").format(record))
    assert payload["action"] == "status_pairing_refused"
    assert payload["resource_type"] == "loan"
    assert payload["actor_role"] == "ADMIN"
    assert payload["request_id"] == "req-9"
    assert payload["details"] == {"workflow_status": "REJECTED", "loan_status": "OPEN"}
