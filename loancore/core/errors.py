from __future__ import annotations

from typing import Any


class LoanCoreError(Exception):
    """Base error carrying a machine-readable code and structured details."""

    default_code = "loan_core_error"

    def __init__(self, message: str, *, code: str | None = None, details: Any | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details


class InvalidInputError(LoanCoreError, ValueError):
    default_code = "invalid_input"


class PenaltyInputError(InvalidInputError):
    default_code = "invalid_penalty_input"


class StatusPairingError(LoanCoreError, ValueError):
    default_code = "invalid_status_pairing"


def _normalize_details(details: Any) -> dict:
    if details is None:
        return {}
    if isinstance(details, dict):
        return details
    if isinstance(details, list):
        return {"errors": details}
    if isinstance(details, str):
        return {"detail": details}
    return {"detail": str(details)}


def build_error_payload(exc: Exception) -> dict:
    """Render an exception into the ``code/message/data/details`` envelope used by HTTP callers."""
    if isinstance(exc, LoanCoreError):
        return {
            "code": exc.code,
            "message": exc.message,
            "data": None,
            "details": _normalize_details(exc.details),
        }
    return {
        "code": "internal_error",
        "message": "Internal error",
        "data": None,
        "details": {},
    }
