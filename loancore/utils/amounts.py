from __future__ import annotations

from decimal import Decimal, InvalidOperation

from loancore.core.errors import InvalidInputError


def as_amount(value, field: str, *, error: type[InvalidInputError] = InvalidInputError) -> Decimal:
    """Validate a money amount: ``None`` counts as zero, anything non-numeric, non-finite or negative raises ``error``."""
    if value is None:
        return Decimal("0")
    if isinstance(value, bool):
        raise error(f"{field} must be numeric", details={field: value})
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise error(f"{field} must be numeric", details={field: str(value)}) from exc
    if not amount.is_finite():
        raise error(f"{field} must be finite", details={field: str(value)})
    if amount < 0:
        raise error(f"{field} must be >= 0", details={field: str(value)})
    return amount
