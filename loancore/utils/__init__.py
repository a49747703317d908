from loancore.utils.amounts import as_amount
from loancore.utils.dates import add_months, coerce_date, coerce_moment, whole_days_between

__all__ = [
    "add_months",
    "as_amount",
    "coerce_date",
    "coerce_moment",
    "whole_days_between",
]
