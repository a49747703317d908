from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PenaltyRuleType(str, Enum):
    FIXED_PER_DAY = "fixed_per_day"
    PERCENT_PER_DAY = "percent_per_day"


class PenaltyRule(BaseModel):
    """Immutable penalty configuration.

    ``value`` is an amount per day for ``fixed_per_day`` and a percentage of the
    outstanding amount per day for ``percent_per_day``. ``grace_days`` only
    applies to late-payment penalties.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    type: PenaltyRuleType = PenaltyRuleType.PERCENT_PER_DAY
    value: Decimal = Field(ge=0)
    cap_percent_of_outstanding: Decimal | None = Field(default=None, ge=0, alias="capPercentOfOutstanding")
    grace_days: int = Field(default=0, ge=0, alias="graceDays")


class PenaltyResult(BaseModel):
    model_config = ConfigDict(frozen=True, json_encoders={Decimal: lambda value: str(value)})

    days_late: int | None
    chargeable_days: int | None
    penalty: Decimal | None

    @property
    def is_computable(self) -> bool:
        return self.days_late is not None
