"""
Recurrence rules

A recurring pattern's rule is one of a closed set of variants, so the
expander can dispatch on the variant type instead of inspecting loose fields.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class DailyRule:
    kind = "daily"


@dataclass(frozen=True)
class WeeklyRule:
    day_of_week: int  # 0=Sunday
    kind = "weekly"


@dataclass(frozen=True)
class MonthlyRule:
    """
    Either a fixed ``day_of_month`` or the ``week_of_month``-th
    ``day_of_week`` of each month (e.g. the 2nd Friday).
    """

    day_of_month: Optional[int] = None
    week_of_month: Optional[int] = None
    day_of_week: Optional[int] = None
    kind = "monthly"


@dataclass(frozen=True)
class OffsetsRule:
    """Explicit day offsets counted from the pattern's ``valid_from``"""

    days: Tuple[int, ...]
    kind = "offsets"


RecurrenceRule = Union[DailyRule, WeeklyRule, MonthlyRule, OffsetsRule]
