from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class WeekRange:
    """Sunday-to-Saturday calendar week."""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class WeekOption:
    """Read-model for week pickers (value is the ISO start date)."""

    value: str
    label: str
    week: WeekRange

    def to_dict(self) -> dict:
        return {
            "value": self.value,
            "label": self.label,
            "week_start": self.week.start.isoformat(),
            "week_end": self.week.end.isoformat(),
        }
