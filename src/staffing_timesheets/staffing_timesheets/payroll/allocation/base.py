from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

from ...positions.model import PositionRateProfile
from ...timesheets.model import DailyEntry


@dataclass(frozen=True)
class OvertimeAllocation:
    """Weekly split (authoritative) plus the per-day overtime breakdown."""

    regular_hours: float
    overtime_hours: float
    entries: tuple[DailyEntry, ...]


class OvertimeAllocator(ABC):
    """Strategy Pattern: how a week's hours are split into regular/overtime."""

    @abstractmethod
    def allocate(self, entries: Sequence[DailyEntry], profile: PositionRateProfile) -> OvertimeAllocation:
        raise NotImplementedError
