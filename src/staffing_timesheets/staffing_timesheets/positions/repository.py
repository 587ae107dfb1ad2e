from __future__ import annotations

from typing import Optional, Protocol

from .model import PositionRateProfile


class PositionRepository(Protocol):
    def get_rate_profile(self, position_id: str) -> Optional[PositionRateProfile]:
        raise NotImplementedError
