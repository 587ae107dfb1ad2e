from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import VersionAction
from .model import VersionEntry


def initial_history(created_by: Optional[str], now: datetime) -> tuple[VersionEntry, ...]:
    return (VersionEntry(version=1, action=VersionAction.CREATED, created_at=now, created_by=created_by),)


def append_version(
    history: Sequence[VersionEntry],
    *,
    version: int,
    created_by: Optional[str],
    now: datetime,
) -> tuple[VersionEntry, ...]:
    """History after an update that produced ``version``; earlier entries are never rewritten."""
    entry = VersionEntry(version=version, action=VersionAction.UPDATED, created_at=now, created_by=created_by)
    return tuple(history) + (entry,)
