from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..core.constants import DEFAULT_NOTIFICATION_TTL_SECONDS
from ..core.enums import NotificationLevel


@dataclass(frozen=True)
class Notification:
    """Transient status message. The presentation layer decides when to hide it."""

    message: str
    level: NotificationLevel
    expires_at: datetime

    @classmethod
    def create(
        cls,
        message: str,
        level: NotificationLevel,
        *,
        now: datetime,
        ttl_seconds: float = DEFAULT_NOTIFICATION_TTL_SECONDS,
    ) -> "Notification":
        return cls(message=message, level=level, expires_at=now + timedelta(seconds=ttl_seconds))

    def is_active(self, now: datetime) -> bool:
        return now < self.expires_at

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "level": self.level.value,
            "expires_at": self.expires_at.isoformat(),
        }


def active_or_none(notification: Optional[Notification], now: datetime) -> Optional[Notification]:
    if notification is None or not notification.is_active(now):
        return None
    return notification
