from __future__ import annotations

from enum import Enum


class TimesheetState(str, Enum):
    """Lifecycle of one working weekly timesheet."""

    UNINITIALIZED = "UNINITIALIZED"
    SEEDED_NEW = "SEEDED_NEW"
    SEEDED_EXISTING = "SEEDED_EXISTING"
    EDITED = "EDITED"
    SUBMITTING = "SUBMITTING"


class SubmissionAction(str, Enum):
    """What the gateway did (or would have done) with one timesheet."""

    CREATED = "CREATED"
    UPDATED = "UPDATED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "danger"


class VersionAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
