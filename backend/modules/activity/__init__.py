"""
Activity module.

Append-only audit trail of security- and mutation-relevant actions.

Public API:
- ActivityLogger: Fire-and-forget recorder
- IActivityStore: Storage interface
- ActivityRecord, ActivityType, Severity: Models
"""

from .interfaces import IActivityStore
from .models import ActivityRecord, ActivityType, Severity
from .service import ActivityLogger

__all__ = [
    "IActivityStore",
    "ActivityRecord",
    "ActivityType",
    "Severity",
    "ActivityLogger",
]
