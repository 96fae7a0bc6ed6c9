"""Shared result type for push notification services."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class NotificationResult:
    """Result of a notification attempt."""

    success: bool
    message: str
    message_id: Optional[str] = None
    skipped: bool = False
