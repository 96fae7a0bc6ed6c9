"""Supporting services: delivery, configuration files and metrics."""

from newsdigest.services.config_loader import ConfigLoader
from newsdigest.services.email_service import EmailService
from newsdigest.services.metrics_tracker import MetricsTracker
from newsdigest.services.notification import NotificationResult
from newsdigest.services.telegram_service import TelegramService

__all__ = [
    "ConfigLoader",
    "EmailService",
    "MetricsTracker",
    "NotificationResult",
    "TelegramService",
]
