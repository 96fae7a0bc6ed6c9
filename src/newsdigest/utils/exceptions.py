"""Custom exceptions for NewsDigest."""


class NewsDigestError(Exception):
    """Base exception for NewsDigest."""


class ConfigurationError(NewsDigestError):
    """Configuration error."""


class PipelineError(NewsDigestError):
    """Pipeline execution error."""


class CollectorError(PipelineError):
    """Collector error."""


class RenderError(PipelineError):
    """Output rendering error."""


class StorageError(NewsDigestError):
    """Persistent storage error."""


class APIError(NewsDigestError):
    """External API error."""


class AIServiceError(APIError):
    """AI service error."""


class RateLimitError(APIError):
    """Rate limit exceeded error."""


class NotificationError(NewsDigestError):
    """Push notification delivery error."""
