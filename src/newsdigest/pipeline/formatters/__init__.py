"""Output formatters."""

from newsdigest.pipeline.formatters.markdown_formatter import MarkdownFormatter, daily_filename
from newsdigest.pipeline.formatters.notification_formatter import NotificationFormatter
from newsdigest.pipeline.formatters.readme_formatter import ReadmeFormatter
from newsdigest.pipeline.formatters.rss_formatter import RSSFormatter, escape_xml

__all__ = [
    "MarkdownFormatter",
    "NotificationFormatter",
    "RSSFormatter",
    "ReadmeFormatter",
    "daily_filename",
    "escape_xml",
]
