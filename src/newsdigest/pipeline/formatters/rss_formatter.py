"""RSS 2.0 feed formatter."""

from typing import Optional, Sequence

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from newsdigest.core.article import Article
from newsdigest.core.digest import DigestAnalysis
from newsdigest.utils.date_utils import format_rfc822, now_utc, to_iso
from newsdigest.utils.exceptions import RenderError
from newsdigest.utils.logging import get_logger

logger = get_logger(__name__)

MAX_FEED_ITEMS = 30
DEFAULT_CHANNEL_TITLE = "Self News Agent Digest"
DEFAULT_CHANNEL_LINK = "https://example.com/self-news-agent"

_XML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


def escape_xml(value: object) -> str:
    """Escape the five XML special characters with named entities."""
    text = "" if value is None else str(value)
    for char, entity in _XML_ESCAPES:
        text = text.replace(char, entity)
    return text


class RSSFormatter:
    """Render the digest as an RSS channel: summary item first, then articles."""

    def __init__(self, channel_link: str = DEFAULT_CHANNEL_LINK, language: str = "zh-cn"):
        self.channel_link = channel_link
        self.language = language
        # Escaping is explicit through the xml filter
        self.env = Environment(
            loader=PackageLoader("newsdigest", "templates"),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
        self.env.filters["xml"] = escape_xml

    def format(
        self,
        analysis: DigestAnalysis,
        articles: Sequence[Article],
        channel_title: Optional[str] = None,
    ) -> str:
        """Format digest as RSS XML.

        Args:
            analysis: Digest analysis, rendered as the channel summary item.
            articles: Articles to list; at most 30 are included.
            channel_title: Channel title override.

        Returns:
            RSS 2.0 XML string.
        """
        items = []
        for article in articles[:MAX_FEED_ITEMS]:
            published = article.published_datetime
            items.append(
                {
                    "id": article.id,
                    "title": article.title,
                    "url": article.url,
                    "summary": article.summary,
                    "author": article.author or article.source,
                    "category": article.source_type.value,
                    "pub_date": format_rfc822(published) if published else "",
                }
            )

        try:
            template = self.env.get_template("rss_feed.xml.j2")
            xml = template.render(
                channel_title=channel_title or DEFAULT_CHANNEL_TITLE,
                channel_link=self.channel_link,
                language=self.language,
                build_date=format_rfc822(now_utc()),
                analysis=analysis,
                digest_id=to_iso(analysis.generated_at),
                items=items,
            )
        except TemplateError as e:
            raise RenderError(f"Failed to render RSS feed: {e}") from e

        logger.info("rss_formatted", items=len(items) + 1, size=len(xml))
        return xml
