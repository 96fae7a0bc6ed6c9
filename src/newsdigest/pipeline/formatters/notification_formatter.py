"""Plain-text bodies for push notifications."""

from typing import List

from newsdigest.core.digest import DigestAnalysis
from newsdigest.utils.text_utils import to_readable_text

TELEGRAM_HIGHLIGHTS = 6
EMAIL_HIGHLIGHTS = 8


def _first_line(text: str) -> str:
    lines = text.splitlines()
    return lines[0] if lines else ""


class NotificationFormatter:
    """Build Telegram and email texts from the analysis."""

    def telegram_text(self, analysis: DigestAnalysis, doc_link: str) -> str:
        highlights = [
            f"{i}. {_first_line(to_readable_text(item))}"
            for i, item in enumerate(analysis.highlights[:TELEGRAM_HIGHLIGHTS], start=1)
        ]
        return "\n".join(
            [
                f"🤖 {to_readable_text(analysis.title)}",
                "",
                to_readable_text(analysis.overview),
                "",
                "⭐ Worth a look:",
                *highlights,
                "",
                f"📄 Full report: {doc_link}",
            ]
        )

    def email_subject(self, date: str) -> str:
        return f"🤖 Daily Picks - {date}"

    def email_text(self, analysis: DigestAnalysis, doc_link: str) -> str:
        highlights: List[str] = [
            f"{i}. {to_readable_text(item)}"
            for i, item in enumerate(analysis.highlights[:EMAIL_HIGHLIGHTS], start=1)
        ]
        return "\n".join(
            [
                to_readable_text(analysis.title),
                "",
                to_readable_text(analysis.overview),
                "",
                "⭐ Worth a look:",
                *highlights,
                "",
                f"📄 Full report: {doc_link}",
            ]
        )
