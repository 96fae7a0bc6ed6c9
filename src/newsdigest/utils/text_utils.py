"""Text processing utilities."""

import hashlib
import json
import re
from typing import Any, List, Optional

from bs4 import BeautifulSoup

# Word characters, whitespace and CJK unified ideographs survive title normalization
_TITLE_STRIP_RE = re.compile(r"[^\w\s一-龥]")
_JSON_DECODER = json.JSONDecoder()


def normalize_title(title: str) -> str:
    """Normalize a title for duplicate detection.

    Args:
        title: Raw article title

    Returns:
        Lowercased title without punctuation, trimmed
    """
    return _TITLE_STRIP_RE.sub("", title.lower()).strip()


def normalize_dedup_url(url: str) -> str:
    """Normalize a URL for duplicate detection.

    Everything from the first ``?`` is dropped, then the result is trimmed
    and lowercased.

    Args:
        url: URL to normalize

    Returns:
        Normalized URL
    """
    return url.split("?", 1)[0].strip().lower()


def hash_url(url: str) -> str:
    """Generate SHA-256 hash of a normalized URL.

    Args:
        url: URL to hash

    Returns:
        64-character hex string
    """
    return hashlib.sha256(normalize_dedup_url(url).encode("utf-8")).hexdigest()


def truncate_text(text: str, max_length: int, suffix: str = "...") -> str:
    """Truncate text to maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length
        suffix: Suffix to add when truncating

    Returns:
        Truncated text
    """
    if len(text) <= max_length:
        return text

    return text[: max_length - len(suffix)] + suffix


def clean_whitespace(text: str) -> str:
    """Collapse runs of whitespace into single spaces and trim."""
    return re.sub(r"\s+", " ", text).strip()


def strip_html(html: Optional[str]) -> str:
    """Return the visible text of an HTML fragment with whitespace collapsed."""
    if not html:
        return ""
    if "<" not in html and "&" not in html:
        return clean_whitespace(html)
    return clean_whitespace(BeautifulSoup(html, "html.parser").get_text(" "))


def excerpt(text: Optional[str], fallback: str, max_length: int = 200) -> str:
    """Build a summary excerpt: first ``max_length`` characters plus ``...``.

    Falls back to ``fallback`` (usually the title) when the text is empty.
    """
    plain = strip_html(text)
    if not plain:
        return fallback
    return plain[:max_length].strip() + "..."


def split_csv(value: Optional[str]) -> List[str]:
    """Split a comma-separated setting into trimmed, non-empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _loads_or_none(text: str) -> Optional[Any]:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None


def _first_json(text: str, opener: str, kind: type) -> Optional[Any]:
    """Decode the first well-formed ``kind`` value starting at an ``opener``."""
    start = text.find(opener)
    while start != -1:
        try:
            value, _ = _JSON_DECODER.raw_decode(text, start)
        except json.JSONDecodeError:
            value = None
        if isinstance(value, kind):
            return value
        start = text.find(opener, start + 1)
    return None


def extract_json_array(text: str) -> Optional[Any]:
    """Parse the first well-formed array in free LLM text.

    The whole text is tried when no array parses.

    Returns:
        The decoded JSON value, or None when nothing parses
    """
    found = _first_json(text or "", "[", list)
    return found if found is not None else _loads_or_none(text)


def extract_json_object(text: str) -> dict:
    """Parse a JSON object from free LLM text.

    The whole text is tried first, then the first well-formed ``{...}`` span.

    Returns:
        The decoded object, or an empty dict when nothing parses
    """
    parsed = _loads_or_none(text)
    if isinstance(parsed, dict):
        return parsed

    return _first_json(text or "", "{", dict) or {}


def _image_to_text(match: "re.Match[str]") -> str:
    alt, url = match.group(1), match.group(2)
    return f"{alt} ({url})" if alt else url


def to_readable_text(markdown: str) -> str:
    """Strip Markdown syntax so text reads well in plain-text channels.

    Args:
        markdown: Markdown source

    Returns:
        Plain text with links rendered as ``text (url)`` and bullets as ``•``
    """
    text = markdown.replace("\r\n", "\n")
    text = re.sub(r"```[\w-]*\n([\s\S]*?)```", lambda m: f"\n{m.group(1).strip()}\n", text)
    text = re.sub(r"`([^`]+)`", r"\1", text)
    text = re.sub(r"!\[([^\]]*)\]\(([^)]+)\)", _image_to_text, text)
    text = re.sub(r"\[([^\]]+)\]\(([^)]+)\)", r"\1 (\2)", text)
    text = re.sub(r"^\s{0,3}#{1,6}\s+", "", text, flags=re.MULTILINE)
    text = re.sub(r"^\s{0,3}>\s?", "", text, flags=re.MULTILINE)
    text = re.sub(r"^(\s*)[-*+]\s+", r"\1• ", text, flags=re.MULTILINE)
    text = re.sub(r"\*\*([^*]+)\*\*", r"\1", text)
    text = re.sub(r"__([^_]+)__", r"\1", text)
    text = re.sub(r"\*([^*\n]+)\*", r"\1", text)
    # Underscores inside identifiers such as snake_case are left alone
    text = re.sub(r"(?<!\w)_([^_\n]+)_(?!\w)", r"\1", text)
    text = re.sub(r"~~([^~]+)~~", r"\1", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()
