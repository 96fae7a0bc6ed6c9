"""Telegram Bot API delivery of the digest text."""

import asyncio
from typing import List, Optional

import httpx

from newsdigest.services.notification import NotificationResult
from newsdigest.utils.exceptions import NotificationError
from newsdigest.utils.logging import get_logger

logger = get_logger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org"
MAX_MESSAGE_LENGTH = 4096
SPLIT_WINDOW = 200
# Room kept free in every chunk for the "(i/n, continued...)" marker
CONTINUATION_RESERVE = 40


def split_message(text: str, max_length: int = MAX_MESSAGE_LENGTH) -> List[str]:
    """Split a long message into chunks of at most ``max_length`` characters.

    Preference order for the cut: the last newline within the final 200
    characters before the limit, then the last Chinese full stop in that
    window, then a hard cut at the limit.

    Args:
        text: Message text.
        max_length: Maximum chunk length.

    Returns:
        Non-empty chunks, whitespace-trimmed at the cut points.
    """
    chunks = []
    remaining = text
    window = min(SPLIT_WINDOW, max_length // 2)

    while len(remaining) > max_length:
        head = remaining[:max_length]
        split_index = max_length

        newline = head.rfind("\n", max_length - window)
        if newline != -1:
            split_index = newline + 1
        else:
            period = head.rfind("。", max_length - window)
            if period != -1:
                split_index = period + 1

        chunk = remaining[:split_index].strip()
        if chunk:
            chunks.append(chunk)
        remaining = remaining[split_index:].strip()

    if remaining:
        chunks.append(remaining)

    return chunks


class TelegramService:
    """Send messages to one chat through the Telegram Bot API."""

    def __init__(
        self,
        bot_token: Optional[str],
        chat_id: Optional[str],
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 15.0,
        chunk_delay: float = 0.1,
    ):
        """Initialize the service.

        Args:
            bot_token: Bot token; delivery is skipped when missing.
            chat_id: Target chat; delivery is skipped when missing.
            client: Shared HTTP client (a private one is opened per send otherwise).
            timeout: HTTP timeout in seconds.
            chunk_delay: Pause between chunks of a split message, in seconds.
        """
        self.bot_token = bot_token
        self.chat_id = chat_id
        self._client = client
        self.timeout = timeout
        self.chunk_delay = chunk_delay

    def is_configured(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    async def send_message(self, text: str) -> NotificationResult:
        """Send a message, splitting it when it exceeds Telegram's limit.

        Never raises; failures are logged and reported in the result.

        Args:
            text: Message text.

        Returns:
            Delivery result.
        """
        if not self.is_configured():
            logger.warning("telegram_not_configured_skipping")
            return NotificationResult(False, "Telegram credentials not configured", skipped=True)

        if len(text) <= MAX_MESSAGE_LENGTH:
            messages = [text]
        else:
            chunks = split_message(text, MAX_MESSAGE_LENGTH - CONTINUATION_RESERVE)
            messages = [
                chunk if i == len(chunks) else f"{chunk}\n\n({i}/{len(chunks)}, continued...)"
                for i, chunk in enumerate(chunks, start=1)
            ]
            logger.info("telegram_message_split", length=len(text), chunks=len(messages))

        try:
            if self._client is not None:
                await self._send_all(self._client, messages)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    await self._send_all(client, messages)
        except (httpx.HTTPError, NotificationError) as e:
            logger.error("telegram_send_failed", error=str(e))
            return NotificationResult(False, f"Telegram delivery failed: {e}")

        logger.info("telegram_sent", chunks=len(messages))
        return NotificationResult(True, f"Sent {len(messages)} message(s)")

    async def _send_all(self, client: httpx.AsyncClient, messages: List[str]) -> None:
        for i, message in enumerate(messages):
            await self._send_single(client, message)
            # Telegram allows about 30 messages per second
            if i < len(messages) - 1:
                await asyncio.sleep(self.chunk_delay)

    async def _send_single(self, client: httpx.AsyncClient, text: str) -> None:
        url = f"{TELEGRAM_API_BASE}/bot{self.bot_token}/sendMessage"
        payload = {
            "chat_id": self.chat_id,
            "text": text,
            "parse_mode": "Markdown",
            "disable_web_page_preview": False,
        }

        response = await client.post(url, json=payload)

        if response.status_code == 400 and "parse entities" in response.text:
            # Stray Markdown characters, resend as plain text
            logger.warning("telegram_markdown_rejected_retrying_plain")
            payload.pop("parse_mode")
            response = await client.post(url, json=payload)

        if response.status_code >= 400:
            raise NotificationError(f"Telegram API {response.status_code}: {response.text[:300]}")
