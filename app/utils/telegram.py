import logging
from typing import Optional

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)


def _bot_token() -> Optional[str]:
    if not settings.TELEGRAM_BOT_TOKEN:
        return None
    return settings.TELEGRAM_BOT_TOKEN.get_secret_value() or None


async def send_message(
    chat_id: Optional[str],
    text: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> bool:
    """Sends a chat message through the Telegram Bot API.

    Fire-once: returns False when the bot is not configured, the chat id is
    empty or Telegram answers with a non-200 status. Transport errors are
    raised to the caller.
    """
    token = _bot_token()
    if not token:
        logger.warning("TELEGRAM_BOT_TOKEN is not configured. Cannot send message.")
        return False
    if not chat_id:
        logger.warning("Chat ID is empty. Cannot send Telegram message.")
        return False

    url = f"{settings.TELEGRAM_API_BASE}/bot{token}/sendMessage"
    payload = {"chat_id": chat_id, "text": text, "parse_mode": "Markdown"}

    if client is None:
        async with httpx.AsyncClient(timeout=settings.TELEGRAM_TIMEOUT_SECONDS) as own_client:
            response = await own_client.post(url, json=payload)
    else:
        response = await client.post(url, json=payload)

    if response.status_code == 200:
        logger.info(f"Telegram message sent successfully to {chat_id}.")
        return True

    logger.error(
        f"Failed to send Telegram message to {chat_id}. Status: {response.status_code}. Response: {response.text}"
    )
    return False


async def notify_admin(text: str, *, client: Optional[httpx.AsyncClient] = None) -> bool:
    """Sends a message to the configured admin chat."""
    if not settings.TELEGRAM_ADMIN_CHAT_ID:
        logger.warning("TELEGRAM_ADMIN_CHAT_ID is not configured. Cannot send admin notification.")
        return False
    return await send_message(settings.TELEGRAM_ADMIN_CHAT_ID, text, client=client)
