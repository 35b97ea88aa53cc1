"""
Telegram Bot API client
Posts invoice images and backup archives to a chat

Uses a shared AsyncClient with connection pooling, started and stopped from
the application lifespan.
"""

from typing import Any, Dict, Optional

import httpx
import structlog

from gamehouse.config import get_settings
from gamehouse.errors import ExternalServiceError

logger = structlog.get_logger(__name__)


class TelegramClient:
    """
    HTTP client for the Telegram Bot API.

    Lifecycle:
        - Call start() during app startup (FastAPI lifespan)
        - Call stop() during app shutdown
        - If not initialized, falls back to per-request client
    """

    MAX_CONNECTIONS = 20
    MAX_KEEPALIVE = 5
    KEEPALIVE_EXPIRY = 5.0

    CONNECT_TIMEOUT = 5.0
    WRITE_TIMEOUT = 30.0
    POOL_TIMEOUT = 10.0

    def __init__(self, base_url: Optional[str] = None, read_timeout: Optional[float] = None):
        settings = get_settings()
        self.base_url = (base_url or settings.telegram_api_url).rstrip('/')
        self.read_timeout = read_timeout or settings.telegram_timeout
        self._client: Optional[httpx.AsyncClient] = None

    def _timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self.CONNECT_TIMEOUT,
            read=self.read_timeout,
            write=self.WRITE_TIMEOUT,
            pool=self.POOL_TIMEOUT
        )

    async def start(self):
        """Initialize the shared HTTP client"""
        if self._client is not None:
            logger.warning("TelegramClient already started")
            return

        limits = httpx.Limits(
            max_connections=self.MAX_CONNECTIONS,
            max_keepalive_connections=self.MAX_KEEPALIVE,
            keepalive_expiry=self.KEEPALIVE_EXPIRY
        )
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            limits=limits,
            timeout=self._timeout()
        )
        logger.info("TelegramClient started", base_url=self.base_url)

    async def stop(self):
        """Close the HTTP client and release resources"""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("TelegramClient stopped")

    async def _post(self, endpoint: str, **kwargs) -> Dict[str, Any]:
        if self._client:
            response = await self._client.post(endpoint, **kwargs)
        else:
            logger.warning("TelegramClient not initialized, using per-request client")
            async with httpx.AsyncClient(base_url=self.base_url, timeout=self._timeout()) as client:
                response = await client.post(endpoint, **kwargs)

        try:
            result = response.json()
        except ValueError:
            result = {"ok": False, "description": f"HTTP {response.status_code}"}

        if not result.get("ok"):
            description = result.get("description") or "Unknown error"
            logger.error("Telegram API error", endpoint=endpoint.split("/")[-1], description=description)
            raise ExternalServiceError("telegram_failed", description=description)
        return result

    async def send_photo(
        self,
        bot_token: str,
        chat_id: str,
        photo: bytes,
        filename: str,
        caption: Optional[str] = None
    ) -> Dict[str, Any]:
        """Send a PNG image to a chat"""
        data = {"chat_id": chat_id}
        if caption:
            data["caption"] = caption
        return await self._post(
            f"/bot{bot_token}/sendPhoto",
            data=data,
            files={"photo": (filename, photo, "image/png")}
        )

    async def send_document(
        self,
        bot_token: str,
        chat_id: str,
        document: bytes,
        filename: str,
        caption: Optional[str] = None
    ) -> Dict[str, Any]:
        """Send a file to a chat"""
        data = {"chat_id": chat_id}
        if caption:
            data["caption"] = caption
        return await self._post(
            f"/bot{bot_token}/sendDocument",
            data=data,
            files={"document": (filename, document, "application/zip")}
        )


# Global client instance
telegram_client = TelegramClient()


def get_telegram_client() -> TelegramClient:
    return telegram_client
