"""
Unit tests for the Telegram and SMTP clients
"""

from unittest.mock import AsyncMock, patch

import aiosmtplib
import httpx
import pytest

from gamehouse.errors import ExternalServiceError
from gamehouse.utils.smtp_client import EmailMessage, SMTPClient, SMTPError
from gamehouse.utils.telegram_client import TelegramClient


def telegram_with(handler) -> TelegramClient:
    client = TelegramClient(base_url="https://api.telegram.test")
    client._client = httpx.AsyncClient(
        base_url=client.base_url,
        transport=httpx.MockTransport(handler)
    )
    return client


class TestTelegramClient:
    @pytest.mark.asyncio
    async def test_send_photo(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = request.read()
            return httpx.Response(200, json={"ok": True, "result": {"message_id": 1}})

        client = telegram_with(handler)
        result = await client.send_photo("123:abc", "42", b"PNGDATA", "invoice.png", caption="Invoice")
        await client.stop()

        assert result["ok"] is True
        assert seen["path"] == "/bot123:abc/sendPhoto"
        assert b"PNGDATA" in seen["body"]
        assert b"invoice.png" in seen["body"]

    @pytest.mark.asyncio
    async def test_api_error_raises_with_description(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"ok": False, "description": "Bad Request: chat not found"})

        client = telegram_with(handler)
        with pytest.raises(ExternalServiceError) as exc:
            await client.send_document("123:abc", "42", b"zip", "backup.zip")
        await client.stop()

        assert "chat not found" in exc.value.message

    @pytest.mark.asyncio
    async def test_non_json_response(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="bad gateway")

        client = telegram_with(handler)
        with pytest.raises(ExternalServiceError) as exc:
            await client.send_document("123:abc", "42", b"zip", "backup.zip")
        await client.stop()

        assert "HTTP 502" in exc.value.message

    @pytest.mark.asyncio
    async def test_start_stop(self):
        client = TelegramClient(base_url="https://api.telegram.test")
        await client.start()
        assert client._client is not None
        await client.stop()
        assert client._client is None


class TestEmailMessage:
    def test_requires_content(self):
        with pytest.raises(ValueError):
            EmailMessage(to_emails=["a@example.com"], subject="Hi")

    def test_single_recipient_wrapped(self):
        msg = EmailMessage(to_emails="a@example.com", subject="Hi", text_content="Body")
        assert msg.to_emails == ["a@example.com"]


class TestSMTPClient:
    @pytest.mark.asyncio
    async def test_send_email_success(self):
        with patch("gamehouse.utils.smtp_client.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            result = await SMTPClient().send_email(
                EmailMessage(to_emails=["a@example.com"], subject="Hi", text_content="Body")
            )

        assert result["attempts"] == 1
        mime = mock_send.await_args.args[0]
        assert mime["To"] == "a@example.com"
        assert mime["Subject"] == "Hi"

    @pytest.mark.asyncio
    async def test_send_email_retries_then_fails(self):
        with patch(
            "gamehouse.utils.smtp_client.aiosmtplib.send",
            new_callable=AsyncMock,
            side_effect=aiosmtplib.SMTPException("refused")
        ) as mock_send:
            with patch("gamehouse.utils.smtp_client.asyncio.sleep", new_callable=AsyncMock):
                with pytest.raises(SMTPError):
                    await SMTPClient().send_email(
                        EmailMessage(to_emails=["a@example.com"], subject="Hi", html_content="<p>x</p>"),
                        retry_count=2
                    )

        assert mock_send.await_count == 3
