import asyncio
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from loyaltyapi.schemas.telegram import TelegramUser
from loyaltyapi.services.telegram_service import TelegramNotifier


@pytest.fixture
def bot_settings(settings):
    settings.TELEGRAM_BOT_TOKEN = "123:abc"
    settings.TELEGRAM_ADMIN_CHAT_ID = "-100200"
    settings.MINI_APP_URL = "https://app.example.com"
    return settings


def mock_client(mock_cls, status_code=200, side_effect=None):
    response = Mock(status_code=status_code, text="error body")
    post = AsyncMock(return_value=response, side_effect=side_effect)
    mock_cls.return_value.__aenter__.return_value.post = post
    return post


class TestTelegramNotifier:
    """텔레그램 발송 테스트 - 실패는 False 로만 보고된다"""

    @patch("loyaltyapi.services.telegram_service.httpx.AsyncClient")
    def test_send_message_payload(self, mock_cls, bot_settings):
        # Given
        post = mock_client(mock_cls)
        notifier = TelegramNotifier(bot_settings)

        # When
        ok = asyncio.run(notifier.send_message(7001, "<b>hi</b>", web_app_button="Open"))

        # Then
        assert ok is True
        url = post.call_args.args[0]
        payload = post.call_args.kwargs["json"]
        assert url == "https://api.telegram.org/bot123:abc/sendMessage"
        assert payload["chat_id"] == 7001
        assert payload["parse_mode"] == "HTML"
        button = payload["reply_markup"]["inline_keyboard"][0][0]
        assert button["web_app"]["url"] == "https://app.example.com"

    @patch("loyaltyapi.services.telegram_service.httpx.AsyncClient")
    def test_network_error_returns_false(self, mock_cls, bot_settings):
        mock_client(mock_cls, side_effect=httpx.ConnectError("boom"))
        notifier = TelegramNotifier(bot_settings)

        assert asyncio.run(notifier.send_message(7001, "hi")) is False

    @patch("loyaltyapi.services.telegram_service.httpx.AsyncClient")
    def test_api_error_returns_false(self, mock_cls, bot_settings):
        mock_client(mock_cls, status_code=403)
        notifier = TelegramNotifier(bot_settings)

        assert asyncio.run(notifier.notify_purchase(7001, "Mic", "AB3DE")) is False

    @patch("loyaltyapi.services.telegram_service.httpx.AsyncClient")
    def test_disabled_without_token(self, mock_cls, settings):
        settings.TELEGRAM_BOT_TOKEN = ""
        notifier = TelegramNotifier(settings)

        assert asyncio.run(notifier.send_message(7001, "hi")) is False
        mock_cls.assert_not_called()

    @patch("loyaltyapi.services.telegram_service.httpx.AsyncClient")
    def test_forward_to_admin_escapes_text(self, mock_cls, bot_settings):
        # Given
        post = mock_client(mock_cls)
        notifier = TelegramNotifier(bot_settings)
        sender = TelegramUser(id=7001, first_name="Anna", username="anna")

        # When
        ok = asyncio.run(notifier.forward_to_admin(sender, "1 < 2 & 3"))

        # Then
        assert ok is True
        payload = post.call_args.kwargs["json"]
        assert payload["chat_id"] == "-100200"
        assert "https://t.me/anna" in payload["text"]
        assert "1 &lt; 2 &amp; 3" in payload["text"]

    def test_forward_without_admin_chat(self, settings):
        settings.TELEGRAM_BOT_TOKEN = "123:abc"
        settings.TELEGRAM_ADMIN_CHAT_ID = ""
        notifier = TelegramNotifier(settings)

        assert asyncio.run(notifier.forward_to_admin(TelegramUser(id=1), "hi")) is False

    @patch("loyaltyapi.services.telegram_service.httpx.AsyncClient")
    def test_registration_title_is_escaped(self, mock_cls, bot_settings):
        """HTML 특수문자는 이스케이프하고 따옴표는 그대로 둔다"""
        post = mock_client(mock_cls)
        notifier = TelegramNotifier(bot_settings)

        asyncio.run(notifier.notify_registration(7001, "Rock & \"Roll\" <Live>", 5))

        text = post.call_args.kwargs["json"]["text"]
        assert "Rock &amp; \"Roll\" &lt;Live&gt;" in text

    @patch("loyaltyapi.services.telegram_service.httpx.AsyncClient")
    def test_non_http_error_returns_false(self, mock_cls, bot_settings):
        """httpx.HTTPError 계열이 아닌 예외도 밖으로 새지 않는다"""
        mock_client(mock_cls, side_effect=httpx.InvalidURL("bad url"))
        notifier = TelegramNotifier(bot_settings)

        assert asyncio.run(notifier.send_message(7001, "hi")) is False
