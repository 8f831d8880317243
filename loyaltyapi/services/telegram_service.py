"""
텔레그램 알림 발송

발송 실패는 호출자에게 전파하지 않는다. 토큰 미설정, 네트워크 오류, 4xx/5xx 응답 모두
WARNING 로그를 남기고 False 를 반환한다. 라우터는 BackgroundTasks 로 호출하므로
본 요청의 트랜잭션과 응답에 영향을 주지 않는다.
"""

import html
import logging
from typing import Any, Dict, Optional

import httpx

from loyaltyapi.config import Settings
from loyaltyapi.schemas.telegram import TelegramUser

logger = logging.getLogger(__name__)


class TelegramNotifier:
    """Telegram Bot API 클라이언트 (sendMessage 전용)"""

    def __init__(self, settings: Settings, timeout_seconds: float = 10.0):
        self._settings = settings
        self._base_url = settings.TELEGRAM_API_BASE.rstrip("/")
        self._token = (settings.TELEGRAM_BOT_TOKEN or "").strip()
        self._timeout = httpx.Timeout(timeout_seconds, connect=5.0)

    @property
    def enabled(self) -> bool:
        return bool(self._token)

    async def _send(self, payload: Dict[str, Any]) -> bool:
        if not self.enabled:
            logger.warning("TELEGRAM_BOT_TOKEN is not set, message not sent")
            return False

        url = f"{self._base_url}/bot{self._token}/sendMessage"
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(url, json=payload)
        except httpx.HTTPError as e:
            logger.warning(f"Telegram sendMessage error: {str(e)}")
            return False
        except Exception as e:
            logger.warning(f"Telegram sendMessage unexpected error: {type(e).__name__}: {str(e)}")
            return False

        if response.status_code >= 400:
            logger.warning(
                f"Telegram sendMessage failed: {response.status_code} {response.text[:200]}"
            )
            return False
        return True

    async def send_message(
        self,
        chat_id: int,
        text: str,
        parse_html: bool = True,
        web_app_button: Optional[str] = None,
    ) -> bool:
        """
        개인 채팅으로 메시지 발송

        Args:
            chat_id: 개인 채팅은 telegram_id 와 같다
            text: 메시지 본문
            parse_html: HTML parse_mode 사용 여부
            web_app_button: 버튼 문구. MINI_APP_URL 이 있으면 미니앱 버튼을 붙인다.
        """
        payload: Dict[str, Any] = {"chat_id": chat_id, "text": text}
        if parse_html:
            payload["parse_mode"] = "HTML"
        if web_app_button and self._settings.MINI_APP_URL:
            payload["reply_markup"] = {
                "inline_keyboard": [
                    [{"text": web_app_button, "web_app": {"url": self._settings.MINI_APP_URL}}]
                ]
            }
        return await self._send(payload)

    async def forward_to_admin(self, sender: TelegramUser, text: Optional[str]) -> bool:
        """사용자 메시지를 관리자 채팅으로 전달"""
        admin_chat_id = (self._settings.TELEGRAM_ADMIN_CHAT_ID or "").strip()
        if not admin_chat_id:
            logger.warning("TELEGRAM_ADMIN_CHAT_ID is not set, forward skipped")
            return False

        name = " ".join(p for p in (sender.first_name, sender.last_name) if p) or f"ID {sender.id}"
        if sender.username:
            label = f"{html.escape(name, quote=False)} (https://t.me/{sender.username})"
        else:
            label = f'<a href="tg://user?id={sender.id}">{html.escape(name, quote=False)}</a>'

        body = f"From: {label}\n\nText: {html.escape(text or '[no text]', quote=False)}"
        return await self._send(
            {"chat_id": admin_chat_id, "text": body, "parse_mode": "HTML"}
        )

    async def notify_registration(self, telegram_id: int, event_title: str, coins: int) -> bool:
        return await self.send_message(
            telegram_id,
            f"You are registered for <b>{html.escape(event_title, quote=False)}</b>. +{coins} coins!",
            web_app_button="Open app",
        )

    async def notify_purchase(self, telegram_id: int, item_name: str, ticket_code: str) -> bool:
        return await self.send_message(
            telegram_id,
            f"Purchase complete: <b>{html.escape(item_name, quote=False)}</b>\nTicket code: <code>{ticket_code}</code>",
        )
