"""
텔레그램 봇 webhook

Telegram 은 200 이 아니면 같은 Update 를 재전송하므로 본문이 이상해도 항상 200 을 돌려준다.
개인 채팅 메시지는 관리자 채팅으로 전달하고 기본 안내 문구로 답장한다.
"""

import logging
from typing import Any, Dict, Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, BackgroundTasks, Depends, Header
from pydantic import ValidationError as PydanticValidationError

from loyaltyapi.config import settings
from loyaltyapi.containers import Container
from loyaltyapi.schemas.telegram import TelegramUpdate
from loyaltyapi.services.telegram_service import TelegramNotifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/telegram", tags=["telegram"])

DEFAULT_REPLY = "Thanks for your message! Our team will get back to you soon."


@router.post("/webhook")
@inject
async def telegram_webhook(
    payload: Dict[str, Any],
    background_tasks: BackgroundTasks,
    x_telegram_bot_api_secret_token: Optional[str] = Header(None),
    notifier: TelegramNotifier = Depends(Provide[Container.services.telegram_notifier]),
) -> Dict[str, bool]:
    secret = settings.TELEGRAM_WEBHOOK_SECRET
    if secret and x_telegram_bot_api_secret_token != secret:
        logger.warning("Telegram webhook secret mismatch, update ignored")
        return {"ok": True}

    try:
        update = TelegramUpdate.model_validate(payload)
    except PydanticValidationError as e:
        logger.warning(f"Ignoring malformed telegram update: {str(e)}")
        return {"ok": True}

    message = update.message
    if message is None or message.chat.type != "private" or message.from_ is None:
        return {"ok": True}

    text = message.text or message.caption
    logger.info(f"Telegram message from {message.from_.id}")
    background_tasks.add_task(notifier.forward_to_admin, message.from_, text)
    background_tasks.add_task(notifier.send_message, message.chat.id, DEFAULT_REPLY, False)
    return {"ok": True}
