import logging

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, BackgroundTasks, Depends, Query

from loyaltyapi.containers import Container
from loyaltyapi.core.auth_middleware import get_current_profile
from loyaltyapi.core.exceptions import BaseAPIException, InternalServerError
from loyaltyapi.deps import get_scan_service
from loyaltyapi.schemas.codes import CodeLookupResponse, CodeRedeemResponse, CodeRequest
from loyaltyapi.schemas.profile import ProfileSchema
from loyaltyapi.services.scan_service import ScanService
from loyaltyapi.services.telegram_service import TelegramNotifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/codes", tags=["codes"])


@router.get("/lookup", response_model=CodeLookupResponse)
async def lookup_code(
    code: str = Query(..., min_length=1, max_length=2048, description="코드 또는 URL"),
    current_profile: ProfileSchema = Depends(get_current_profile),
    scan_service: ScanService = Depends(get_scan_service),
) -> CodeLookupResponse:
    """
    코드 종류 확인

    HTTP Status:
        200: registration | purchase | prize | ticket
        400: 입력에서 코드를 찾지 못함
        404: 없는 코드 또는 이미 사용된 코드
    """
    try:
        return scan_service.lookup(code)
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to look up code: {str(e)}")
        raise InternalServerError("Failed to look up code")


@router.post("/redeem", response_model=CodeRedeemResponse)
@inject
async def redeem_code(
    request: CodeRequest,
    background_tasks: BackgroundTasks,
    current_profile: ProfileSchema = Depends(get_current_profile),
    scan_service: ScanService = Depends(get_scan_service),
    notifier: TelegramNotifier = Depends(Provide[Container.services.telegram_notifier]),
) -> CodeRedeemResponse:
    """입력된 코드를 분류해 등록/구매/경품 중 하나로 사용"""
    try:
        result = scan_service.redeem_any(current_profile.telegram_id, request.code)
        if result.type == "registration" and result.event:
            background_tasks.add_task(
                notifier.notify_registration,
                current_profile.telegram_id,
                result.event.get("title", ""),
                result.coins_earned,
            )
        elif result.type == "purchase" and result.item and result.ticket:
            background_tasks.add_task(
                notifier.notify_purchase,
                current_profile.telegram_id,
                result.item.name,
                result.ticket.code,
            )
        return result
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to redeem code for {current_profile.telegram_id}: {str(e)}")
        raise InternalServerError("Failed to redeem code")
