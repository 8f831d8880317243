"""
카탈로그 API 라우터

- GET /catalog/: 상품 목록 (확정 가격)
- POST /catalog/purchase: 상품 직접 구매
- POST /catalog/redeem-purchase-code: 구매 코드 사용
- POST /catalog/generate-purchase-code: 구매 코드 발급 (root)
"""

import logging

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, BackgroundTasks, Depends

from loyaltyapi.containers import Container
from loyaltyapi.core.auth_middleware import get_current_profile, require_root
from loyaltyapi.core.exceptions import BaseAPIException, InternalServerError
from loyaltyapi.deps import get_catalog_service, get_redemption_service
from loyaltyapi.schemas.catalog import (
    CatalogListResponse,
    PurchaseCodeGenerateRequest,
    PurchaseCodeRequest,
    PurchaseRequest,
    PurchaseResponse,
)
from loyaltyapi.schemas.codes import IssuedCodeResponse
from loyaltyapi.schemas.profile import ProfileSchema
from loyaltyapi.services.catalog_service import CatalogService
from loyaltyapi.services.redemption_service import RedemptionService
from loyaltyapi.services.telegram_service import TelegramNotifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("/", response_model=CatalogListResponse)
async def list_catalog(
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> CatalogListResponse:
    try:
        return catalog_service.list_items()
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to list catalog: {str(e)}")
        raise InternalServerError("Failed to list catalog")


@router.post("/purchase", response_model=PurchaseResponse)
@inject
async def purchase_item(
    request: PurchaseRequest,
    background_tasks: BackgroundTasks,
    current_profile: ProfileSchema = Depends(get_current_profile),
    redemption_service: RedemptionService = Depends(get_redemption_service),
    notifier: TelegramNotifier = Depends(Provide[Container.services.telegram_notifier]),
) -> PurchaseResponse:
    """
    상품 구매 - 잔액 차감 후 티켓 발급

    HTTP Status:
        200: 구매 완료
        400: 잔액 부족
        404: 상품 없음
    """
    try:
        result = redemption_service.purchase_item(
            current_profile.telegram_id, request.catalog_item_id
        )
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
        logger.error(f"Failed to purchase for {current_profile.telegram_id}: {str(e)}")
        raise InternalServerError("Failed to purchase item")


@router.post("/redeem-purchase-code", response_model=PurchaseResponse)
@inject
async def redeem_purchase_code(
    request: PurchaseCodeRequest,
    background_tasks: BackgroundTasks,
    current_profile: ProfileSchema = Depends(get_current_profile),
    redemption_service: RedemptionService = Depends(get_redemption_service),
    notifier: TelegramNotifier = Depends(Provide[Container.services.telegram_notifier]),
) -> PurchaseResponse:
    """
    구매 코드 사용 - "CXXXXX", "XXXXX", "shop-XXXXX" 또는 딥링크

    HTTP Status:
        200: 구매 완료
        400: 형식 오류 / 이미 사용된 코드 / 잔액 부족
        404: 코드 또는 상품 없음
    """
    try:
        result = redemption_service.redeem_purchase_code(
            current_profile.telegram_id, request.code
        )
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
        logger.error(f"Failed to redeem purchase code for {current_profile.telegram_id}: {str(e)}")
        raise InternalServerError("Failed to redeem purchase code")


@router.post("/generate-purchase-code", response_model=IssuedCodeResponse)
async def generate_purchase_code(
    request: PurchaseCodeGenerateRequest,
    current_profile: ProfileSchema = Depends(require_root),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> IssuedCodeResponse:
    """구매 코드 발급 (root)"""
    try:
        return catalog_service.generate_purchase_code(
            request.catalog_item_id, created_by=current_profile.telegram_id
        )
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to generate purchase code: {str(e)}")
        raise InternalServerError("Failed to generate purchase code")
