import logging

from fastapi import APIRouter, Depends

from loyaltyapi.core.auth_middleware import get_current_profile
from loyaltyapi.core.exceptions import BaseAPIException, InternalServerError
from loyaltyapi.core.rewards import bingo_config
from loyaltyapi.deps import get_redemption_service
from loyaltyapi.schemas.bingo import (
    BingoClaimRequest,
    BingoClaimResponse,
    BingoConfigResponse,
)
from loyaltyapi.schemas.profile import ProfileSchema
from loyaltyapi.services.redemption_service import RedemptionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bingo", tags=["bingo"])


@router.get("/config", response_model=BingoConfigResponse)
async def get_bingo_config() -> BingoConfigResponse:
    """빙고 슬롯과 보상 코인"""
    return BingoConfigResponse(**bingo_config())


@router.post("/claim", response_model=BingoClaimResponse)
async def claim_bingo(
    request: BingoClaimRequest,
    current_profile: ProfileSchema = Depends(get_current_profile),
    redemption_service: RedemptionService = Depends(get_redemption_service),
) -> BingoClaimResponse:
    """
    경품 코드(또는 테스트 코드)로 빙고 보상 수령

    HTTP Status:
        200: 적립 완료
        400: 코드 형식 오류 / 이미 사용된 코드
        404: 코드 없음
    """
    try:
        return redemption_service.claim_prize(current_profile.telegram_id, request.code)
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to claim bingo for {current_profile.telegram_id}: {str(e)}")
        raise InternalServerError("Failed to claim bingo reward")
