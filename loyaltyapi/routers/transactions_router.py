import logging

from fastapi import APIRouter, Depends

from loyaltyapi.core.auth_middleware import get_current_profile, require_staff
from loyaltyapi.core.exceptions import BaseAPIException, InternalServerError
from loyaltyapi.deps import get_transfer_service
from loyaltyapi.schemas.profile import ProfileSchema
from loyaltyapi.schemas.transfer import (
    GenerateTokenRequest,
    GenerateTokenResponse,
    ProcessTokenRequest,
    ProcessTokenResponse,
)
from loyaltyapi.services.transfer_service import TransferService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.post("/generate-token", response_model=GenerateTokenResponse)
async def generate_token(
    request: GenerateTokenRequest,
    current_profile: ProfileSchema = Depends(get_current_profile),
    transfer_service: TransferService = Depends(get_transfer_service),
) -> GenerateTokenResponse:
    """QR 송금 토큰 발급 (TRANSFER_TOKEN_TTL_MINUTES 동안 유효)"""
    try:
        return transfer_service.generate_token(
            current_profile.telegram_id, request.amount, request.type
        )
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to generate transfer token: {str(e)}")
        raise InternalServerError("Failed to generate token")


@router.post("/process", response_model=ProcessTokenResponse)
async def process_token(
    request: ProcessTokenRequest,
    current_profile: ProfileSchema = Depends(require_staff),
    transfer_service: TransferService = Depends(get_transfer_service),
) -> ProcessTokenResponse:
    """
    스캔한 토큰 처리 (스태프)

    HTTP Status:
        200: 처리 완료
        400: 잔액 부족
        403: 자기 토큰 / 권한 없음
        404: 없는 토큰
        410: 만료된 토큰
    """
    try:
        return transfer_service.process_token(current_profile.telegram_id, request.token)
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to process transfer token: {str(e)}")
        raise InternalServerError("Failed to process token")
