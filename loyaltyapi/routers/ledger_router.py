"""
코인 원장 API 라우터

- GET /ledger/balance: 내 잔액
- GET /ledger/history: 내 거래 내역 (페이징, 최신순)
- GET /ledger/integrity: 잔액과 원장 합계 정합성 검증
"""

import logging

from fastapi import APIRouter, Depends, Query

from loyaltyapi.core.auth_middleware import get_current_profile
from loyaltyapi.core.exceptions import BaseAPIException, InternalServerError
from loyaltyapi.deps import get_ledger_service
from loyaltyapi.schemas.ledger import (
    BalanceResponse,
    LedgerHistoryResponse,
    LedgerIntegrityResponse,
)
from loyaltyapi.schemas.profile import ProfileSchema
from loyaltyapi.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ledger", tags=["ledger"])


@router.get("/balance", response_model=BalanceResponse)
async def get_my_balance(
    current_profile: ProfileSchema = Depends(get_current_profile),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> BalanceResponse:
    try:
        return ledger_service.get_balance(current_profile.telegram_id)
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to get balance for {current_profile.telegram_id}: {str(e)}")
        raise InternalServerError("Failed to retrieve balance")


@router.get("/history", response_model=LedgerHistoryResponse)
async def get_my_history(
    limit: int = Query(50, ge=1, le=100, description="페이지 크기"),
    offset: int = Query(0, ge=0, description="오프셋"),
    current_profile: ProfileSchema = Depends(get_current_profile),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> LedgerHistoryResponse:
    """
    내 코인 거래 내역

    사용 예시:
        GET /ledger/history?limit=20&offset=0  # 처음 20개 항목
    """
    try:
        return ledger_service.get_history(current_profile.telegram_id, limit=limit, offset=offset)
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to get ledger for {current_profile.telegram_id}: {str(e)}")
        raise InternalServerError("Failed to retrieve ledger")


@router.get("/integrity", response_model=LedgerIntegrityResponse)
async def verify_my_integrity(
    current_profile: ProfileSchema = Depends(get_current_profile),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> LedgerIntegrityResponse:
    try:
        return ledger_service.verify_integrity(current_profile.telegram_id)
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to verify ledger for {current_profile.telegram_id}: {str(e)}")
        raise InternalServerError("Failed to verify ledger integrity")
