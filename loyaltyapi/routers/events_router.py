"""
행사 API 라우터

사용자용 엔드포인트:
- GET /events/: 행사 목록
- POST /events/register: 등록 코드로 참가 등록 (+방문 보상)

관리자(root)용 엔드포인트:
- POST /events/award-coins: 참가자 코인 지급
- POST /events/{event_id}/prize-codes: 빙고 경품 코드 발급
- GET /events/{event_id}/registrations: 참가자 목록
- GET|PUT /events/{event_id}/bingo-winners: 빙고 당첨 슬롯
"""

import logging
from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, BackgroundTasks, Depends, Path, status

from loyaltyapi.containers import Container
from loyaltyapi.core.auth_middleware import get_current_profile, require_root
from loyaltyapi.core.exceptions import BaseAPIException, InternalServerError
from loyaltyapi.deps import get_event_service, get_redemption_service
from loyaltyapi.schemas.codes import IssuedCodeResponse
from loyaltyapi.schemas.events import (
    AwardCoinsRequest,
    AwardCoinsResponse,
    BingoWinnersResponse,
    BingoWinnersUpdateRequest,
    EventListResponse,
    PrizeCodeRequest,
    RegisterRequest,
    RegisterResponse,
    RegistrationListResponse,
)
from loyaltyapi.schemas.profile import ProfileSchema
from loyaltyapi.services.event_service import EventService
from loyaltyapi.services.redemption_service import RedemptionService
from loyaltyapi.services.telegram_service import TelegramNotifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"])


@router.get("/", response_model=EventListResponse)
async def list_events(
    event_service: EventService = Depends(get_event_service),
) -> EventListResponse:
    """행사 목록 (등록 코드는 포함하지 않음)"""
    try:
        return event_service.list_events(include_codes=False)
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to list events: {str(e)}")
        raise InternalServerError("Failed to list events")


@router.post("/register", response_model=RegisterResponse)
@inject
async def register_for_event(
    request: RegisterRequest,
    background_tasks: BackgroundTasks,
    current_profile: ProfileSchema = Depends(get_current_profile),
    redemption_service: RedemptionService = Depends(get_redemption_service),
    notifier: TelegramNotifier = Depends(Provide[Container.services.telegram_notifier]),
) -> RegisterResponse:
    """
    등록 코드로 행사 참가 등록

    HTTP Status:
        200: 등록 완료 (방문 보상 적립)
        400: 코드 형식 오류 / 지난 행사 / 닫힌 코드
        404: 코드 또는 행사 없음
        409: 이미 등록됨
    """
    try:
        result = redemption_service.redeem_registration(current_profile.telegram_id, request.code)
        background_tasks.add_task(
            notifier.notify_registration,
            current_profile.telegram_id,
            result.event.title,
            result.coins_earned,
        )
        return result
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to register {current_profile.telegram_id}: {str(e)}")
        raise InternalServerError("Failed to register for event")


@router.post("/award-coins", response_model=AwardCoinsResponse)
async def award_coins(
    request: AwardCoinsRequest,
    current_profile: ProfileSchema = Depends(require_root),
    event_service: EventService = Depends(get_event_service),
) -> AwardCoinsResponse:
    """행사 참가자에게 코인 지급 (root)"""
    try:
        return event_service.award_coins(request, awarded_by=current_profile.telegram_id)
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to award coins to {request.telegram_id}: {str(e)}")
        raise InternalServerError("Failed to award coins")


@router.post(
    "/{event_id}/prize-codes",
    response_model=IssuedCodeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_prize_code(
    event_id: str = Path(..., description="행사 ID"),
    request: Optional[PrizeCodeRequest] = None,
    current_profile: ProfileSchema = Depends(require_root),
    event_service: EventService = Depends(get_event_service),
) -> IssuedCodeResponse:
    """빙고 경품 코드 발급 (root)"""
    try:
        return event_service.issue_prize_code(
            event_id,
            created_by=current_profile.telegram_id,
            coins_amount=request.coins_amount if request else None,
        )
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to issue prize code for event {event_id}: {str(e)}")
        raise InternalServerError("Failed to issue prize code")


@router.get("/{event_id}/registrations", response_model=RegistrationListResponse)
async def list_registrations(
    event_id: str = Path(..., description="행사 ID"),
    current_profile: ProfileSchema = Depends(require_root),
    event_service: EventService = Depends(get_event_service),
) -> RegistrationListResponse:
    try:
        return event_service.list_registrations(event_id)
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to list registrations for event {event_id}: {str(e)}")
        raise InternalServerError("Failed to list registrations")


@router.get("/{event_id}/bingo-winners", response_model=BingoWinnersResponse)
async def get_bingo_winners(
    event_id: str = Path(..., description="행사 ID"),
    current_profile: ProfileSchema = Depends(require_root),
    event_service: EventService = Depends(get_event_service),
) -> BingoWinnersResponse:
    try:
        return event_service.get_bingo_winners(event_id)
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to load bingo winners for event {event_id}: {str(e)}")
        raise InternalServerError("Failed to load bingo winners")


@router.put("/{event_id}/bingo-winners", response_model=BingoWinnersResponse)
async def update_bingo_winners(
    request: BingoWinnersUpdateRequest,
    event_id: str = Path(..., description="행사 ID"),
    current_profile: ProfileSchema = Depends(require_root),
    event_service: EventService = Depends(get_event_service),
) -> BingoWinnersResponse:
    try:
        return event_service.update_bingo_winners(event_id, request)
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to save bingo winners for event {event_id}: {str(e)}")
        raise InternalServerError("Failed to save bingo winners")
