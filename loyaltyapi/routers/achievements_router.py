import logging

from fastapi import APIRouter, Depends

from loyaltyapi.core.auth_middleware import get_current_profile
from loyaltyapi.core.exceptions import BaseAPIException, InternalServerError
from loyaltyapi.deps import get_achievement_service
from loyaltyapi.schemas.achievements import (
    AchievementListResponse,
    ClaimAchievementRequest,
    ClaimRewardResponse,
)
from loyaltyapi.schemas.profile import ProfileSchema
from loyaltyapi.services.achievement_service import AchievementService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/achievements", tags=["achievements"])


@router.get("/", response_model=AchievementListResponse)
async def list_achievements(
    current_profile: ProfileSchema = Depends(get_current_profile),
    achievement_service: AchievementService = Depends(get_achievement_service),
) -> AchievementListResponse:
    """업적 목록과 방문 마일스톤 진행도"""
    try:
        return achievement_service.list_achievements(current_profile.telegram_id)
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to list achievements for {current_profile.telegram_id}: {str(e)}")
        raise InternalServerError("Failed to list achievements")


@router.post("/claim", response_model=ClaimRewardResponse)
async def claim_achievement(
    request: ClaimAchievementRequest,
    current_profile: ProfileSchema = Depends(get_current_profile),
    achievement_service: AchievementService = Depends(get_achievement_service),
) -> ClaimRewardResponse:
    """
    업적 코인 수령

    HTTP Status:
        200: 수령 완료
        400: 코인 보상이 없는 업적
        404: 없는 업적 / 미해금
        409: 이미 수령함
    """
    try:
        return achievement_service.claim(current_profile.telegram_id, request.achievement_slug)
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to claim {request.achievement_slug} for {current_profile.telegram_id}: {str(e)}")
        raise InternalServerError("Failed to claim achievement reward")


@router.post("/claim-visit-reward", response_model=ClaimRewardResponse)
async def claim_visit_reward(
    current_profile: ProfileSchema = Depends(get_current_profile),
    achievement_service: AchievementService = Depends(get_achievement_service),
) -> ClaimRewardResponse:
    try:
        return achievement_service.claim_visit_reward(current_profile.telegram_id)
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to claim visit reward for {current_profile.telegram_id}: {str(e)}")
        raise InternalServerError("Failed to claim visit reward")
