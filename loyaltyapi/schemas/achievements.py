from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class UserAchievementSchema(BaseModel):
    """업적 해금 기록"""

    telegram_id: int
    achievement_slug: str
    unlocked_at: datetime
    reward_claimed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UnlockedAchievement(BaseModel):
    """이번 요청으로 새로 해금된 업적"""

    slug: str = Field(..., description="업적 slug")
    badge: str = Field(..., description="배지 이모지")
    name: str = Field(..., description="업적 이름")
    description: str = Field(..., description="달성 조건")
    label: str = Field(..., description="부가 문구")
    coin_reward: Optional[int] = Field(None, description="수령 가능한 코인")


class AchievementStatus(BaseModel):
    """업적 목록 항목"""

    slug: str
    badge: str
    name: str
    description: str
    label: str
    stat_key: str = Field(..., description="판정 카운터")
    unlocked: bool = Field(..., description="해금 여부")
    unlocked_at: Optional[datetime] = None
    reward_claimed_at: Optional[datetime] = None
    threshold: int = Field(..., description="해금 임계값")
    current_value: int = Field(..., description="현재 카운터 값")
    coin_reward: Optional[int] = Field(None, description="보상 코인")


class AchievementListResponse(BaseModel):
    """업적 목록 + 방문 마일스톤 진행도"""

    achievements: List[AchievementStatus]
    visit_reward_progress: int = Field(..., description="다음 방문 보상까지 진행도")
    visit_reward_pending: bool = Field(..., description="수령 가능한 방문 보상 존재 여부")
    visit_reward_coins: int = Field(..., description="방문 보상 코인")


class ClaimAchievementRequest(BaseModel):
    achievement_slug: str = Field(..., min_length=1, max_length=64, description="업적 slug")


class ClaimRewardResponse(BaseModel):
    """보상 수령 결과"""

    success: bool = True
    coins_added: int = Field(..., description="지급 코인")
    new_balance: int = Field(..., description="변경 후 잔액")
