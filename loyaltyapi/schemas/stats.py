from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class UserStatsSchema(BaseModel):
    """사용자 누적 카운터"""

    telegram_id: int = Field(..., description="텔레그램 사용자 ID")
    games_visited: int = Field(0, description="행사 방문 횟수")
    tickets_purchased: int = Field(0, description="티켓 구매 횟수")
    bingo_collected: int = Field(0, description="빙고 승리 횟수")
    visit_rewards_claimed: int = Field(0, description="방문 마일스톤 수령 횟수")
    purchase_reward_1_claimed_at: Optional[datetime] = None
    purchase_reward_3_claimed_at: Optional[datetime] = None
    purchase_reward_5_claimed_at: Optional[datetime] = None

    class Config:
        from_attributes = True
