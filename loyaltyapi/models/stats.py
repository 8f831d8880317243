from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column

from loyaltyapi.models.base import BaseModel


class UserStats(BaseModel):
    """사용자별 누적 카운터와 마일스톤 보상 수령 마커"""

    __tablename__ = "user_stats"

    telegram_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    games_visited: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tickets_purchased: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bingo_collected: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # 방문 마일스톤 수령 횟수 (0으로 초기화되지 않고 1씩만 증가)
    visit_rewards_claimed: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )

    # 구매 횟수 마일스톤 마커 - null -> timestamp 로 한 번만 기록됨
    purchase_reward_1_claimed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    purchase_reward_3_claimed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    purchase_reward_5_claimed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
