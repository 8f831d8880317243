from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.schema import UniqueConstraint

from loyaltyapi.models.base import BigIntPK, BaseModel


class UserAchievement(BaseModel):
    """
    업적 해금 기록

    해금(unlocked_at)과 보상 수령(reward_claimed_at)은 각각 독립적으로 한 번만 일어난다.
    """

    __tablename__ = "user_achievements"
    __table_args__ = (
        UniqueConstraint(
            "telegram_id", "achievement_slug", name="uq_user_achievement_slug"
        ),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    telegram_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("profiles.telegram_id"), nullable=False, index=True
    )
    achievement_slug: Mapped[str] = mapped_column(String(64), nullable=False)
    unlocked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    reward_claimed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
