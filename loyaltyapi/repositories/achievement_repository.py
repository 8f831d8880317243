from datetime import datetime
from typing import Dict, Optional

from sqlalchemy.orm import Session

from loyaltyapi.models.achievement import UserAchievement
from loyaltyapi.repositories.base import BaseRepository
from loyaltyapi.schemas.achievements import UserAchievementSchema


class AchievementRepository(BaseRepository[UserAchievement, UserAchievementSchema]):
    """업적 해금 데이터 접근 계층"""

    def __init__(self, db: Session):
        super().__init__(UserAchievement, UserAchievementSchema, db)

    def get(self, telegram_id: int, slug: str) -> Optional[UserAchievementSchema]:
        model_instance = (
            self.db.query(self.model_class)
            .filter(
                self.model_class.telegram_id == telegram_id,
                self.model_class.achievement_slug == slug,
            )
            .first()
        )
        return self._to_schema(model_instance)

    def map_for_user(self, telegram_id: int) -> Dict[str, UserAchievementSchema]:
        rows = (
            self.db.query(self.model_class)
            .filter(self.model_class.telegram_id == telegram_id)
            .all()
        )
        return {row.achievement_slug: self._to_schema(row) for row in rows}

    def unlock(self, telegram_id: int, slug: str, unlocked_at: datetime) -> bool:
        """
        업적 해금 (유니크 제약으로 보호된 INSERT)

        Returns:
            bool: 이번에 새로 해금되었으면 True, 이미 해금된 상태면 False
        """
        return self.insert_ignore(
            ["telegram_id", "achievement_slug"],
            telegram_id=telegram_id,
            achievement_slug=slug,
            unlocked_at=unlocked_at,
        )

    def mark_reward_claimed(
        self, telegram_id: int, slug: str, claimed_at: datetime
    ) -> bool:
        """reward_claimed_at 을 null -> timestamp 로 한 번만 기록"""
        updated_count = (
            self.db.query(self.model_class)
            .filter(
                self.model_class.telegram_id == telegram_id,
                self.model_class.achievement_slug == slug,
                self.model_class.reward_claimed_at.is_(None),
            )
            .update({self.model_class.reward_claimed_at: claimed_at})
        )
        return updated_count > 0
