from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from loyaltyapi.core.achievements import STAT_KEYS
from loyaltyapi.models.stats import UserStats
from loyaltyapi.repositories.base import BaseRepository
from loyaltyapi.schemas.stats import UserStatsSchema

PURCHASE_MILESTONE_COLUMNS = {
    1: "purchase_reward_1_claimed_at",
    3: "purchase_reward_3_claimed_at",
    5: "purchase_reward_5_claimed_at",
}


class StatsRepository(BaseRepository[UserStats, UserStatsSchema]):
    """사용자 카운터 데이터 접근 계층"""

    def __init__(self, db: Session):
        super().__init__(UserStats, UserStatsSchema, db)

    def get(self, telegram_id: int) -> Optional[UserStatsSchema]:
        model_instance = (
            self.db.query(self.model_class)
            .filter(self.model_class.telegram_id == telegram_id)
            .first()
        )
        return self._to_schema(model_instance)

    def ensure(self, telegram_id: int) -> None:
        """첫 호출 시 카운터 행을 0 으로 생성"""
        self.insert_ignore(["telegram_id"], telegram_id=telegram_id)

    def increment(self, telegram_id: int, stat_key: str) -> int:
        """
        카운터를 원자적으로 1 증가시키고 새 값을 반환

        Raises:
            ValueError: 알 수 없는 카운터
        """
        if stat_key not in STAT_KEYS:
            raise ValueError(f"Unknown stat key: {stat_key}")

        self.ensure(telegram_id)
        column = getattr(self.model_class, stat_key)
        stmt = (
            update(self.model_class)
            .where(self.model_class.telegram_id == telegram_id)
            .values({column: column + 1})
            .returning(column)
        )
        return int(self.db.execute(stmt).scalar_one())

    def claim_purchase_milestone(
        self, telegram_id: int, threshold: int, claimed_at: datetime
    ) -> bool:
        """구매 마일스톤 마커를 null -> timestamp 로 한 번만 기록"""
        column = getattr(self.model_class, PURCHASE_MILESTONE_COLUMNS[threshold])
        updated_count = (
            self.db.query(self.model_class)
            .filter(
                self.model_class.telegram_id == telegram_id,
                column.is_(None),
            )
            .update({column: claimed_at})
        )
        return updated_count > 0

    def claim_visit_reward(self, telegram_id: int, expected_claimed: int) -> bool:
        """
        visit_rewards_claimed 를 expected -> expected + 1 로 변경 (CAS)

        다른 요청이 먼저 수령했다면 0행이 갱신되어 False.
        """
        updated_count = (
            self.db.query(self.model_class)
            .filter(
                self.model_class.telegram_id == telegram_id,
                self.model_class.visit_rewards_claimed == expected_claimed,
            )
            .update(
                {
                    self.model_class.visit_rewards_claimed: self.model_class.visit_rewards_claimed
                    + 1
                }
            )
        )
        return updated_count > 0
