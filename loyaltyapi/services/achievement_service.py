"""
업적 평가/수령 서비스

- 임계값 업적: 카운터가 임계값을 넘으면 자동 해금 (유니크 제약 INSERT)
- 업적 코인: 사용자가 명시적으로 수령할 때만 지급 (reward_claimed_at CAS)
- 방문 마일스톤: VISIT_REWARD_EVERY 방문마다 한 번씩 수령 (visit_rewards_claimed CAS)
"""

import logging
from typing import List

from sqlalchemy.orm import Session

from loyaltyapi.config import Settings
from loyaltyapi.core.achievements import (
    ACHIEVEMENTS,
    AchievementDefinition,
    achievements_for_stat,
    get_achievement,
)
from loyaltyapi.core.exceptions import (
    AlreadyClaimedError,
    NoRewardAvailableError,
    NotFoundError,
    NotUnlockedError,
)
from loyaltyapi.database.session import unit_of_work
from loyaltyapi.repositories.achievement_repository import AchievementRepository
from loyaltyapi.repositories.ledger_repository import LedgerRepository
from loyaltyapi.repositories.stats_repository import StatsRepository
from loyaltyapi.schemas.achievements import (
    AchievementListResponse,
    AchievementStatus,
    ClaimRewardResponse,
    UnlockedAchievement,
)
from loyaltyapi.schemas.stats import UserStatsSchema
from loyaltyapi.utils.timezone_utils import utc_now

logger = logging.getLogger(__name__)


def to_unlocked(definition: AchievementDefinition) -> UnlockedAchievement:
    return UnlockedAchievement(
        slug=definition.slug,
        badge=definition.badge,
        name=definition.name,
        description=definition.description,
        label=definition.label,
        coin_reward=definition.coin_reward,
    )


def visit_reward_progress(games_visited: int, claimed: int, interval: int) -> int:
    """마지막 수령 이후 누적된 방문 수 (수령 시 interval 만큼만 차감된다)"""
    return games_visited - claimed * interval


class AchievementService:
    """업적 관련 비즈니스 로직"""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.achievement_repo = AchievementRepository(db)
        self.stats_repo = StatsRepository(db)
        self.ledger_repo = LedgerRepository(db)

    def _stats(self, telegram_id: int) -> UserStatsSchema:
        return self.stats_repo.get(telegram_id) or UserStatsSchema(telegram_id=telegram_id)

    def evaluate(self, telegram_id: int, stat_key: str, value: int) -> List[UnlockedAchievement]:
        """
        카운터 값으로 업적 해금

        호출자의 트랜잭션 안에서 실행되며 커밋하지 않는다.
        새로 해금된 업적이 없으면 빈 리스트를 반환한다.
        """
        candidates = [d for d in achievements_for_stat(stat_key) if value >= d.threshold]
        if not candidates:
            return []

        existing = self.achievement_repo.map_for_user(telegram_id)
        now = utc_now()
        unlocked: List[UnlockedAchievement] = []
        for definition in candidates:
            if definition.slug in existing:
                continue
            # 동시 요청이 먼저 넣었다면 False - 이미 해금된 것으로 본다
            if self.achievement_repo.unlock(telegram_id, definition.slug, now):
                unlocked.append(to_unlocked(definition))

        if unlocked:
            logger.info(
                f"User {telegram_id} unlocked {[a.slug for a in unlocked]} at {stat_key}={value}"
            )
        return unlocked

    def list_achievements(self, telegram_id: int) -> AchievementListResponse:
        stats = self._stats(telegram_id)
        unlocked = self.achievement_repo.map_for_user(telegram_id)

        items = []
        for definition in ACHIEVEMENTS:
            record = unlocked.get(definition.slug)
            items.append(
                AchievementStatus(
                    slug=definition.slug,
                    badge=definition.badge,
                    name=definition.name,
                    description=definition.description,
                    label=definition.label,
                    stat_key=definition.stat_key,
                    unlocked=record is not None,
                    unlocked_at=record.unlocked_at if record else None,
                    reward_claimed_at=record.reward_claimed_at if record else None,
                    threshold=definition.threshold,
                    current_value=getattr(stats, definition.stat_key, 0),
                    coin_reward=definition.coin_reward,
                )
            )

        interval = self.settings.VISIT_REWARD_EVERY
        progress = visit_reward_progress(
            stats.games_visited, stats.visit_rewards_claimed, interval
        )
        return AchievementListResponse(
            achievements=items,
            visit_reward_progress=min(progress, interval),
            visit_reward_pending=progress >= interval,
            visit_reward_coins=self.settings.VISIT_MILESTONE_REWARD,
        )

    def claim(self, telegram_id: int, slug: str) -> ClaimRewardResponse:
        """
        업적 코인 수령 (사용자당 업적별 1회)

        Raises:
            NotFoundError: 정의되지 않은 업적
            NoRewardAvailableError: 코인 보상이 없는 업적
            NotUnlockedError: 아직 해금되지 않음
            AlreadyClaimedError: 이미 수령함
        """
        definition = get_achievement(slug)
        if definition is None:
            raise NotFoundError(f"Achievement not found: {slug}")
        if not definition.coin_reward:
            raise NoRewardAvailableError("This achievement has no coin reward")

        with unit_of_work(self.db):
            record = self.achievement_repo.get(telegram_id, slug)
            if record is None:
                # 정의가 나중에 추가된 경우 카운터로 한 번 더 평가한다
                stats = self._stats(telegram_id)
                self.evaluate(telegram_id, definition.stat_key, getattr(stats, definition.stat_key, 0))
                record = self.achievement_repo.get(telegram_id, slug)
                if record is None:
                    raise NotUnlockedError()

            if record.reward_claimed_at is not None:
                raise AlreadyClaimedError()
            if not self.achievement_repo.mark_reward_claimed(telegram_id, slug, utc_now()):
                raise AlreadyClaimedError()

            new_balance = self.ledger_repo.change_balance(
                telegram_id,
                definition.coin_reward,
                reason=f"achievement:{slug}",
                ref_id=f"achievement:{slug}:{telegram_id}",
            )
            if new_balance is None:
                raise NotFoundError(f"Profile not found: {telegram_id}")

        logger.info(f"User {telegram_id} claimed {definition.coin_reward} coins for {slug}")
        return ClaimRewardResponse(coins_added=definition.coin_reward, new_balance=new_balance)

    def claim_visit_reward(self, telegram_id: int) -> ClaimRewardResponse:
        """
        방문 마일스톤 보상 수령

        visit_rewards_claimed 를 0 으로 되돌리지 않고 1 증가시키므로
        임계값을 넘긴 방문 수는 다음 주기의 진행도로 남는다.
        """
        interval = self.settings.VISIT_REWARD_EVERY
        coins = self.settings.VISIT_MILESTONE_REWARD

        with unit_of_work(self.db):
            stats = self._stats(telegram_id)
            claimed = stats.visit_rewards_claimed
            progress = visit_reward_progress(stats.games_visited, claimed, interval)
            if progress < interval:
                raise NoRewardAvailableError(
                    "Not enough visits for a reward",
                    details={"progress": max(progress, 0), "required": interval},
                )

            if not self.stats_repo.claim_visit_reward(telegram_id, claimed):
                raise AlreadyClaimedError()

            new_balance = self.ledger_repo.change_balance(
                telegram_id,
                coins,
                reason="visit_milestone",
                ref_id=f"visit_milestone:{telegram_id}:{claimed + 1}",
            )
            if new_balance is None:
                raise NotFoundError(f"Profile not found: {telegram_id}")

        logger.info(f"User {telegram_id} claimed visit milestone #{claimed + 1}")
        return ClaimRewardResponse(coins_added=coins, new_balance=new_balance)
