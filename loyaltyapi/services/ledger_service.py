"""
원장/보상 적용 서비스

코인을 벌거나 쓰는 모든 경로(행사 등록, 구매, 빙고, 수동 지급)가 이 클래스를 거친다.
apply_* 는 잔액 변경, 카운터 증가, 업적 평가를 호출자의 트랜잭션 하나 안에서 수행하고
커밋하지 않는다. 호출자가 unit_of_work 로 감싸야 한다.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from loyaltyapi.config import Settings
from loyaltyapi.core.achievements import (
    STAT_BINGO_COLLECTED,
    STAT_GAMES_VISITED,
    STAT_TICKETS_PURCHASED,
)
from loyaltyapi.core.exceptions import (
    InsufficientBalanceError,
    NotFoundError,
    ValidationError,
)
from loyaltyapi.core.rewards import PURCHASE_MILESTONE_REWARDS, get_catalog_item_price
from loyaltyapi.repositories.ledger_repository import LedgerRepository
from loyaltyapi.repositories.stats_repository import StatsRepository
from loyaltyapi.schemas.catalog import CatalogItemSchema
from loyaltyapi.schemas.ledger import (
    BalanceResponse,
    LedgerHistoryResponse,
    LedgerIntegrityResponse,
    RewardApplication,
)
from loyaltyapi.services.achievement_service import AchievementService
from loyaltyapi.utils.timezone_utils import utc_now

logger = logging.getLogger(__name__)


class LedgerService:
    """잔액/카운터 변경 서비스"""

    def __init__(
        self,
        db: Session,
        settings: Settings,
        achievement_service: Optional[AchievementService] = None,
    ):
        self.db = db
        self.settings = settings
        self.ledger_repo = LedgerRepository(db)
        self.stats_repo = StatsRepository(db)
        self.achievements = achievement_service or AchievementService(db, settings)

    # ------------------------------------------------------------------
    # 조회
    # ------------------------------------------------------------------

    def get_balance(self, telegram_id: int) -> BalanceResponse:
        return BalanceResponse(balance=self.ledger_repo.get_balance(telegram_id) or 0)

    def get_history(self, telegram_id: int, limit: int = 50, offset: int = 0) -> LedgerHistoryResponse:
        return self.ledger_repo.get_user_ledger(telegram_id, limit=min(limit, 100), offset=offset)

    def verify_integrity(self, telegram_id: int) -> LedgerIntegrityResponse:
        result = self.ledger_repo.verify_integrity_for_user(telegram_id)
        if result.status != "OK":
            logger.warning(
                f"Balance mismatch for {telegram_id}: recorded={result.recorded_balance} calculated={result.calculated_balance}"
            )
        return result

    # ------------------------------------------------------------------
    # 기본 연산
    # ------------------------------------------------------------------

    def credit(self, telegram_id: int, amount: int, reason: str, ref_id: str) -> int:
        """코인 적립 (상한 없음). 변경 후 잔액 반환."""
        if amount <= 0:
            raise ValidationError("Credit amount must be positive")

        new_balance = self.ledger_repo.change_balance(telegram_id, amount, reason, ref_id)
        if new_balance is None:
            raise NotFoundError(f"Profile not found: {telegram_id}")
        return new_balance

    def debit(self, telegram_id: int, amount: int, reason: str, ref_id: str) -> int:
        """
        코인 차감

        잔액이 부족하면 아무것도 바꾸지 않고 InsufficientBalanceError.
        """
        if amount <= 0:
            raise ValidationError("Debit amount must be positive")

        new_balance = self.ledger_repo.change_balance(
            telegram_id, -amount, reason, ref_id, required_balance=amount
        )
        if new_balance is None:
            self._raise_insufficient(telegram_id, amount)
        return new_balance

    def _raise_insufficient(self, telegram_id: int, required: int):
        available = self.ledger_repo.get_balance(telegram_id)
        if available is None:
            raise NotFoundError(f"Profile not found: {telegram_id}")
        raise InsufficientBalanceError(
            f"Insufficient balance. Required: {required}, Available: {available}",
            details={"required": required, "available": available},
        )

    # ------------------------------------------------------------------
    # 보상 적용
    # ------------------------------------------------------------------

    def apply_visit_reward(self, telegram_id: int, ref_id: str) -> RewardApplication:
        """방문 1회: games_visited +1, VISIT_REWARD 적립, 업적 평가"""
        visits = self.stats_repo.increment(telegram_id, STAT_GAMES_VISITED)
        coins = self.settings.VISIT_REWARD
        new_balance = self.credit(telegram_id, coins, "visit_reward", ref_id)
        unlocked = self.achievements.evaluate(telegram_id, STAT_GAMES_VISITED, visits)

        logger.info(f"Visit reward for {telegram_id}: visits={visits}, balance={new_balance}")
        return RewardApplication(
            new_balance=new_balance, coins_earned=coins, newly_unlocked=unlocked
        )

    def apply_purchase(
        self, telegram_id: int, item: CatalogItemSchema, ref_id: str
    ) -> RewardApplication:
        """
        구매 1회: 가격 차감, tickets_purchased +1, 구매 마일스톤 보너스, 업적 평가

        마일스톤 보너스는 가격 차감과 같은 UPDATE 에 합산된다.
        UPDATE 조건은 balance >= price 이므로 보너스로 부족분을 메울 수는 없다.
        """
        price = get_catalog_item_price(item.id, item.price)
        purchases = self.stats_repo.increment(telegram_id, STAT_TICKETS_PURCHASED)

        now = utc_now()
        bonus = 0
        for threshold, coins in sorted(PURCHASE_MILESTONE_REWARDS.items()):
            if purchases >= threshold and self.stats_repo.claim_purchase_milestone(
                telegram_id, threshold, now
            ):
                bonus += coins

        new_balance = self.ledger_repo.change_balance(
            telegram_id,
            bonus - price,
            reason=f"purchase:{item.id}",
            ref_id=ref_id,
            required_balance=price,
        )
        if new_balance is None:
            self._raise_insufficient(telegram_id, price)

        unlocked = self.achievements.evaluate(telegram_id, STAT_TICKETS_PURCHASED, purchases)

        logger.info(
            f"Purchase by {telegram_id}: item={item.id}, price={price}, bonus={bonus}, balance={new_balance}"
        )
        return RewardApplication(
            new_balance=new_balance,
            coins_earned=-price,
            bonus_coins=bonus,
            newly_unlocked=unlocked,
        )

    def apply_bingo_win(
        self, telegram_id: int, reward_amount: int, ref_id: str, reason: str = "bingo_win"
    ) -> RewardApplication:
        """빙고 1회: bingo_collected +1, 보상 적립, 업적 평가"""
        wins = self.stats_repo.increment(telegram_id, STAT_BINGO_COLLECTED)
        new_balance = self.credit(telegram_id, reward_amount, reason, ref_id)
        unlocked = self.achievements.evaluate(telegram_id, STAT_BINGO_COLLECTED, wins)

        logger.info(f"Bingo win for {telegram_id}: +{reward_amount}, wins={wins}")
        return RewardApplication(
            new_balance=new_balance, coins_earned=reward_amount, newly_unlocked=unlocked
        )

    def award(self, telegram_id: int, amount: int, reason: str, ref_id: str) -> RewardApplication:
        """수동 지급 - 카운터는 바꾸지 않는다"""
        new_balance = self.credit(telegram_id, amount, reason, ref_id)
        return RewardApplication(new_balance=new_balance, coins_earned=amount)
