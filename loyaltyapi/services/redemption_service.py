"""
리뎀션 엔진

코드 한 개를 정확히 한 번 사용 처리하고, 그에 맞는 보상을 같은 트랜잭션에서 적용한다.

처리 순서 (모든 네임스페이스 공통):
1. 코드 조회 (없으면 CodeNotFound)
2. used_at 확인 (있으면 CodeAlreadyUsed)
3. 대상(행사/상품) 확인 - 없으면 TargetNotFound, 코드는 미사용 상태로 남는다
4. 네임스페이스별 사전 검사 (행사 날짜, 중복 등록, 잔액)
5. used_at IS NULL 조건부 UPDATE 로 사용 처리 + 원장 반영
   (unit_of_work 안에서 함께 커밋되거나 함께 롤백된다)

등록 코드는 행사 전체가 공유하므로 used_at 을 바꾸지 않는다.
사용자별 1회 보장은 registrations 의 (event_id, telegram_id) 유니크 제약이 맡는다.
"""

import logging
import uuid
from typing import Optional, Type

from sqlalchemy.orm import Session

from loyaltyapi.config import Settings
from loyaltyapi.core.code_targets import (
    CodeTarget,
    PrizeTarget,
    PurchaseTarget,
    RegistrationTarget,
    target_of,
)
from loyaltyapi.core.exceptions import (
    AlreadyRegisteredError,
    CodeAlreadyUsedError,
    CodeNotFoundError,
    EventExpiredError,
    InsufficientBalanceError,
    TargetNotFoundError,
)
from loyaltyapi.core.rewards import get_catalog_item_price
from loyaltyapi.database.session import unit_of_work
from loyaltyapi.models.code import CodeNamespace
from loyaltyapi.repositories.catalog_repository import CatalogRepository
from loyaltyapi.repositories.code_repository import CodeRepository
from loyaltyapi.repositories.event_repository import (
    EventRepository,
    RegistrationRepository,
)
from loyaltyapi.schemas.bingo import BingoClaimResponse
from loyaltyapi.schemas.catalog import (
    CatalogItemResponse,
    CatalogItemSchema,
    PurchaseResponse,
    TicketInfo,
    TicketSchema,
)
from loyaltyapi.schemas.codes import CodeSchema
from loyaltyapi.schemas.events import EventInfo, RegisterResponse
from loyaltyapi.schemas.ledger import RewardApplication
from loyaltyapi.services.code_registry import CodeRegistry
from loyaltyapi.services.ledger_service import LedgerService
from loyaltyapi.utils.code_parser import ParsedCode
from loyaltyapi.utils.timezone_utils import is_event_expired, utc_now

logger = logging.getLogger(__name__)

TEST_EVENT = EventInfo(id="test", title="Test event")


def to_item_response(item: CatalogItemSchema) -> CatalogItemResponse:
    """확정 가격을 적용한 상품 응답"""
    return CatalogItemResponse(
        id=item.id,
        name=item.name,
        description=item.description,
        price=get_catalog_item_price(item.id, item.price),
        photo=item.photo,
    )


def _ticket_info(ticket: TicketSchema) -> TicketInfo:
    return TicketInfo(id=ticket.id, code=ticket.code, created_at=ticket.created_at)


class RedemptionService:
    """코드 사용 처리 서비스"""

    def __init__(
        self,
        db: Session,
        settings: Settings,
        registry: Optional[CodeRegistry] = None,
        ledger: Optional[LedgerService] = None,
    ):
        self.db = db
        self.settings = settings
        self.registry = registry or CodeRegistry(db, settings)
        self.ledger = ledger or LedgerService(db, settings)
        self.code_repo = CodeRepository(db)
        self.event_repo = EventRepository(db)
        self.registration_repo = RegistrationRepository(db)
        self.catalog_repo = CatalogRepository(db)

    # ------------------------------------------------------------------
    # 공통 단계
    # ------------------------------------------------------------------

    def _load_unused(self, parsed: ParsedCode, namespace: CodeNamespace) -> CodeSchema:
        code = self.code_repo.find_first(parsed.lookup_candidates(), namespace)
        if code is None:
            raise CodeNotFoundError(details={"code": parsed.value})
        if code.used_at is not None:
            raise CodeAlreadyUsedError(details={"code": code.value})
        return code

    def _target(self, code: CodeSchema, expected: Type[CodeTarget]) -> CodeTarget:
        """코드의 대상을 꺼낸다. 대상이 비었거나 종류가 다르면 TargetNotFoundError."""
        try:
            target = target_of(code, self.settings.BINGO_REWARD)
        except ValueError as e:
            logger.error(f"Broken code row {code.id}: {str(e)}")
            raise TargetNotFoundError(details={"code": code.value})

        if not isinstance(target, expected):
            logger.error(
                f"Code {code.value} resolved to {type(target).__name__}, expected {expected.__name__}"
            )
            raise TargetNotFoundError(details={"code": code.value})
        return target

    def _consume(self, code: CodeSchema, telegram_id: int) -> None:
        """used_at IS NULL 일 때만 사용 처리. 동시 요청 중 하나만 통과한다."""
        if not self.code_repo.mark_used(code.id, telegram_id, utc_now()):
            logger.warning(f"Lost redemption race for code {code.value} (user {telegram_id})")
            raise CodeAlreadyUsedError(details={"code": code.value})

    def _ensure_affordable(self, telegram_id: int, price: int) -> None:
        balance = self.ledger.ledger_repo.get_balance(telegram_id) or 0
        if balance < price:
            raise InsufficientBalanceError(
                f"Insufficient balance. Required: {price}, Available: {balance}",
                details={"required": price, "available": balance},
            )

    # ------------------------------------------------------------------
    # 행사 등록
    # ------------------------------------------------------------------

    def redeem_registration(self, telegram_id: int, raw_code: str) -> RegisterResponse:
        """
        등록 코드로 행사 참가 등록 + 방문 보상

        Raises:
            InvalidCodeFormatError, CodeNotFoundError, CodeAlreadyUsedError,
            TargetNotFoundError, EventExpiredError, AlreadyRegisteredError
        """
        parsed = self.registry.parse(raw_code)

        if self.registry.is_registration_test_code(parsed):
            with unit_of_work(self.db):
                reward = self.ledger.apply_visit_reward(
                    telegram_id, ref_id=f"test:{parsed.value}:{telegram_id}:{uuid.uuid4().hex}"
                )
            logger.info(f"Registration test code used by {telegram_id}")
            return self._register_response(TEST_EVENT, reward)

        with unit_of_work(self.db):
            code = self._load_unused(parsed, CodeNamespace.REGISTRATION)
            target = self._target(code, RegistrationTarget)

            event = self.event_repo.get_by_id(target.event_id)
            if event is None:
                raise TargetNotFoundError("Event not found", details={"event_id": target.event_id})

            if is_event_expired(event.event_date, self.settings.TIMEZONE):
                raise EventExpiredError(details={"event_id": event.id})

            if self.registration_repo.get(event.id, telegram_id) is not None:
                raise AlreadyRegisteredError(details={"event_id": event.id})
            if not self.registration_repo.register(event.id, telegram_id):
                raise AlreadyRegisteredError(details={"event_id": event.id})

            reward = self.ledger.apply_visit_reward(
                telegram_id, ref_id=f"registration:{event.id}:{telegram_id}"
            )

        logger.info(f"User {telegram_id} registered for event {event.id} with code {code.value}")
        return self._register_response(EventInfo(id=event.id, title=event.title), reward)

    @staticmethod
    def _register_response(event: EventInfo, reward: RewardApplication) -> RegisterResponse:
        return RegisterResponse(
            message=f"Registered for {event.title}",
            event=event,
            new_balance=reward.new_balance,
            coins_earned=reward.coins_earned,
            newly_unlocked_achievements=reward.newly_unlocked,
        )

    # ------------------------------------------------------------------
    # 구매
    # ------------------------------------------------------------------

    def purchase_item(self, telegram_id: int, catalog_item_id: str) -> PurchaseResponse:
        """상품 직접 구매"""
        with unit_of_work(self.db):
            item = self.catalog_repo.get(catalog_item_id)
            if item is None:
                raise TargetNotFoundError("Catalog item not found", details={"catalog_item_id": catalog_item_id})

            reward = self.ledger.apply_purchase(
                telegram_id,
                item,
                ref_id=f"purchase:{item.id}:{telegram_id}:{uuid.uuid4().hex}",
            )
            ticket = self.registry.issue_ticket(telegram_id, item.id)

        logger.info(f"User {telegram_id} bought {item.id}, ticket {ticket.code}")
        return self._purchase_response(item, ticket, reward)

    def redeem_purchase_code(self, telegram_id: int, raw_code: str) -> PurchaseResponse:
        """
        구매 코드 사용

        잔액 확인은 사용 처리 전에 한다. 부족하면 코드는 미사용으로 남는다.
        """
        parsed = self.registry.parse(raw_code)

        with unit_of_work(self.db):
            code = self._load_unused(parsed, CodeNamespace.PURCHASE)
            target = self._target(code, PurchaseTarget)

            item = self.catalog_repo.get(target.catalog_item_id)
            if item is None:
                raise TargetNotFoundError(
                    "Catalog item not found", details={"catalog_item_id": target.catalog_item_id}
                )

            self._ensure_affordable(telegram_id, get_catalog_item_price(item.id, item.price))
            self._consume(code, telegram_id)
            reward = self.ledger.apply_purchase(telegram_id, item, ref_id=f"code:{code.value}")
            ticket = self.registry.issue_ticket(telegram_id, item.id, source_code=code.value)

        logger.info(f"User {telegram_id} redeemed purchase code {code.value} for {item.id}")
        return self._purchase_response(item, ticket, reward)

    @staticmethod
    def _purchase_response(
        item: CatalogItemSchema, ticket: TicketSchema, reward: RewardApplication
    ) -> PurchaseResponse:
        return PurchaseResponse(
            message=f"Purchased {item.name}",
            ticket=_ticket_info(ticket),
            item=to_item_response(item),
            new_balance=reward.new_balance,
            bonus_coins=reward.bonus_coins,
            newly_unlocked_achievements=reward.newly_unlocked,
        )

    # ------------------------------------------------------------------
    # 빙고 경품
    # ------------------------------------------------------------------

    def claim_prize(self, telegram_id: int, raw_code: str) -> BingoClaimResponse:
        """경품 코드(또는 테스트 코드)로 빙고 보상 수령"""
        parsed = self.registry.parse(raw_code)

        if self.registry.is_bingo_test_code(parsed):
            with unit_of_work(self.db):
                reward = self.ledger.apply_bingo_win(
                    telegram_id,
                    self.settings.BINGO_REWARD,
                    ref_id=f"test:{parsed.value}:{telegram_id}:{uuid.uuid4().hex}",
                )
            return self._bingo_response(reward)

        with unit_of_work(self.db):
            code = self._load_unused(parsed, CodeNamespace.PRIZE)
            target = self._target(code, PrizeTarget)

            self._consume(code, telegram_id)
            reward = self.ledger.apply_bingo_win(
                telegram_id, target.coins_amount, ref_id=f"code:{code.value}"
            )

        logger.info(f"User {telegram_id} claimed prize code {code.value}: +{target.coins_amount}")
        return self._bingo_response(reward)

    @staticmethod
    def _bingo_response(reward: RewardApplication) -> BingoClaimResponse:
        return BingoClaimResponse(
            message=f"Bingo! +{reward.coins_earned} coins",
            new_balance=reward.new_balance,
            coins_earned=reward.coins_earned,
            newly_unlocked_achievements=reward.newly_unlocked,
        )
