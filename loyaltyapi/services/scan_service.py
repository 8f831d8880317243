"""
스캔/조회 디스패처

임의의 입력(5자리 코드, 접두사 코드, shop-XXXXX, 봇 딥링크 URL)을 정규화하고
분류한 뒤, 네임스페이스에 맞는 리뎀션으로 보낸다.

- 사용자: lookup / redeem_any
- 스태프: scan (티켓 소모, 구매 코드 확인) / recent
"""

import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from loyaltyapi.config import Settings
from loyaltyapi.core.exceptions import (
    CodeAlreadyUsedError,
    CodeNotFoundError,
    CodeNotRedeemedError,
    TargetNotFoundError,
)
from loyaltyapi.database.session import unit_of_work
from loyaltyapi.models.code import CodeNamespace
from loyaltyapi.repositories.catalog_repository import CatalogRepository
from loyaltyapi.repositories.profile_repository import ProfileRepository
from loyaltyapi.repositories.ticket_repository import TicketRepository
from loyaltyapi.schemas.codes import CodeLookupResponse, CodeRedeemResponse
from loyaltyapi.schemas.profile import ParticipantInfo
from loyaltyapi.schemas.scanner import RecentScan, RecentScansResponse, ScanResponse
from loyaltyapi.services.code_registry import TICKET, CodeRegistry
from loyaltyapi.services.redemption_service import RedemptionService, to_item_response
from loyaltyapi.utils.timezone_utils import utc_now

logger = logging.getLogger(__name__)


class ScanService:
    """코드 분류 및 라우팅"""

    def __init__(
        self,
        db: Session,
        settings: Settings,
        redemption_service: Optional[RedemptionService] = None,
    ):
        self.db = db
        self.settings = settings
        self.redemption = redemption_service or RedemptionService(db, settings)
        self.registry: CodeRegistry = self.redemption.registry
        self.ticket_repo = TicketRepository(db)
        self.profile_repo = ProfileRepository(db)
        self.catalog_repo = CatalogRepository(db)

    def _participant(self, telegram_id: Optional[int]) -> ParticipantInfo:
        profile = self.profile_repo.get(telegram_id) if telegram_id is not None else None
        if profile is None:
            raise TargetNotFoundError("Participant not found", details={"telegram_id": telegram_id})
        return ParticipantInfo.model_validate(profile.model_dump())

    def _item(self, catalog_item_id: Optional[str]):
        item = self.catalog_repo.get(catalog_item_id) if catalog_item_id else None
        if item is None:
            raise TargetNotFoundError("Catalog item not found", details={"catalog_item_id": catalog_item_id})
        return to_item_response(item)

    # ------------------------------------------------------------------
    # 사용자
    # ------------------------------------------------------------------

    def lookup(self, raw_code: str) -> CodeLookupResponse:
        """코드 종류 확인 - 없거나 이미 사용된 코드는 CodeNotFound"""
        parsed = self.registry.parse(raw_code)
        classified = self.registry.classify(parsed)
        if classified is None or classified.used:
            raise CodeNotFoundError(details={"code": parsed.value})
        return CodeLookupResponse(code=classified.value, type=classified.kind)

    def redeem_any(self, telegram_id: int, raw_code: str) -> CodeRedeemResponse:
        """
        분류 결과에 따라 등록/구매/경품 리뎀션으로 라우팅

        분류는 읽기만 하고, 실제 상태 전이는 각 리뎀션의 트랜잭션 안에서
        조건부 UPDATE 로 다시 검증된다.
        """
        parsed = self.registry.parse(raw_code)
        classified = self.registry.classify(parsed)
        if classified is None or classified.kind == TICKET:
            raise CodeNotFoundError(details={"code": parsed.value})
        if classified.used:
            raise CodeAlreadyUsedError(details={"code": classified.value})

        logger.info(f"Dispatching {classified.kind} code {classified.value} for {telegram_id}")

        if classified.kind == CodeNamespace.REGISTRATION.value:
            result = self.redemption.redeem_registration(telegram_id, classified.value)
            return CodeRedeemResponse(
                type="registration",
                message=result.message,
                new_balance=result.new_balance,
                coins_earned=result.coins_earned,
                event=result.event.model_dump(),
                newly_unlocked_achievements=result.newly_unlocked_achievements,
            )

        if classified.kind == CodeNamespace.PURCHASE.value:
            result = self.redemption.redeem_purchase_code(telegram_id, classified.value)
            return CodeRedeemResponse(
                type="purchase",
                message=result.message,
                new_balance=result.new_balance,
                coins_earned=result.bonus_coins,
                item=result.item,
                ticket=result.ticket,
                newly_unlocked_achievements=result.newly_unlocked_achievements,
            )

        result = self.redemption.claim_prize(telegram_id, classified.value)
        return CodeRedeemResponse(
            type="prize",
            message=result.message,
            new_balance=result.new_balance,
            coins_earned=result.coins_earned,
            newly_unlocked_achievements=result.newly_unlocked_achievements,
        )

    # ------------------------------------------------------------------
    # 스태프
    # ------------------------------------------------------------------

    def scan(self, raw_code: str) -> ScanResponse:
        """
        스태프 스캔

        - 티켓: 미사용이면 사용 처리 후 소유자와 상품 반환
        - 구매 코드: 사용된(교환된) 코드면 구매자와 상품 반환, 아니면 CodeNotRedeemed
        - 그 외: CodeNotFound
        """
        parsed = self.registry.parse(raw_code)

        with unit_of_work(self.db):
            if parsed.namespace_hint is None:
                ticket = self.ticket_repo.get_by_code(parsed.value)
                if ticket is not None:
                    if ticket.used_at is not None:
                        raise CodeAlreadyUsedError("Ticket already used", details={"code": ticket.code})
                    if not self.ticket_repo.mark_used(ticket.id, utc_now()):
                        raise CodeAlreadyUsedError("Ticket already used", details={"code": ticket.code})
                    response = ScanResponse(
                        kind="ticket",
                        code=ticket.code,
                        participant=self._participant(ticket.telegram_id),
                        item=self._item(ticket.catalog_item_id),
                    )
                    logger.info(f"Ticket {ticket.code} scanned for {ticket.telegram_id}")
                    return response

            code = self.registry.code_repo.find_first(
                parsed.lookup_candidates(), CodeNamespace.PURCHASE
            )
            if code is None:
                raise CodeNotFoundError(details={"code": parsed.value})
            if code.used_at is None or code.used_by is None:
                raise CodeNotRedeemedError(details={"code": code.value})

            return ScanResponse(
                kind="purchase",
                code=code.value,
                participant=self._participant(code.used_by),
                item=self._item(code.catalog_item_id),
            )

    def recent(self, hours: int = 24) -> RecentScansResponse:
        """최근 사용 처리된 티켓"""
        tickets = self.ticket_repo.list_used_since(utc_now() - timedelta(hours=hours))
        profiles = self.profile_repo.get_many(t.telegram_id for t in tickets)
        items = self.catalog_repo.get_many(t.catalog_item_id for t in tickets)

        scans = []
        for ticket in tickets:
            profile = profiles.get(ticket.telegram_id)
            item = items.get(ticket.catalog_item_id)
            scans.append(
                RecentScan(
                    id=ticket.id,
                    code=ticket.code,
                    used_at=ticket.used_at,
                    participant=(
                        ParticipantInfo.model_validate(profile.model_dump()) if profile else None
                    ),
                    item=to_item_response(item) if item else None,
                )
            )
        return RecentScansResponse(items=scans)
