"""
행사 관리 서비스 (목록, 생성, 등록 코드, 참가자, 빙고 당첨자, 수동 지급, 경품 코드)
"""

import logging
import uuid
from datetime import timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from loyaltyapi.config import Settings
from loyaltyapi.core.exceptions import (
    CodeAlreadyUsedError,
    CodeNotFoundError,
    NotFoundError,
    NotRegisteredError,
    ValidationError,
)
from loyaltyapi.core.rewards import (
    PERSONAL_BINGO_SLOTS,
    TEAM_BINGO_SLOTS,
    bingo_reward_types,
)
from loyaltyapi.database.session import unit_of_work
from loyaltyapi.models.code import CodeNamespace
from loyaltyapi.repositories.event_repository import (
    BingoWinnerRepository,
    EventRepository,
    RegistrationRepository,
)
from loyaltyapi.repositories.profile_repository import ProfileRepository
from loyaltyapi.schemas.codes import IssuedCodeResponse
from loyaltyapi.schemas.events import (
    AwardCoinsRequest,
    AwardCoinsResponse,
    BingoWinnerSlot,
    BingoWinnersResponse,
    BingoWinnersUpdateRequest,
    CloseCodeResponse,
    EventCreateRequest,
    EventCreateResponse,
    EventListResponse,
    EventSchema,
    EventWithCode,
    RegistrationEntry,
    RegistrationListResponse,
)
from loyaltyapi.services.code_registry import CodeRegistry
from loyaltyapi.services.ledger_service import LedgerService
from loyaltyapi.utils.timezone_utils import ensure_aware, utc_now

logger = logging.getLogger(__name__)


class EventService:
    """행사 관련 비즈니스 로직"""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.event_repo = EventRepository(db)
        self.registration_repo = RegistrationRepository(db)
        self.winner_repo = BingoWinnerRepository(db)
        self.profile_repo = ProfileRepository(db)
        self.registry = CodeRegistry(db, settings)
        self.ledger = LedgerService(db, settings)

    def _require_event(self, event_id: str) -> EventSchema:
        event = self.event_repo.get_by_id(event_id)
        if event is None:
            raise NotFoundError(f"Event not found: {event_id}")
        return event

    # ------------------------------------------------------------------
    # 목록 / 생성
    # ------------------------------------------------------------------

    def list_events(self, include_codes: bool = False) -> EventListResponse:
        """행사 목록 (최근 날짜순). 등록 코드는 관리자 요청에만 포함한다."""
        events = self.event_repo.list_all()
        codes = (
            self.registry.code_repo.registration_codes_for_events([e.id for e in events])
            if include_codes
            else {}
        )
        return EventListResponse(
            events=[
                EventWithCode(**event.model_dump(), code=codes.get(event.id))
                for event in events
            ]
        )

    def create_event(self, request: EventCreateRequest, created_by: int) -> EventCreateResponse:
        """행사 생성 + 등록 코드 발급 (같은 트랜잭션)"""
        event_date = ensure_aware(request.event_date or utc_now()).astimezone(timezone.utc)

        with unit_of_work(self.db):
            event = self.event_repo.create(
                id=uuid.uuid4().hex,
                title=request.title.strip(),
                description=(request.description or "").strip() or None,
                event_date=event_date,
                location=(request.location or "").strip() or None,
                price=request.price,
                max_participants=request.max_participants,
            )
            code = self.registry.issue_registration_code(event.id, created_by=created_by)

        logger.info(f"Event {event.id} created by {created_by} with code {code.value}")
        return EventCreateResponse(
            id=event.id,
            title=event.title,
            event_date=event.event_date,
            created_at=event.created_at,
            code=code.value,
        )

    def close_registration_code(self, event_id: str) -> CloseCodeResponse:
        """등록 코드를 닫는다. 이후 입력은 CodeAlreadyUsed."""
        self._require_event(event_id)
        closed_at = utc_now()

        with unit_of_work(self.db):
            code = self.registry.code_repo.get_registration_code(event_id)
            if code is None:
                raise CodeNotFoundError(details={"event_id": event_id})
            if not self.registry.code_repo.close(code.id, closed_at):
                raise CodeAlreadyUsedError("Registration code is already closed")

        logger.info(f"Registration code {code.value} for event {event_id} closed")
        return CloseCodeResponse(code=code.value, closed_at=closed_at)

    # ------------------------------------------------------------------
    # 참가자 / 지급
    # ------------------------------------------------------------------

    def list_registrations(self, event_id: str) -> RegistrationListResponse:
        self._require_event(event_id)
        registrations = self.registration_repo.list_for_event(event_id)
        profiles = self.profile_repo.get_many(r.telegram_id for r in registrations)

        entries = []
        for registration in registrations:
            profile = profiles.get(registration.telegram_id)
            entries.append(
                RegistrationEntry(
                    telegram_id=registration.telegram_id,
                    username=profile.username if profile else None,
                    first_name=profile.first_name if profile else None,
                    avatar_url=profile.avatar_url if profile else None,
                    registered_at=registration.created_at,
                    status=registration.status,
                    team_id=registration.team_id,
                )
            )
        return RegistrationListResponse(registrations=entries)

    def award_coins(self, request: AwardCoinsRequest, awarded_by: int) -> AwardCoinsResponse:
        """
        행사 참가자에게 코인 수동 지급

        reward_type 이 알려진 빙고 보상이면 그 금액, 아니면 amount 를 쓴다.
        """
        reward_types = bingo_reward_types()
        if request.reward_type and request.reward_type in reward_types:
            amount = reward_types[request.reward_type]
            reason = f"award:{request.reward_type}"
        elif request.amount is not None:
            amount = request.amount
            reason = "award:manual"
        else:
            raise ValidationError(
                "Unknown reward_type",
                details={"reward_type": request.reward_type, "allowed": sorted(reward_types)},
            )

        with unit_of_work(self.db):
            if self.registration_repo.get(request.event_id, request.telegram_id) is None:
                raise NotRegisteredError()
            reward = self.ledger.award(
                request.telegram_id,
                amount,
                reason=reason,
                ref_id=f"award:{request.event_id}:{request.telegram_id}:{uuid.uuid4().hex}",
            )

        logger.info(
            f"Awarded {amount} coins to {request.telegram_id} for event {request.event_id} by {awarded_by}"
        )
        return AwardCoinsResponse(new_balance=reward.new_balance, amount=amount)

    def issue_prize_code(
        self, event_id: str, created_by: int, coins_amount: Optional[int] = None
    ) -> IssuedCodeResponse:
        self._require_event(event_id)
        with unit_of_work(self.db):
            code = self.registry.issue_prize_code(
                coins_amount, created_by=created_by, event_id=event_id
            )

        logger.info(f"Prize code {code.value} issued for event {event_id} by {created_by}")
        return IssuedCodeResponse(
            id=code.id,
            code=code.value,
            namespace=CodeNamespace.PRIZE,
            coins_amount=code.coins_amount,
            event_id=code.event_id,
            created_at=code.created_at,
        )

    # ------------------------------------------------------------------
    # 빙고 당첨자
    # ------------------------------------------------------------------

    def get_bingo_winners(self, event_id: str) -> BingoWinnersResponse:
        self._require_event(event_id)
        personal_ids: List[Optional[int]] = [None] * PERSONAL_BINGO_SLOTS
        team: List[Optional[str]] = [None] * TEAM_BINGO_SLOTS

        for row in self.winner_repo.list_for_event(event_id):
            if row.slot_type == "personal" and 0 <= row.slot_index < PERSONAL_BINGO_SLOTS:
                personal_ids[row.slot_index] = row.telegram_id
            elif row.slot_type == "team" and 0 <= row.slot_index < TEAM_BINGO_SLOTS:
                team[row.slot_index] = row.team_name

        profiles = self.profile_repo.get_many(t for t in personal_ids if t is not None)
        personal: List[Optional[BingoWinnerSlot]] = []
        for telegram_id in personal_ids:
            if telegram_id is None:
                personal.append(None)
                continue
            profile = profiles.get(telegram_id)
            personal.append(
                BingoWinnerSlot(
                    telegram_id=telegram_id,
                    username=profile.username if profile else None,
                    first_name=profile.first_name if profile else None,
                    avatar_url=profile.avatar_url if profile else None,
                )
            )
        return BingoWinnersResponse(personal=personal, team=team)

    def update_bingo_winners(
        self, event_id: str, request: BingoWinnersUpdateRequest
    ) -> BingoWinnersResponse:
        """전달된 슬롯만 덮어쓴다 (개인 최대 4칸, 팀 최대 3칸)"""
        self._require_event(event_id)
        with unit_of_work(self.db):
            for index, telegram_id in enumerate(request.personal[:PERSONAL_BINGO_SLOTS]):
                self.winner_repo.upsert_slot(event_id, "personal", index, telegram_id=telegram_id)
            for index, team_name in enumerate(request.team[:TEAM_BINGO_SLOTS]):
                self.winner_repo.upsert_slot(
                    event_id, "team", index, team_name=(team_name or "").strip() or None
                )
        return self.get_bingo_winners(event_id)
