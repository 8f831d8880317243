from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from loyaltyapi.models.event import BingoWinner, Event, Registration
from loyaltyapi.repositories.base import BaseRepository
from loyaltyapi.schemas.events import (
    BingoWinnerSchema,
    EventSchema,
    RegistrationSchema,
)


class EventRepository(BaseRepository[Event, EventSchema]):
    """행사 데이터 접근 계층"""

    def __init__(self, db: Session):
        super().__init__(Event, EventSchema, db)

    def list_all(self) -> List[EventSchema]:
        rows = self.db.query(self.model_class).order_by(desc(self.model_class.event_date)).all()
        return self._to_schemas(rows)


class RegistrationRepository(BaseRepository[Registration, RegistrationSchema]):
    """행사 등록 데이터 접근 계층"""

    def __init__(self, db: Session):
        super().__init__(Registration, RegistrationSchema, db)

    def get(self, event_id: str, telegram_id: int) -> Optional[RegistrationSchema]:
        model_instance = (
            self.db.query(self.model_class)
            .filter(
                self.model_class.event_id == event_id,
                self.model_class.telegram_id == telegram_id,
            )
            .first()
        )
        return self._to_schema(model_instance)

    def register(
        self, event_id: str, telegram_id: int, status: str = "confirmed"
    ) -> bool:
        """
        등록 행 삽입

        Returns:
            bool: 새로 등록되었으면 True, (event_id, telegram_id) 가 이미 있으면 False
        """
        return self.insert_ignore(
            ["event_id", "telegram_id"],
            event_id=event_id,
            telegram_id=telegram_id,
            status=status,
        )

    def list_for_event(self, event_id: str) -> List[RegistrationSchema]:
        rows = (
            self.db.query(self.model_class)
            .filter(self.model_class.event_id == event_id)
            .order_by(desc(self.model_class.created_at), desc(self.model_class.id))
            .all()
        )
        return self._to_schemas(rows)


class BingoWinnerRepository(BaseRepository[BingoWinner, BingoWinnerSchema]):
    """빙고 당첨 슬롯 데이터 접근 계층"""

    def __init__(self, db: Session):
        super().__init__(BingoWinner, BingoWinnerSchema, db)

    def list_for_event(self, event_id: str) -> List[BingoWinnerSchema]:
        rows = (
            self.db.query(self.model_class)
            .filter(self.model_class.event_id == event_id)
            .all()
        )
        return self._to_schemas(rows)

    def upsert_slot(
        self,
        event_id: str,
        slot_type: str,
        slot_index: int,
        telegram_id: Optional[int] = None,
        team_name: Optional[str] = None,
    ) -> None:
        updated_count = (
            self.db.query(self.model_class)
            .filter(
                self.model_class.event_id == event_id,
                self.model_class.slot_type == slot_type,
                self.model_class.slot_index == slot_index,
            )
            .update(
                {
                    self.model_class.telegram_id: telegram_id,
                    self.model_class.team_name: team_name,
                }
            )
        )
        if updated_count == 0:
            self.insert_ignore(
                ["event_id", "slot_type", "slot_index"],
                event_id=event_id,
                slot_type=slot_type,
                slot_index=slot_index,
                telegram_id=telegram_id,
                team_name=team_name,
            )
