from datetime import datetime
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from loyaltyapi.models.catalog import Ticket
from loyaltyapi.repositories.base import BaseRepository
from loyaltyapi.schemas.catalog import TicketSchema


class TicketRepository(BaseRepository[Ticket, TicketSchema]):
    """티켓 데이터 접근 계층"""

    def __init__(self, db: Session):
        super().__init__(Ticket, TicketSchema, db)

    def get_by_code(self, code: str) -> Optional[TicketSchema]:
        return self.get_by_field("code", code)

    def code_exists(self, code: str) -> bool:
        return (
            self.db.query(self.model_class.id)
            .filter(self.model_class.code == code)
            .first()
            is not None
        )

    def insert_if_absent(
        self,
        code: str,
        telegram_id: int,
        catalog_item_id: str,
        source_code: Optional[str] = None,
    ) -> bool:
        return self.insert_ignore(
            ["code"],
            code=code,
            telegram_id=telegram_id,
            catalog_item_id=catalog_item_id,
            source_code=source_code,
        )

    def mark_used(self, ticket_id: int, used_at: datetime) -> bool:
        """미사용 티켓만 사용 처리 (compare-and-swap)"""
        updated_count = (
            self.db.query(self.model_class)
            .filter(
                self.model_class.id == ticket_id,
                self.model_class.used_at.is_(None),
            )
            .update({self.model_class.used_at: used_at})
        )
        return updated_count > 0

    def list_used_since(self, since: datetime) -> List[TicketSchema]:
        rows = (
            self.db.query(self.model_class)
            .filter(
                self.model_class.used_at.isnot(None),
                self.model_class.used_at >= since,
            )
            .order_by(desc(self.model_class.used_at))
            .all()
        )
        return self._to_schemas(rows)
