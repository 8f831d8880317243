from typing import Dict, Iterable, List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from loyaltyapi.models.catalog import CatalogItem
from loyaltyapi.repositories.base import BaseRepository
from loyaltyapi.schemas.catalog import CatalogItemSchema


class CatalogRepository(BaseRepository[CatalogItem, CatalogItemSchema]):
    """카탈로그 데이터 접근 계층"""

    def __init__(self, db: Session):
        super().__init__(CatalogItem, CatalogItemSchema, db)

    def list_by_price(self) -> List[CatalogItemSchema]:
        rows = self.db.query(self.model_class).order_by(self.model_class.price).all()
        return self._to_schemas(rows)

    def list_newest(self) -> List[CatalogItemSchema]:
        rows = self.db.query(self.model_class).order_by(desc(self.model_class.created_at)).all()
        return self._to_schemas(rows)

    def get_many(self, item_ids: Iterable[str]) -> Dict[str, CatalogItemSchema]:
        ids = list(set(item_ids))
        if not ids:
            return {}
        rows = self.db.query(self.model_class).filter(self.model_class.id.in_(ids)).all()
        return {row.id: self._to_schema(row) for row in rows}

    def get(self, item_id: str) -> Optional[CatalogItemSchema]:
        return self.get_by_id(item_id)
