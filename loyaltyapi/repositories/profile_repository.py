from typing import Dict, Iterable, Optional

from sqlalchemy.orm import Session

from loyaltyapi.models.profile import Profile
from loyaltyapi.repositories.base import BaseRepository
from loyaltyapi.schemas.profile import ProfileSchema


class ProfileRepository(BaseRepository[Profile, ProfileSchema]):
    """프로필 데이터 접근 계층"""

    def __init__(self, db: Session):
        super().__init__(Profile, ProfileSchema, db)

    def get(self, telegram_id: int) -> Optional[ProfileSchema]:
        model_instance = (
            self.db.query(self.model_class)
            .filter(self.model_class.telegram_id == telegram_id)
            .first()
        )
        return self._to_schema(model_instance)

    def get_or_create(
        self,
        telegram_id: int,
        first_name: Optional[str] = None,
        username: Optional[str] = None,
    ) -> ProfileSchema:
        """프로필이 없으면 잔액 0 으로 생성 (동시 요청에도 한 행만 생김)"""
        self.insert_ignore(
            ["telegram_id"],
            telegram_id=telegram_id,
            first_name=first_name,
            username=username,
            balance=0,
        )
        profile = self.get(telegram_id)
        if profile is None:
            raise RuntimeError(f"Profile {telegram_id} missing after insert")
        return profile

    def get_many(self, telegram_ids: Iterable[int]) -> Dict[int, ProfileSchema]:
        ids = list(set(telegram_ids))
        if not ids:
            return {}
        rows = (
            self.db.query(self.model_class)
            .filter(self.model_class.telegram_id.in_(ids))
            .all()
        )
        return {row.telegram_id: self._to_schema(row) for row in rows}

    def set_role(self, telegram_id: int, role: str) -> bool:
        updated_count = (
            self.db.query(self.model_class)
            .filter(self.model_class.telegram_id == telegram_id)
            .update({self.model_class.role: role})
        )
        return updated_count > 0
