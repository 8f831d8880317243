from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from loyaltyapi.models.transfer import TransferToken
from loyaltyapi.repositories.base import BaseRepository
from loyaltyapi.schemas.transfer import TransferTokenSchema


class TransferTokenRepository(BaseRepository[TransferToken, TransferTokenSchema]):
    """Persist short-lived transfer tokens so they survive restarts and span instances."""

    def __init__(self, db: Session):
        super().__init__(TransferToken, TransferTokenSchema, db)

    def save(
        self, token: str, telegram_id: int, amount: int, type: str, expires_at: datetime
    ) -> TransferTokenSchema:
        return self.create(
            token=token,
            telegram_id=telegram_id,
            amount=amount,
            type=type,
            expires_at=expires_at,
        )

    def get(self, token: str) -> Optional[TransferTokenSchema]:
        # bulk DELETE 는 identity map 을 갱신하지 않으므로 항상 DB 를 조회한다
        model_instance = (
            self.db.query(self.model_class)
            .filter(self.model_class.token == token)
            .first()
        )
        return self._to_schema(model_instance)

    def consume(self, token: str) -> bool:
        """Delete the token. Exactly one concurrent caller gets True."""
        deleted = (
            self.db.query(self.model_class)
            .filter(self.model_class.token == token)
            .delete(synchronize_session=False)
        )
        return deleted > 0

    def purge_expired(self, now: datetime) -> int:
        """Lazy sweep of tokens past their expiry."""
        return (
            self.db.query(self.model_class)
            .filter(self.model_class.expires_at < now)
            .delete(synchronize_session=False)
        )
