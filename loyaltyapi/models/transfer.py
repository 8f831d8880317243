from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from loyaltyapi.models.base import BaseModel


class TransferToken(BaseModel):
    """
    QR 스캔 송금용 단기 토큰

    프로세스 메모리 대신 DB 에 저장해 재시작과 다중 인스턴스에서도 유지된다.
    만료된 토큰은 발급/조회 시점에 지연 삭제된다.
    """

    __tablename__ = "transfer_tokens"
    __table_args__ = (Index("idx_transfer_tokens_expires_at", "expires_at"),)

    token: Mapped[str] = mapped_column(String(128), primary_key=True)
    telegram_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False)  # add | subtract
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
