import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from loyaltyapi.models.base import BigIntPK, BaseModel


class CatalogItem(BaseModel):
    __tablename__ = "catalog"

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=lambda: uuid.uuid4().hex
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    photo: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Ticket(BaseModel):
    """
    구매 1건마다 발급되는 입장/교환 티켓

    코드는 codes 테이블과 같은 문자 공간을 쓰므로 발급 시 양쪽 모두와 중복 검사한다.
    스태프 스캔 시 used_at IS NULL 조건부 업데이트로 한 번만 사용 처리된다.
    """

    __tablename__ = "tickets"
    __table_args__ = (Index("idx_tickets_used_at", "used_at"),)

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(16), unique=True, nullable=False)
    telegram_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("profiles.telegram_id"), nullable=False, index=True
    )
    catalog_item_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("catalog.id"), nullable=False
    )
    source_code: Mapped[Optional[str]] = mapped_column(
        String(16), nullable=True
    )  # 구매 코드로 발급된 경우 해당 코드
    used_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
