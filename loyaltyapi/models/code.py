"""
단축 코드 데이터 모델

등록/구매/경품 코드를 하나의 테이블에 저장한다. value 는 네임스페이스와 무관하게
테이블 전체에서 유일하다. 코드는 삭제되지 않고 used_at 으로만 소멸 처리된다.
"""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, DateTime, Enum, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from loyaltyapi.models.base import BigIntPK, BaseModel


class CodeNamespace(str, enum.Enum):
    REGISTRATION = "registration"
    PURCHASE = "purchase"
    PRIZE = "prize"


class Code(BaseModel):
    __tablename__ = "codes"
    __table_args__ = (
        Index("idx_codes_namespace", "namespace"),
        Index("idx_codes_event_id", "event_id"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    value: Mapped[str] = mapped_column(String(16), unique=True, nullable=False)
    namespace: Mapped[CodeNamespace] = mapped_column(
        Enum(CodeNamespace, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )

    # 등록 코드는 event_id, 구매 코드는 catalog_item_id 가 대상이다.
    # 경품 코드는 coins_amount 를 쓰고 event_id 는 발급 행사 기록용이다
    event_id: Mapped[Optional[str]] = mapped_column(
        String(64), ForeignKey("events.id"), nullable=True
    )
    catalog_item_id: Mapped[Optional[str]] = mapped_column(
        String(64), ForeignKey("catalog.id"), nullable=True
    )
    coins_amount: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    used_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    used_by: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    created_by: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
