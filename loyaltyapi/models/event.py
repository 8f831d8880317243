import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.schema import UniqueConstraint

from loyaltyapi.models.base import BigIntPK, BaseModel


def _new_id() -> str:
    return uuid.uuid4().hex


class Event(BaseModel):
    __tablename__ = "events"
    __table_args__ = (Index("idx_events_event_date", "event_date"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    event_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_participants: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)


class Registration(BaseModel):
    """행사 참가 등록 - (event_id, telegram_id) 당 최대 1건"""

    __tablename__ = "registrations"
    __table_args__ = (
        UniqueConstraint("event_id", "telegram_id", name="uq_registration_event_user"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    event_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("events.id"), nullable=False, index=True
    )
    telegram_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("profiles.telegram_id"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="confirmed")
    team_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)


class BingoWinner(BaseModel):
    """행사별 빙고 당첨 슬롯 (개인 4칸, 팀 3칸)"""

    __tablename__ = "event_bingo_winners"
    __table_args__ = (
        UniqueConstraint(
            "event_id", "slot_type", "slot_index", name="uq_bingo_winner_slot"
        ),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    event_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("events.id"), nullable=False
    )
    slot_type: Mapped[str] = mapped_column(String(20), nullable=False)  # personal | team
    slot_index: Mapped[int] = mapped_column(Integer, nullable=False)
    telegram_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    team_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
