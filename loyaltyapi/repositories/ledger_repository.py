"""
코인 원장 리포지토리

잔액 변경과 원장 기록을 담당한다:
1. 조건부 UPDATE 로 잔액 변경 (잔액이 부족하면 0행 갱신 -> 실패)
2. 변경 직후 잔액을 balance_after 로 원장에 기록
3. ref_id 유니크 제약으로 같은 연산의 중복 기록 방지
4. 원장 합계와 프로필 잔액의 정합성 검증
"""

from typing import Optional

from sqlalchemy import desc, func, update
from sqlalchemy.orm import Session

from loyaltyapi.models.ledger import CoinLedger
from loyaltyapi.models.profile import Profile
from loyaltyapi.repositories.base import BaseRepository
from loyaltyapi.schemas.ledger import (
    LedgerEntry,
    LedgerHistoryResponse,
    LedgerIntegrityResponse,
)


class LedgerRepository(BaseRepository[CoinLedger, LedgerEntry]):
    """
    코인 원장 리포지토리

    잔액은 profiles.balance 에 보관하고, 모든 변동은 coin_ledger 에 한 줄씩 남긴다.
    커밋은 호출자의 unit_of_work 가 담당한다.
    """

    def __init__(self, db: Session):
        super().__init__(CoinLedger, LedgerEntry, db)

    def _to_ledger_entry(self, model_instance: CoinLedger) -> LedgerEntry:
        delta = getattr(model_instance, "delta", 0)
        return LedgerEntry(
            id=model_instance.id,
            transaction_type="CREDIT" if delta > 0 else "DEBIT",
            delta=delta,
            balance_after=model_instance.balance_after,
            reason=model_instance.reason,
            ref_id=model_instance.ref_id,
            created_at=(
                model_instance.created_at.strftime("%Y-%m-%d %H:%M:%S")
                if model_instance.created_at
                else ""
            ),
        )

    def get_balance(self, telegram_id: int) -> Optional[int]:
        """프로필 잔액 조회 (프로필이 없으면 None)"""
        return (
            self.db.query(Profile.balance)
            .filter(Profile.telegram_id == telegram_id)
            .scalar()
        )

    def change_balance(
        self,
        telegram_id: int,
        delta: int,
        reason: str,
        ref_id: str,
        required_balance: int = 0,
    ) -> Optional[int]:
        """
        잔액을 delta 만큼 바꾸고 원장에 기록한다.

        Args:
            telegram_id: 대상 사용자
            delta: 변동량 (음수면 차감)
            reason: 거래 사유
            ref_id: 연산별 고유 참조 ID
            required_balance: 갱신 조건 - 현재 잔액이 이 값 이상일 때만 반영

        Returns:
            Optional[int]: 변경 후 잔액. 조건 불충족 또는 프로필 없음이면 None.

        Note:
            UPDATE ... WHERE balance >= required RETURNING balance 한 문장으로
            확인과 변경을 동시에 수행하므로 동시 차감에도 음수가 되지 않는다.
        """
        stmt = (
            update(Profile)
            .where(Profile.telegram_id == telegram_id)
            .where(Profile.balance >= required_balance)
            .values(balance=Profile.balance + delta)
            .returning(Profile.balance)
        )
        new_balance = self.db.execute(stmt).scalar_one_or_none()
        if new_balance is None:
            return None

        self.db.add(
            self.model_class(
                telegram_id=telegram_id,
                delta=delta,
                reason=reason,
                ref_id=ref_id,
                balance_after=new_balance,
            )
        )
        self.db.flush()
        return new_balance

    def ref_exists(self, ref_id: str) -> bool:
        return (
            self.db.query(self.model_class.id)
            .filter(self.model_class.ref_id == ref_id)
            .first()
            is not None
        )

    def get_user_ledger(
        self, telegram_id: int, limit: int = 50, offset: int = 0
    ) -> LedgerHistoryResponse:
        """사용자 코인 원장 조회 (페이징, 최신순)"""
        total_count = (
            self.db.query(self.model_class)
            .filter(self.model_class.telegram_id == telegram_id)
            .count()
        )

        model_instances = (
            self.db.query(self.model_class)
            .filter(self.model_class.telegram_id == telegram_id)
            .order_by(desc(self.model_class.id))
            .limit(limit)
            .offset(offset)
            .all()
        )

        return LedgerHistoryResponse(
            balance=self.get_balance(telegram_id) or 0,
            entries=[self._to_ledger_entry(instance) for instance in model_instances],
            total_count=total_count,
            has_next=offset + limit < total_count,
        )

    def verify_integrity_for_user(self, telegram_id: int) -> LedgerIntegrityResponse:
        """
        사용자 잔액 정합성 검증

        원장 delta 합계와 profiles.balance 가 다르면 MISMATCH.
        잔액이 원장을 거치지 않고 변경된 경우를 감지한다.
        """
        calculated, entry_count = (
            self.db.query(
                func.coalesce(func.sum(self.model_class.delta), 0),
                func.count(self.model_class.id),
            )
            .filter(self.model_class.telegram_id == telegram_id)
            .one()
        )
        recorded = self.get_balance(telegram_id) or 0

        return LedgerIntegrityResponse(
            status="OK" if int(calculated) == int(recorded) else "MISMATCH",
            telegram_id=telegram_id,
            recorded_balance=int(recorded),
            calculated_balance=int(calculated),
            entry_count=int(entry_count),
        )
