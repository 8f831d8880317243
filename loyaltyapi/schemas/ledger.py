from typing import List, Optional

from pydantic import BaseModel, Field

from loyaltyapi.schemas.achievements import UnlockedAchievement


class BalanceResponse(BaseModel):
    """코인 잔액 응답"""

    balance: int = Field(..., description="현재 코인 잔액")

    class Config:
        from_attributes = True


class LedgerEntry(BaseModel):
    """코인 원장 항목"""

    id: int = Field(..., description="원장 항목 ID")
    transaction_type: str = Field(..., description="CREDIT 또는 DEBIT")
    delta: int = Field(..., description="코인 변화량")
    balance_after: int = Field(..., description="트랜잭션 후 잔액")
    reason: str = Field(..., description="트랜잭션 사유")
    ref_id: Optional[str] = Field(None, description="참조 ID")
    created_at: str = Field(..., description="생성 시간")

    class Config:
        from_attributes = True


class LedgerHistoryResponse(BaseModel):
    """코인 원장 조회 응답"""

    balance: int = Field(..., description="현재 잔액")
    entries: List[LedgerEntry] = Field(..., description="원장 항목 목록")
    total_count: int = Field(..., description="전체 항목 수")
    has_next: bool = Field(..., description="다음 페이지 존재 여부")


class LedgerIntegrityResponse(BaseModel):
    """잔액 정합성 검증 응답"""

    status: str = Field(..., description="검증 상태 (OK, MISMATCH)")
    telegram_id: int
    recorded_balance: int = Field(..., description="프로필 잔액")
    calculated_balance: int = Field(..., description="원장 합계")
    entry_count: int = Field(..., description="원장 항목 수")


class RewardApplication(BaseModel):
    """보상 적용(apply_*) 결과"""

    new_balance: int = Field(..., description="변경 후 잔액")
    coins_earned: int = Field(0, description="이번 연산으로 적립/차감된 코인 (보너스 제외)")
    bonus_coins: int = Field(0, description="같은 연산에 합산된 마일스톤 보너스")
    newly_unlocked: List[UnlockedAchievement] = Field(default_factory=list)
