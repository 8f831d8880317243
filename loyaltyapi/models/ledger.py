"""
코인 원장 데이터 모델

잔액 변동은 모두 이 테이블에 기록되어 감사 추적을 제공한다.
"""

from sqlalchemy import BigInteger, Column, ForeignKey, Text
from sqlalchemy.schema import UniqueConstraint

from loyaltyapi.models.base import BigIntPK, BaseModel


class CoinLedger(BaseModel):
    """
    코인 원장 테이블

    - 불변성: 한번 생성된 레코드는 수정되지 않음
    - 멱등성: ref_id 유니크 제약으로 같은 연산이 두 번 기록되지 않음
    - 정합성: balance_after 로 거래 직후 잔액을 남김
    """

    __tablename__ = "coin_ledger"
    __table_args__ = (UniqueConstraint("ref_id", name="uq_coin_ledger_ref_id"),)

    id = Column(BigIntPK, primary_key=True, autoincrement=True)

    telegram_id = Column(
        BigInteger, ForeignKey("profiles.telegram_id"), nullable=False, index=True
    )

    # 코인 변동량 - 양수면 적립, 음수면 차감
    delta = Column(BigInteger, nullable=False)

    # 거래 사유 (예: "visit_reward", "purchase:extra_card")
    reason = Column(Text, nullable=False)

    # 참조 ID - 형식 예시: "code:482913:7001", "achievement:in_rhythm:7001"
    ref_id = Column(Text, nullable=False)

    balance_after = Column(BigInteger, nullable=False)
