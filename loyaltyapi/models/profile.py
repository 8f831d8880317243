from enum import Enum
from typing import Optional, Union

from sqlalchemy import BigInteger, CheckConstraint, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from loyaltyapi.models.base import BaseModel


class UserRole(str, Enum):
    """사용자 역할 정의"""

    USER = "user"  # 일반 참가자
    STAFF = "staff"  # 입장 스캐너 담당
    ROOT = "root"  # 마스터 계정 (행사/코드 발급)

    @classmethod
    def get_hierarchy_level(cls, role: Union[str, "UserRole"]) -> int:
        """역할의 계층 레벨을 반환 (숫자가 높을수록 높은 권한)"""
        if isinstance(role, cls):
            role = role.value

        hierarchy = {
            cls.USER.value: 1,
            cls.STAFF.value: 2,
            cls.ROOT.value: 3,
        }
        return hierarchy.get(str(role), 0)

    @classmethod
    def has_permission(
        cls, user_role: Union[str, "UserRole"], required_role: Union[str, "UserRole"]
    ) -> bool:
        """사용자 역할이 요구되는 역할 이상인지 확인"""
        return cls.get_hierarchy_level(user_role) >= cls.get_hierarchy_level(
            required_role
        )


class Profile(BaseModel):
    """
    텔레그램 사용자 프로필 및 코인 잔액

    잔액은 원장 서비스만 변경하며 CHECK 제약으로 음수가 될 수 없다.
    """

    __tablename__ = "profiles"
    __table_args__ = (CheckConstraint("balance >= 0", name="ck_profiles_balance"),)

    telegram_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    first_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    username: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=UserRole.USER.value
    )
