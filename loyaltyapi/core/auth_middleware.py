from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from loyaltyapi.core.exceptions import AuthenticationError, AuthorizationError
from loyaltyapi.core.security import decode_access_token, extract_telegram_id
from loyaltyapi.database.session import get_db, unit_of_work
from loyaltyapi.models.profile import UserRole
from loyaltyapi.repositories.profile_repository import ProfileRepository
from loyaltyapi.schemas.profile import ProfileSchema

# JWT Bearer 토큰 스킴
security = HTTPBearer(auto_error=False)


def get_current_profile(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> ProfileSchema:
    """필수 사용자 인증 - 처음 보는 telegram_id 는 잔액 0 으로 프로필 생성"""
    if not credentials or not credentials.credentials:
        raise AuthenticationError("Authentication required")

    payload = decode_access_token(credentials.credentials)
    telegram_id = extract_telegram_id(payload)
    metadata = payload.get("user_metadata") or {}

    with unit_of_work(db):
        profile = ProfileRepository(db).get_or_create(
            telegram_id,
            first_name=payload.get("first_name", metadata.get("first_name")),
            username=payload.get("username", metadata.get("username")),
        )
    return profile


def require_role(required_role: UserRole):
    """특정 역할 이상의 권한이 필요한 엔드포인트용 의존성 팩토리"""

    def _require_role(
        current_profile: ProfileSchema = Depends(get_current_profile),
    ) -> ProfileSchema:
        if not UserRole.has_permission(current_profile.role, required_role):
            raise AuthorizationError(f"Role '{required_role.value}' or higher required")
        return current_profile

    return _require_role


require_staff = require_role(UserRole.STAFF)
require_root = require_role(UserRole.ROOT)
