from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from loyaltyapi.config import settings
from loyaltyapi.core.exceptions import AuthenticationError


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(
        to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM
    )
    return encoded_jwt


def decode_access_token(token: str) -> Dict[str, Any]:
    """JWT 를 검증하고 payload 를 반환합니다."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise AuthenticationError("Invalid or expired token")


def extract_telegram_id(payload: Dict[str, Any]) -> int:
    """
    payload 에서 telegram_id 추출

    최상위 클레임 또는 user_metadata 아래 어느 쪽이든 허용합니다.
    """
    metadata = payload.get("user_metadata") or {}
    raw = payload.get("telegram_id", metadata.get("telegram_id"))
    if raw is None:
        raise AuthenticationError("Telegram ID not found in token")
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise AuthenticationError("Telegram ID in token is not a number")
