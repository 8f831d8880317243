from pydantic import BaseModel, Field
from typing import Optional


class ProfileSchema(BaseModel):
    """사용자 프로필"""

    telegram_id: int = Field(..., description="텔레그램 사용자 ID")
    first_name: Optional[str] = Field(None, description="이름")
    username: Optional[str] = Field(None, description="텔레그램 username")
    avatar_url: Optional[str] = Field(None, description="아바타 URL")
    balance: int = Field(0, description="코인 잔액")
    role: str = Field("user", description="역할 (user, staff, root)")

    class Config:
        from_attributes = True


class ParticipantInfo(BaseModel):
    """스캐너/관리 화면에 표시되는 참가자 정보"""

    telegram_id: int = Field(..., description="텔레그램 사용자 ID")
    username: Optional[str] = Field(None, description="텔레그램 username")
    first_name: Optional[str] = Field(None, description="이름")
    avatar_url: Optional[str] = Field(None, description="아바타 URL")

    class Config:
        from_attributes = True
