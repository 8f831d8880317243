from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from loyaltyapi.schemas.achievements import UnlockedAchievement
from loyaltyapi.schemas.profile import ParticipantInfo


class EventSchema(BaseModel):
    """행사"""

    id: str
    title: str
    description: Optional[str] = None
    event_date: datetime
    location: Optional[str] = None
    price: int = 0
    max_participants: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EventInfo(BaseModel):
    id: str = Field(..., description="행사 ID")
    title: str = Field(..., description="행사명")


class EventWithCode(EventSchema):
    """관리 화면용 - 등록 코드 포함"""

    code: Optional[str] = Field(None, description="등록 코드")


class EventListResponse(BaseModel):
    events: List[EventWithCode]


class EventCreateRequest(BaseModel):
    """행사 생성 요청"""

    title: str = Field(..., min_length=1, max_length=255, description="행사명")
    description: Optional[str] = Field(None, description="설명")
    event_date: Optional[datetime] = Field(None, description="행사 일시 (생략 시 현재)")
    location: Optional[str] = Field(None, max_length=255, description="장소")
    price: int = Field(0, ge=0, description="입장료")
    max_participants: Optional[int] = Field(None, gt=0, description="최대 인원")


class EventCreateResponse(BaseModel):
    id: str
    title: str
    event_date: datetime
    created_at: Optional[datetime] = None
    code: str = Field(..., description="발급된 등록 코드")


class RegistrationSchema(BaseModel):
    id: int
    event_id: str
    telegram_id: int
    status: str
    team_id: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RegisterRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=2048, description="행사 등록 코드")


class RegisterResponse(BaseModel):
    """행사 등록 결과"""

    success: bool = True
    message: str = Field(..., description="응답 메시지")
    event: EventInfo
    new_balance: int = Field(..., description="변경 후 잔액")
    coins_earned: int = Field(..., description="적립 코인")
    newly_unlocked_achievements: List[UnlockedAchievement] = Field(default_factory=list)


class RegistrationEntry(ParticipantInfo):
    registered_at: Optional[datetime] = Field(None, description="등록 시간")
    status: str = Field(..., description="등록 상태")
    team_id: Optional[str] = Field(None, description="팀 ID")


class RegistrationListResponse(BaseModel):
    registrations: List[RegistrationEntry]


class AwardCoinsRequest(BaseModel):
    """행사 참가자 수동 코인 지급 요청"""

    event_id: str = Field(..., min_length=1, description="행사 ID")
    telegram_id: int = Field(..., description="대상 텔레그램 ID")
    reward_type: Optional[str] = Field(None, description="빙고 보상 타입 (예: personal_bingo_horizontal)")
    amount: Optional[int] = Field(None, ge=1, description="직접 지정 코인")

    @model_validator(mode="after")
    def _require_reward(self):
        if not self.reward_type and self.amount is None:
            raise ValueError("reward_type or amount is required")
        return self


class AwardCoinsResponse(BaseModel):
    success: bool = True
    new_balance: int
    amount: int


class PrizeCodeRequest(BaseModel):
    coins_amount: Optional[int] = Field(None, ge=1, description="지급 코인 (생략 시 기본 빙고 보상)")


class BingoWinnerSlot(ParticipantInfo):
    pass


class BingoWinnersResponse(BaseModel):
    personal: List[Optional[BingoWinnerSlot]] = Field(..., description="개인 빙고 4칸")
    team: List[Optional[str]] = Field(..., description="팀 빙고 3칸 (팀 이름)")


class BingoWinnersUpdateRequest(BaseModel):
    personal: List[Optional[int]] = Field(default_factory=list, description="개인 슬롯 텔레그램 ID")
    team: List[Optional[str]] = Field(default_factory=list, description="팀 슬롯 팀 이름")


class BingoWinnerSchema(BaseModel):
    event_id: str
    slot_type: Literal["personal", "team"]
    slot_index: int
    telegram_id: Optional[int] = None
    team_name: Optional[str] = None

    class Config:
        from_attributes = True


class CloseCodeResponse(BaseModel):
    success: bool = True
    code: str = Field(..., description="닫힌 등록 코드")
    closed_at: datetime = Field(..., description="닫힌 시각")
