from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from loyaltyapi.models.code import CodeNamespace
from loyaltyapi.schemas.achievements import UnlockedAchievement
from loyaltyapi.schemas.catalog import CatalogItemResponse, TicketInfo


class CodeSchema(BaseModel):
    """단축 코드"""

    id: int = Field(..., description="코드 ID")
    value: str = Field(..., description="코드 값")
    namespace: CodeNamespace = Field(..., description="네임스페이스")
    event_id: Optional[str] = Field(None, description="등록 코드의 대상 행사 / 경품 코드의 발급 행사 ID")
    catalog_item_id: Optional[str] = Field(None, description="구매 코드의 상품 ID")
    coins_amount: Optional[int] = Field(None, description="경품 코드 지급 코인")
    used_at: Optional[datetime] = Field(None, description="사용 시각")
    used_by: Optional[int] = Field(None, description="사용자 텔레그램 ID")
    created_by: Optional[int] = Field(None, description="발급자 텔레그램 ID")
    created_at: Optional[datetime] = Field(None, description="생성 시간")

    class Config:
        from_attributes = True


class CodeRequest(BaseModel):
    """코드 입력 요청 (원문 그대로)"""

    code: str = Field(..., min_length=1, max_length=2048, description="입력/스캔한 코드 또는 URL")


class CodeLookupResponse(BaseModel):
    """코드 분류 결과"""

    code: str = Field(..., description="정규화된 코드")
    type: Literal["registration", "purchase", "prize", "ticket"] = Field(
        ..., description="코드 종류"
    )


class IssuedCodeResponse(BaseModel):
    """발급된 코드"""

    id: int = Field(..., description="코드 ID")
    code: str = Field(..., description="코드 값")
    namespace: CodeNamespace = Field(..., description="네임스페이스")
    coins_amount: Optional[int] = Field(None, description="경품 코인")
    event_id: Optional[str] = Field(None, description="경품 코드 발급 행사 ID")
    item: Optional[CatalogItemResponse] = Field(None, description="구매 코드 대상 상품")
    created_at: Optional[datetime] = Field(None, description="생성 시간")


class CodeRedeemResponse(BaseModel):
    """디스패처를 통한 코드 사용 결과"""

    success: bool = Field(True, description="성공 여부")
    type: Literal["registration", "purchase", "prize"] = Field(..., description="코드 종류")
    message: str = Field(..., description="응답 메시지")
    new_balance: int = Field(..., description="변경 후 잔액")
    coins_earned: int = Field(0, description="적립 코인")
    event: Optional[dict] = Field(None, description="등록된 행사")
    item: Optional[CatalogItemResponse] = Field(None, description="구매 상품")
    ticket: Optional[TicketInfo] = Field(None, description="발급 티켓")
    newly_unlocked_achievements: List[UnlockedAchievement] = Field(default_factory=list)
