from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from loyaltyapi.schemas.achievements import UnlockedAchievement


class CatalogItemSchema(BaseModel):
    """카탈로그 상품 (DB 값)"""

    id: str
    name: str
    description: Optional[str] = None
    price: int = 0
    photo: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CatalogItemResponse(BaseModel):
    """카탈로그 상품 (확정 가격 적용)"""

    id: str = Field(..., description="상품 ID")
    name: str = Field(..., description="상품명")
    description: Optional[str] = Field(None, description="설명")
    price: int = Field(..., description="코인 가격")
    photo: Optional[str] = Field(None, description="사진 URL")


class CatalogListResponse(BaseModel):
    items: List[CatalogItemResponse]


class CatalogItemCreateRequest(BaseModel):
    """카탈로그 상품 생성 요청"""

    id: Optional[str] = Field(None, max_length=64, description="상품 ID (생략 시 자동 생성)")
    name: str = Field(..., min_length=1, max_length=255, description="상품명")
    description: Optional[str] = Field(None, description="설명")
    price: int = Field(0, ge=0, description="코인 가격")
    photo: Optional[str] = Field(None, description="사진 URL")


class TicketSchema(BaseModel):
    """발급 티켓"""

    id: int
    code: str
    telegram_id: int
    catalog_item_id: str
    source_code: Optional[str] = None
    used_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TicketInfo(BaseModel):
    id: int = Field(..., description="티켓 ID")
    code: str = Field(..., description="티켓 코드")
    created_at: Optional[datetime] = Field(None, description="발급 시간")


class PurchaseRequest(BaseModel):
    catalog_item_id: str = Field(..., min_length=1, max_length=64, description="상품 ID")


class PurchaseCodeRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=2048, description="구매 코드")


class PurchaseResponse(BaseModel):
    """구매 결과"""

    success: bool = True
    message: str = Field(..., description="응답 메시지")
    ticket: TicketInfo
    item: CatalogItemResponse
    new_balance: int = Field(..., description="변경 후 잔액")
    bonus_coins: int = Field(0, description="구매 마일스톤 보너스")
    newly_unlocked_achievements: List[UnlockedAchievement] = Field(default_factory=list)


class PurchaseCodeGenerateRequest(BaseModel):
    catalog_item_id: str = Field(..., min_length=1, max_length=64, description="상품 ID")


class CatalogItemCreateResponse(BaseModel):
    id: str
    name: str
    price: int
    created_at: Optional[datetime] = None
