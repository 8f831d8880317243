from typing import List

from pydantic import BaseModel, Field

from loyaltyapi.schemas.achievements import UnlockedAchievement


class BingoSlot(BaseModel):
    slug: str = Field(..., description="슬롯 종류")
    reward_type: str = Field(..., description="보상 타입 키")
    label: str = Field(..., description="표시 이름")
    coins: int = Field(..., description="보상 코인")


class BingoConfigResponse(BaseModel):
    personal: List[BingoSlot]
    team: List[BingoSlot]


class BingoClaimRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=2048, description="경품 코드")


class BingoClaimResponse(BaseModel):
    """빙고 보상 수령 결과"""

    success: bool = True
    message: str = Field(..., description="응답 메시지")
    new_balance: int = Field(..., description="변경 후 잔액")
    coins_earned: int = Field(..., description="적립 코인")
    newly_unlocked_achievements: List[UnlockedAchievement] = Field(default_factory=list)
