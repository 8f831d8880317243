from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class TransferTokenSchema(BaseModel):
    token: str
    telegram_id: int
    amount: int
    type: Literal["add", "subtract"]
    expires_at: datetime

    class Config:
        from_attributes = True


class GenerateTokenRequest(BaseModel):
    """송금 토큰 발급 요청"""

    amount: int = Field(..., gt=0, description="코인 금액")
    type: Literal["add", "subtract"] = Field(..., description="적립(add) 또는 차감(subtract)")


class TransferQrData(BaseModel):
    type: Literal["add", "subtract"]
    amount: int
    token: str
    expires_at: datetime


class GenerateTokenResponse(BaseModel):
    success: bool = True
    token: str = Field(..., description="일회용 토큰")
    expires_at: datetime = Field(..., description="만료 시각")
    qr_data: TransferQrData


class ProcessTokenRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=128, description="스캔한 토큰")


class ProcessTokenResponse(BaseModel):
    """토큰 처리 결과"""

    success: bool = True
    message: str
    target_telegram_id: int
    scanner_telegram_id: int
    amount: int
    type: Literal["add", "subtract"]
    old_balance: int
    new_balance: int
