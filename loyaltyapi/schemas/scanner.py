from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from loyaltyapi.schemas.catalog import CatalogItemResponse
from loyaltyapi.schemas.profile import ParticipantInfo


class ScanRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=2048, description="스캔한 코드 또는 URL")


class ScanResponse(BaseModel):
    """스캔 결과 - 참가자 + 상품"""

    success: bool = True
    kind: Literal["ticket", "purchase"] = Field(..., description="스캔된 코드 종류")
    code: str = Field(..., description="정규화된 코드")
    participant: ParticipantInfo
    item: CatalogItemResponse


class RecentScan(BaseModel):
    id: int
    code: str
    used_at: datetime
    participant: Optional[ParticipantInfo] = None
    item: Optional[CatalogItemResponse] = None


class RecentScansResponse(BaseModel):
    items: List[RecentScan]
