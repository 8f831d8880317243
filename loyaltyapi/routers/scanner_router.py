import logging

from fastapi import APIRouter, Depends, Query

from loyaltyapi.core.auth_middleware import require_staff
from loyaltyapi.core.exceptions import BaseAPIException, InternalServerError
from loyaltyapi.deps import get_scan_service
from loyaltyapi.schemas.profile import ProfileSchema
from loyaltyapi.schemas.scanner import RecentScansResponse, ScanRequest, ScanResponse
from loyaltyapi.services.scan_service import ScanService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scanner", tags=["scanner"])


@router.post("/scan", response_model=ScanResponse)
async def scan_code(
    request: ScanRequest,
    current_profile: ProfileSchema = Depends(require_staff),
    scan_service: ScanService = Depends(get_scan_service),
) -> ScanResponse:
    """
    스태프 스캔 - 티켓 사용 처리 또는 교환된 구매 코드 확인

    HTTP Status:
        200: 참가자 + 상품
        400: 이미 사용된 티켓 / 교환 전 구매 코드 / 형식 오류
        403: 스태프 권한 없음
        404: 없는 코드
    """
    try:
        result = scan_service.scan(request.code)
        logger.info(f"Staff {current_profile.telegram_id} scanned {result.kind} {result.code}")
        return result
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Scan failed for staff {current_profile.telegram_id}: {str(e)}")
        raise InternalServerError("Failed to scan code")


@router.get("/recent", response_model=RecentScansResponse)
async def recent_scans(
    hours: int = Query(24, ge=1, le=168, description="조회 기간(시간)"),
    current_profile: ProfileSchema = Depends(require_staff),
    scan_service: ScanService = Depends(get_scan_service),
) -> RecentScansResponse:
    try:
        return scan_service.recent(hours=hours)
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to load recent scans: {str(e)}")
        raise InternalServerError("Failed to load recent scans")
