"""
관리자(root) API 라우터

- POST|GET /admin/events: 행사 생성(등록 코드 동시 발급) / 코드 포함 목록
- POST /admin/events/{event_id}/close-code: 등록 코드 닫기
- POST|GET /admin/catalog: 상품 생성 / 최근 생성순 목록
"""

import logging

from fastapi import APIRouter, Depends, Path, status

from loyaltyapi.core.auth_middleware import require_root
from loyaltyapi.core.exceptions import BaseAPIException, InternalServerError
from loyaltyapi.deps import get_catalog_service, get_event_service
from loyaltyapi.schemas.catalog import (
    CatalogItemCreateRequest,
    CatalogItemCreateResponse,
    CatalogListResponse,
)
from loyaltyapi.schemas.events import (
    CloseCodeResponse,
    EventCreateRequest,
    EventCreateResponse,
    EventListResponse,
)
from loyaltyapi.schemas.profile import ProfileSchema
from loyaltyapi.services.catalog_service import CatalogService
from loyaltyapi.services.event_service import EventService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post(
    "/events", response_model=EventCreateResponse, status_code=status.HTTP_201_CREATED
)
async def create_event(
    request: EventCreateRequest,
    current_profile: ProfileSchema = Depends(require_root),
    event_service: EventService = Depends(get_event_service),
) -> EventCreateResponse:
    try:
        return event_service.create_event(request, created_by=current_profile.telegram_id)
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to create event: {str(e)}")
        raise InternalServerError("Failed to create event")


@router.get("/events", response_model=EventListResponse)
async def list_events_with_codes(
    current_profile: ProfileSchema = Depends(require_root),
    event_service: EventService = Depends(get_event_service),
) -> EventListResponse:
    try:
        return event_service.list_events(include_codes=True)
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to list events: {str(e)}")
        raise InternalServerError("Failed to list events")


@router.post("/events/{event_id}/close-code", response_model=CloseCodeResponse)
async def close_registration_code(
    event_id: str = Path(..., description="행사 ID"),
    current_profile: ProfileSchema = Depends(require_root),
    event_service: EventService = Depends(get_event_service),
) -> CloseCodeResponse:
    """등록 코드 닫기 - 이후 입력은 이미 사용된 코드로 처리"""
    try:
        return event_service.close_registration_code(event_id)
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to close registration code for event {event_id}: {str(e)}")
        raise InternalServerError("Failed to close registration code")


@router.post(
    "/catalog", response_model=CatalogItemCreateResponse, status_code=status.HTTP_201_CREATED
)
async def create_catalog_item(
    request: CatalogItemCreateRequest,
    current_profile: ProfileSchema = Depends(require_root),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> CatalogItemCreateResponse:
    try:
        return catalog_service.create_item(request)
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to create catalog item: {str(e)}")
        raise InternalServerError("Failed to create catalog item")


@router.get("/catalog", response_model=CatalogListResponse)
async def list_catalog_items(
    current_profile: ProfileSchema = Depends(require_root),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> CatalogListResponse:
    try:
        return catalog_service.list_admin()
    except BaseAPIException:
        raise
    except Exception as e:
        logger.error(f"Failed to list catalog items: {str(e)}")
        raise InternalServerError("Failed to list catalog items")
