import logging
import uuid

from sqlalchemy.orm import Session

from loyaltyapi.config import Settings
from loyaltyapi.core.exceptions import NotFoundError, ValidationError
from loyaltyapi.database.session import unit_of_work
from loyaltyapi.models.code import CodeNamespace
from loyaltyapi.repositories.catalog_repository import CatalogRepository
from loyaltyapi.schemas.catalog import (
    CatalogItemCreateRequest,
    CatalogItemCreateResponse,
    CatalogListResponse,
)
from loyaltyapi.schemas.codes import IssuedCodeResponse
from loyaltyapi.services.code_registry import CodeRegistry
from loyaltyapi.services.redemption_service import to_item_response

logger = logging.getLogger(__name__)


class CatalogService:
    """카탈로그 조회/관리 및 구매 코드 발급"""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.catalog_repo = CatalogRepository(db)
        self.registry = CodeRegistry(db, settings)

    def list_items(self) -> CatalogListResponse:
        """사용자용 목록 - 확정 가격 기준 오름차순"""
        items = [to_item_response(item) for item in self.catalog_repo.list_by_price()]
        items.sort(key=lambda item: item.price)
        return CatalogListResponse(items=items)

    def list_admin(self) -> CatalogListResponse:
        """관리자용 목록 - 최근 생성순"""
        return CatalogListResponse(
            items=[to_item_response(item) for item in self.catalog_repo.list_newest()]
        )

    def create_item(self, request: CatalogItemCreateRequest) -> CatalogItemCreateResponse:
        name = request.name.strip()
        if not name:
            raise ValidationError("Item name is required")

        item_id = (request.id or "").strip() or uuid.uuid4().hex
        with unit_of_work(self.db):
            if self.catalog_repo.get(item_id) is not None:
                raise ValidationError(f"Catalog item already exists: {item_id}")
            item = self.catalog_repo.create(
                id=item_id,
                name=name,
                description=(request.description or "").strip() or None,
                price=request.price,
                photo=(request.photo or "").strip() or None,
            )

        logger.info(f"Catalog item {item.id} created")
        return CatalogItemCreateResponse(
            id=item.id, name=item.name, price=item.price, created_at=item.created_at
        )

    def generate_purchase_code(self, catalog_item_id: str, created_by: int) -> IssuedCodeResponse:
        """상품 구매 코드 발급 (코드 1개당 구매 1회)"""
        item = self.catalog_repo.get(catalog_item_id)
        if item is None:
            raise NotFoundError(f"Catalog item not found: {catalog_item_id}")

        with unit_of_work(self.db):
            code = self.registry.issue_purchase_code(item.id, created_by=created_by)

        return IssuedCodeResponse(
            id=code.id,
            code=code.value,
            namespace=CodeNamespace.PURCHASE,
            item=to_item_response(item),
            created_at=code.created_at,
        )
