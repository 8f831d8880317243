from fastapi import Depends
from sqlalchemy.orm import Session

from loyaltyapi.config import settings
from loyaltyapi.database.session import get_db

# Services
from loyaltyapi.services.achievement_service import AchievementService
from loyaltyapi.services.catalog_service import CatalogService
from loyaltyapi.services.event_service import EventService
from loyaltyapi.services.ledger_service import LedgerService
from loyaltyapi.services.redemption_service import RedemptionService
from loyaltyapi.services.scan_service import ScanService
from loyaltyapi.services.transfer_service import TransferService


def get_ledger_service(db: Session = Depends(get_db)) -> LedgerService:
    return LedgerService(db=db, settings=settings)


def get_achievement_service(db: Session = Depends(get_db)) -> AchievementService:
    return AchievementService(db=db, settings=settings)


def get_redemption_service(db: Session = Depends(get_db)) -> RedemptionService:
    return RedemptionService(db=db, settings=settings)


def get_scan_service(db: Session = Depends(get_db)) -> ScanService:
    return ScanService(db=db, settings=settings)


def get_event_service(db: Session = Depends(get_db)) -> EventService:
    return EventService(db=db, settings=settings)


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    return CatalogService(db=db, settings=settings)


def get_transfer_service(db: Session = Depends(get_db)) -> TransferService:
    return TransferService(db=db, settings=settings)
