# Repository layer - Data access with Pydantic responses

from .base import BaseRepository
from .profile_repository import ProfileRepository
from .ledger_repository import LedgerRepository
from .stats_repository import StatsRepository
from .code_repository import CodeRepository
from .ticket_repository import TicketRepository
from .event_repository import EventRepository, RegistrationRepository, BingoWinnerRepository
from .catalog_repository import CatalogRepository
from .achievement_repository import AchievementRepository
from .transfer_token_repository import TransferTokenRepository

__all__ = [
    "BaseRepository",
    "ProfileRepository",
    "LedgerRepository",
    "StatsRepository",
    "CodeRepository",
    "TicketRepository",
    "EventRepository",
    "RegistrationRepository",
    "BingoWinnerRepository",
    "CatalogRepository",
    "AchievementRepository",
    "TransferTokenRepository",
]
