from loyaltyapi.models.base import Base
from loyaltyapi.models.profile import Profile, UserRole
from loyaltyapi.models.stats import UserStats
from loyaltyapi.models.event import Event, Registration, BingoWinner
from loyaltyapi.models.catalog import CatalogItem, Ticket
from loyaltyapi.models.code import Code, CodeNamespace
from loyaltyapi.models.achievement import UserAchievement
from loyaltyapi.models.ledger import CoinLedger
from loyaltyapi.models.transfer import TransferToken

__all__ = [
    "Base",
    "Profile",
    "UserRole",
    "UserStats",
    "Event",
    "Registration",
    "BingoWinner",
    "CatalogItem",
    "Ticket",
    "Code",
    "CodeNamespace",
    "UserAchievement",
    "CoinLedger",
    "TransferToken",
]
