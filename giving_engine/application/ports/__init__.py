"""Application ports package."""

from .category_repository import CategoryRepositoryPort
from .change_feed import ChangeFeedPort, Subscription
from .clock import ClockPort
from .database import DatabaseEnginePort
from .donation_repository import DonationRepositoryPort

__all__ = [
    "CategoryRepositoryPort",
    "ChangeFeedPort",
    "Subscription",
    "ClockPort",
    "DatabaseEnginePort",
    "DonationRepositoryPort",
]
