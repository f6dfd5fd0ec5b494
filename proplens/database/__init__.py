# Database package for PropLens

from .connection import DatabaseManager
from .models import (
    Base,
    # Listing layer
    Listing,
    MarketTrend,
    # User layer
    UserProfile,
    SavedListing,
    # AI layer
    AgentLog,
)
from .repository import ListingRepository

__all__ = [
    'DatabaseManager',
    'ListingRepository',
    'Base',
    # Listings
    'Listing',
    'MarketTrend',
    # Users
    'UserProfile',
    'SavedListing',
    # AI
    'AgentLog',
]
