"""
Listing Repository

Parameterized read queries (filter / order / limit) against the listing
store, plus the few single-row writes the core performs: saved-listing
toggles and agent audit log inserts.
"""

from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import and_, delete, or_, select

from .connection import DatabaseManager
from .models import AgentLog, Listing, MarketTrend, SavedListing

logger = structlog.get_logger(__name__)


def parse_location(location: str) -> Dict[str, Optional[str]]:
    """
    Split a free-form location into city / state parts.

    "Austin, TX" -> {'city': 'Austin', 'state': 'TX'}; a single term
    ("78701", "Austin", "TX") is returned as {'term': ...}.
    """
    parts = [p.strip() for p in location.split(',') if p.strip()]
    if len(parts) >= 2:
        return {'city': parts[0], 'state': parts[1], 'term': None}
    return {'city': None, 'state': None, 'term': parts[0] if parts else None}


class ListingRepository:
    """
    Query helper over the relational store.

    Usage:
        repo = ListingRepository(db_manager)
        rows = await repo.search_listings(location="Austin, TX", max_price=500000, limit=5)
    """

    def __init__(self, db: DatabaseManager):
        self.db = db

    async def get_listing(self, listing_id: str) -> Optional[Listing]:
        async with self.db.get_session() as session:
            return await session.get(Listing, listing_id)

    async def search_listings(
        self,
        location: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        bedrooms: Optional[int] = None,
        bathrooms: Optional[float] = None,
        property_type: Optional[str] = None,
        limit: int = 10
    ) -> List[Listing]:
        """
        Filter listings.

        Location matches city/state/zip case-insensitively; prices are
        inclusive bounds; bedrooms/bathrooms are minimums.
        """
        query = select(Listing)
        conditions = []

        if location:
            loc = parse_location(location)
            if loc['term']:
                pattern = f"%{loc['term']}%"
                conditions.append(or_(
                    Listing.city.ilike(pattern),
                    Listing.state.ilike(pattern),
                    Listing.zip_code.ilike(pattern),
                ))
            else:
                conditions.append(Listing.city.ilike(f"%{loc['city']}%"))
                conditions.append(or_(
                    Listing.state.ilike(loc['state']),
                    Listing.zip_code.ilike(f"%{loc['state']}%"),
                ))
        if min_price is not None:
            conditions.append(Listing.price >= min_price)
        if max_price is not None:
            conditions.append(Listing.price <= max_price)
        if bedrooms is not None:
            conditions.append(Listing.bedrooms >= bedrooms)
        if bathrooms is not None:
            conditions.append(Listing.bathrooms >= bathrooms)
        if property_type:
            conditions.append(Listing.property_type == property_type)

        if conditions:
            query = query.where(and_(*conditions))
        query = query.order_by(Listing.created_at.desc(), Listing.id).limit(limit)

        async with self.db.get_session() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def top_deals(self, min_deal_score: Optional[float] = None, limit: int = 10) -> List[Listing]:
        query = select(Listing).order_by(Listing.deal_score.desc())
        if min_deal_score is not None:
            query = query.where(Listing.deal_score >= min_deal_score)
        query = query.limit(limit)

        async with self.db.get_session() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def list_market_trends(
        self,
        region: Optional[str] = None,
        region_type: Optional[str] = None,
        limit: int = 12
    ) -> List[MarketTrend]:
        query = select(MarketTrend)
        if region:
            query = query.where(MarketTrend.region.ilike(f"%{region}%"))
        if region_type:
            query = query.where(MarketTrend.region_type == region_type)
        query = query.order_by(MarketTrend.created_at.desc()).limit(limit)

        async with self.db.get_session() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def saved_listings(self, user_id: str, limit: int = 10) -> List[SavedListing]:
        query = (
            select(SavedListing)
            .where(SavedListing.user_id == user_id)
            .order_by(SavedListing.created_at.desc())
            .limit(limit)
        )
        async with self.db.get_session() as session:
            result = await session.execute(query)
            return list(result.unique().scalars().all())

    async def save_listing(self, user_id: str, listing_id: str, notes: Optional[str] = None) -> SavedListing:
        async with self.db.get_session() as session:
            saved = SavedListing(user_id=user_id, listing_id=listing_id, notes=notes)
            session.add(saved)
            await session.commit()
            logger.info("listing_saved", user_id=user_id, listing_id=listing_id)
            return saved

    async def unsave_listing(self, user_id: str, listing_id: str) -> bool:
        async with self.db.get_session() as session:
            result = await session.execute(
                delete(SavedListing).where(
                    SavedListing.user_id == user_id,
                    SavedListing.listing_id == listing_id,
                )
            )
            await session.commit()
            removed = (result.rowcount or 0) > 0
            logger.info("listing_unsaved", user_id=user_id, listing_id=listing_id, removed=removed)
            return removed

    async def toggle_saved_listing(self, user_id: str, listing_id: str) -> bool:
        """Save the listing if not saved, otherwise remove it. Returns the new saved state."""
        async with self.db.get_session() as session:
            result = await session.execute(
                select(SavedListing.id).where(
                    SavedListing.user_id == user_id,
                    SavedListing.listing_id == listing_id,
                )
            )
            existing = result.scalar_one_or_none()

        if existing:
            await self.unsave_listing(user_id, listing_id)
            return False
        await self.save_listing(user_id, listing_id)
        return True

    async def add_all(self, rows: List[Any]) -> int:
        """Bulk insert ORM rows (sample data and fixtures)"""
        async with self.db.get_session() as session:
            session.add_all(rows)
            await session.commit()
        return len(rows)

    async def insert_agent_log(self, entry: Dict[str, Any]) -> None:
        async with self.db.get_session() as session:
            session.add(AgentLog(**entry))
            await session.commit()

    async def list_agent_logs(self, agent_name: Optional[str] = None, limit: int = 50) -> List[AgentLog]:
        query = select(AgentLog).order_by(AgentLog.created_at.desc()).limit(limit)
        if agent_name:
            query = query.where(AgentLog.agent_name == agent_name)
        async with self.db.get_session() as session:
            result = await session.execute(query)
            return list(result.scalars().all())
