"""
SQLAlchemy ORM Models for the PropLens database

Tables mirror the dashboard's relational store:
- Listing layer: property listings and market trend snapshots
- User layer: profiles and saved listings
- AI layer: append-only agent audit log

Column types are kept dialect-neutral so the same models run on
PostgreSQL (asyncpg) in production and SQLite in tests.
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import (
    Boolean, Column, Float, Integer, String, Text, DateTime, JSON,
    ForeignKey, CheckConstraint, Index, UniqueConstraint
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _uuid() -> str:
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# LISTING LAYER
# ============================================================================

class Listing(Base):
    """Property listing shown on the dashboard"""
    __tablename__ = 'real_estate_listings'

    id = Column(String(36), primary_key=True, default=_uuid)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Location
    address = Column(Text, nullable=False)
    city = Column(Text, nullable=False, index=True)
    state = Column(String(2), nullable=False, index=True)
    zip_code = Column(String(10), nullable=False, index=True)

    # Facts
    price = Column(Float, nullable=False, index=True)
    bedrooms = Column(Integer, nullable=False)
    bathrooms = Column(Float, nullable=False)
    square_feet = Column(Integer, nullable=False)
    year_built = Column(Integer, nullable=False)
    property_type = Column(Text, nullable=False)
    listing_status = Column(String(16), nullable=False, default='active')

    # Deal scoring
    deal_score = Column(Float, nullable=False, default=0)
    deal_reasons = Column(JSON)

    listing_url = Column(Text)
    image_url = Column(Text)

    __table_args__ = (
        CheckConstraint(
            "listing_status IN ('active', 'pending', 'sold')",
            name='ck_listing_status'
        ),
        Index('idx_listings_city_state', 'city', 'state'),
    )


class MarketTrend(Base):
    """Monthly market snapshot for a region"""
    __tablename__ = 'market_trends'

    id = Column(String(36), primary_key=True, default=_uuid)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    region = Column(Text, nullable=False, index=True)
    region_type = Column(String(16), nullable=False)

    median_price = Column(Float, nullable=False)
    price_change_pct = Column(Float, nullable=False)
    avg_days_on_market = Column(Float, nullable=False)
    inventory_count = Column(Integer, nullable=False)

    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "region_type IN ('city', 'zip', 'state', 'neighborhood')",
            name='ck_market_trend_region_type'
        ),
    )


# ============================================================================
# USER LAYER
# ============================================================================

class UserProfile(Base):
    """Dashboard user profile"""
    __tablename__ = 'user_profiles'

    id = Column(String(36), primary_key=True, default=_uuid)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    email = Column(Text, unique=True, nullable=False)
    full_name = Column(Text)
    investment_preferences = Column(JSON, default=dict)


class SavedListing(Base):
    """A listing bookmarked by a user"""
    __tablename__ = 'user_saved_listings'

    id = Column(String(36), primary_key=True, default=_uuid)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    user_id = Column(String(36), nullable=False, index=True)
    listing_id = Column(String(36), ForeignKey('real_estate_listings.id', ondelete='CASCADE'), nullable=False)
    notes = Column(Text)

    listing = relationship('Listing', lazy='joined')

    __table_args__ = (
        UniqueConstraint('user_id', 'listing_id', name='uq_saved_listing_user_listing'),
    )


# ============================================================================
# AI LAYER
# ============================================================================

class AgentLog(Base):
    """Append-only audit trail of agent invocations"""
    __tablename__ = 'ai_agent_logs'

    id = Column(String(36), primary_key=True, default=_uuid)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    agent_name = Column(Text, nullable=False, index=True)
    action_type = Column(String(32), nullable=False)
    details = Column(JSON, nullable=False)
    success = Column(Boolean, nullable=False)
    error_message = Column(Text)

    __table_args__ = (
        CheckConstraint(
            "action_type IN ('generate', 'generate_structured')",
            name='ck_agent_log_action_type'
        ),
    )
