"""
Sample data generator for development databases.

Random listings across ten metros and random monthly market trend rows,
reproducible for a given seed.
"""

import random
from typing import List, Optional

from .models import Listing, MarketTrend
from .repository import ListingRepository

CITIES = [
    ("Austin", "TX"),
    ("Denver", "CO"),
    ("Seattle", "WA"),
    ("Nashville", "TN"),
    ("Charlotte", "NC"),
    ("Phoenix", "AZ"),
    ("Atlanta", "GA"),
    ("Dallas", "TX"),
    ("Portland", "OR"),
    ("Raleigh", "NC"),
]

TREND_REGIONS = [
    ("Austin", "city"),
    ("Denver", "city"),
    ("Seattle", "city"),
    ("Nashville", "city"),
    ("Charlotte", "city"),
    ("78701", "zip"),
    ("80202", "zip"),
    ("98101", "zip"),
    ("Texas", "state"),
    ("Colorado", "state"),
]

PROPERTY_TYPES = ["residential", "multi-family", "commercial", "condo"]
LISTING_STATUSES = ["active", "pending", "sold"]
STREETS = ["Main", "Oak", "Maple", "Pine", "Cedar"]
SUFFIXES = ["St", "Ave", "Blvd", "Dr", "Ln"]


def deal_reasons(deal_score: float) -> List[str]:
    reasons = []
    if deal_score > 5:
        reasons.append("Priced below comparable properties in the area")
    if deal_score > 10:
        reasons.append("Recently renovated with high-end finishes")
    if deal_score > 15:
        reasons.append("Located in a rapidly appreciating neighborhood")
    return reasons


def generate_listings(count: int, rng: random.Random) -> List[Listing]:
    listings = []
    for i in range(count):
        city, state = rng.choice(CITIES)
        deal_score = rng.randrange(20)
        listings.append(Listing(
            address=f"{rng.randint(1, 9999)} {rng.choice(STREETS)} {rng.choice(SUFFIXES)}",
            city=city,
            state=state,
            zip_code=str(rng.randint(10000, 99999)),
            price=rng.randrange(200000, 1500000),
            bedrooms=rng.randint(1, 5),
            bathrooms=rng.randint(1, 4),
            square_feet=rng.randrange(800, 4000),
            year_built=rng.randrange(1950, 2023),
            property_type=rng.choice(PROPERTY_TYPES),
            listing_status=rng.choice(LISTING_STATUSES),
            deal_score=deal_score,
            deal_reasons=deal_reasons(deal_score),
            image_url=f"/placeholder.svg?height=400&width=600&text=Property+{i + 1}",
        ))
    return listings


def generate_market_trends(count: int, rng: random.Random) -> List[MarketTrend]:
    trends = []
    for _ in range(count):
        region, region_type = rng.choice(TREND_REGIONS)
        trends.append(MarketTrend(
            region=region,
            region_type=region_type,
            median_price=rng.randrange(200000, 800000),
            price_change_pct=rng.randrange(20) - 5,
            avg_days_on_market=rng.randint(10, 59),
            inventory_count=rng.randint(50, 499),
            month=rng.randint(1, 12),
            year=rng.randint(2020, 2025),
        ))
    return trends


async def seed_sample_data(
    repository: ListingRepository,
    listings: int = 50,
    trends: int = 30,
    seed: Optional[int] = None
) -> dict:
    rng = random.Random(seed)
    inserted = {
        'listings': await repository.add_all(generate_listings(listings, rng)),
        'market_trends': await repository.add_all(generate_market_trends(trends, rng)),
    }
    return inserted
