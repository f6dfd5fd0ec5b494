"""
Comparable Sales Analyzer

Comparative market analysis (CMA) for a stored listing:
- Find similar listings in the same city/state (beds, baths, type, price +/-20%)
- Estimate value from the mean price per square foot of comps with known size
- Classify the asking price as undervalued / fairly priced / overvalued
"""

from statistics import mean
from typing import Any, Dict, List, Optional

import structlog

from ...data_sources.models import PropertyDetails, PropertySearchParams
from ...database.models import Listing
from ...database.repository import ListingRepository
from ...exceptions import PropertyNotFound
from ...services.aggregation import RealEstateDataService

logger = structlog.get_logger(__name__)

PRICE_WINDOW = 0.2
VALUATION_THRESHOLD_PCT = 5.0

UNDERVALUED = "The property appears to be undervalued compared to similar properties in the area."
OVERVALUED = "The property appears to be overvalued compared to similar properties in the area."
FAIRLY_PRICED = "The property appears to be fairly priced compared to similar properties in the area."
INSUFFICIENT_DATA = "Insufficient data: no comparable properties were found in the area."
MISSING_SQUARE_FOOTAGE = "Insufficient data: square footage is missing for the subject or every comparable property."


def classify_price_difference(difference_pct: float) -> str:
    """Both boundaries are inclusive: -5% is undervalued, +5% is overvalued."""
    if difference_pct <= -VALUATION_THRESHOLD_PCT:
        return UNDERVALUED
    if difference_pct >= VALUATION_THRESHOLD_PCT:
        return OVERVALUED
    return FAIRLY_PRICED


def price_per_sqft(price: float, square_feet: Optional[int]) -> Optional[int]:
    return round(price / square_feet) if square_feet else None


class ComparableSalesAnalyzer:
    """
    CMA over listings resolved through the aggregation layer

    Usage:
        analyzer = ComparableSalesAnalyzer(repository, data_service)
        cma = await analyzer.analyze_comps("123e4567-...", max_comps=5)
        cma['analysis']['conclusion']
    """

    def __init__(self, repository: ListingRepository, data_service: RealEstateDataService):
        self.repository = repository
        self.data_service = data_service

    async def find_comparables(self, subject: Listing, max_comps: int = 5) -> List[PropertyDetails]:
        """Similar listings, subject excluded, at most max_comps"""
        candidates = await self.data_service.fetch_property_listings(PropertySearchParams(
            location=f"{subject.city}, {subject.state}",
            min_price=subject.price * (1 - PRICE_WINDOW),
            max_price=subject.price * (1 + PRICE_WINDOW),
            bedrooms=subject.bedrooms,
            bathrooms=subject.bathrooms,
            property_type=subject.property_type,
            limit=max_comps + 1,  # room for the subject itself
        ))
        return [comp for comp in candidates if comp.id != subject.id][:max_comps]

    async def analyze_comps(self, property_id: str, radius: float = 1, max_comps: int = 5) -> Dict[str, Any]:
        """
        Full CMA report

        Args:
            property_id: Subject listing id
            radius: Search radius in miles (informational; matching is by city/state)
            max_comps: Maximum comps to include

        Returns:
            Dict with subject_property, comparable_properties and analysis

        Raises:
            PropertyNotFound: subject listing is not stored
        """
        subject = await self.repository.get_listing(property_id)
        if subject is None:
            raise PropertyNotFound(property_id)

        logger.info("cma_started", property_id=property_id, max_comps=max_comps, radius=radius)

        comps = await self.find_comparables(subject, max_comps)
        comparable_properties = [
            {
                'id': comp.id,
                'address': comp.address,
                'price': comp.price,
                'price_per_sqft': price_per_sqft(comp.price, comp.square_feet),
                'bedrooms': comp.bedrooms,
                'bathrooms': comp.bathrooms,
                'square_feet': comp.square_feet,
                'year_built': comp.year_built,
                'days_on_market': comp.days_on_market,
                'distance': f"< {radius:g} mile",
            }
            for comp in comps
        ]

        subject_property = {
            'id': subject.id,
            'address': subject.address,
            'price': subject.price,
            'price_per_sqft': price_per_sqft(subject.price, subject.square_feet),
            'bedrooms': subject.bedrooms,
            'bathrooms': subject.bathrooms,
            'square_feet': subject.square_feet,
            'year_built': subject.year_built,
        }

        usable = [comp for comp in comps if comp.square_feet]
        if not usable or not subject.square_feet:
            conclusion = INSUFFICIENT_DATA if not comps else MISSING_SQUARE_FOOTAGE
            logger.info("cma_insufficient_data", property_id=property_id, comps_found=len(comps),
                        usable_comps=len(usable))
            return {
                'subject_property': subject_property,
                'comparable_properties': comparable_properties,
                'analysis': {
                    'comps_found': len(comparable_properties),
                    'avg_price': None,
                    'avg_price_per_sqft': None,
                    'avg_days_on_market': None,
                    'estimated_value_by_sqft': None,
                    'price_difference': None,
                    'price_difference_percent': None,
                    'conclusion': conclusion,
                },
            }

        avg_price = mean(comp.price for comp in usable)
        avg_price_per_sqft = mean(comp.price / comp.square_feet for comp in usable)
        avg_days_on_market = mean(comp.days_on_market for comp in usable)

        estimated_value = round(avg_price_per_sqft * subject.square_feet)
        price_difference = subject.price - estimated_value
        difference_pct = price_difference / estimated_value * 100

        logger.info(
            "cma_completed",
            property_id=property_id,
            comps_found=len(comparable_properties),
            usable_comps=len(usable),
            estimated_value=estimated_value,
            difference_pct=round(difference_pct, 2)
        )

        return {
            'subject_property': subject_property,
            'comparable_properties': comparable_properties,
            'analysis': {
                'comps_found': len(comparable_properties),
                'avg_price': avg_price,
                'avg_price_per_sqft': round(avg_price_per_sqft, 2),
                'avg_days_on_market': avg_days_on_market,
                'estimated_value_by_sqft': estimated_value,
                'price_difference': price_difference,
                'price_difference_percent': round(difference_pct, 2),
                'conclusion': classify_price_difference(difference_pct),
            },
        }
