"""
Real Estate Data Aggregation Service

Resolves each domain query through a fixed-priority chain:

    cache -> external providers (repliers -> redfin -> zillow -> mls)
          -> local database -> synthetic data

External providers are only tried when USE_REAL_APIS is on, the provider
has a credential, and it supports the capability. Every attempt is wrapped
on its own so a failing provider never aborts the chain; an exception or an
empty result simply moves on to the next tier. The resolved value is cached
before it is returned.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

import structlog

from ..config.settings import Settings
from ..data_sources import synthetic
from ..data_sources.base import (
    ANALYSIS, INSIGHTS, NEIGHBORHOOD, OPPORTUNITY_ZONES, SEARCH, TRENDS, VALUATION,
    ExternalDataSource, snake_case_keys,
)
from ..data_sources.models import (
    MarketInsight,
    MarketTrend,
    NeighborhoodInfo,
    OpportunityZone,
    PropertyAnalysis,
    PropertyDetails,
    PropertySearchParams,
    PropertyValuation,
)
from ..database.models import Listing
from ..database.repository import ListingRepository
from ..exceptions import PropertyNotFound
from ..utils.serialization import cache_key, seeded_rng
from .response_cache import ResponseCache

logger = structlog.get_logger(__name__)

DEFAULT_LISTING_DESCRIPTION = (
    "Beautiful property in a desirable neighborhood with modern amenities "
    "and convenient access to shopping and dining."
)
DEFAULT_LISTING_FEATURES = ["Central Air", "Garage", "Fireplace", "Updated Kitchen", "Hardwood Floors"]
PLACEHOLDER_IMAGE = "/placeholder.svg?height=400&width=600"
NEIGHBORHOOD_SECTIONS = ("overview", "amenities", "transportation", "crime_rate", "market_trends")


@dataclass
class Attempt:
    """One tier of a fallback chain"""
    source: str
    fetch: Callable[[], Awaitable[Any]]
    accept_empty: bool = False


def listing_to_details(listing: Listing) -> PropertyDetails:
    """Map a stored listing onto the shared record shape"""
    rng = seeded_rng(listing.id)
    return PropertyDetails(
        id=listing.id,
        address=listing.address,
        city=listing.city,
        state=listing.state,
        zip_code=listing.zip_code,
        price=listing.price,
        bedrooms=listing.bedrooms,
        bathrooms=listing.bathrooms,
        square_feet=listing.square_feet,
        year_built=listing.year_built,
        property_type=listing.property_type,
        listing_status=listing.listing_status,
        description=DEFAULT_LISTING_DESCRIPTION,
        features=list(DEFAULT_LISTING_FEATURES),
        images=[listing.image_url or PLACEHOLDER_IMAGE],
        days_on_market=rng.randint(1, 60),
        listing_date=listing.created_at.isoformat() if listing.created_at else "",
        deal_score=listing.deal_score,
        source="internal",
    )


def trend_to_record(row) -> MarketTrend:
    return MarketTrend(
        region=row.region,
        region_type=row.region_type,
        median_price=row.median_price,
        price_change_pct=row.price_change_pct,
        avg_days_on_market=row.avg_days_on_market,
        inventory_count=row.inventory_count,
        month=row.month,
        year=row.year,
        source="internal",
    )


def merge_neighborhood(raw: Dict[str, Any], source: str) -> NeighborhoodInfo:
    """Overlay a partial camelCase neighborhood payload on the default profile."""
    merged = synthetic.neighborhood_info().model_dump()
    data = snake_case_keys(raw or {})

    for section in NEIGHBORHOOD_SECTIONS:
        for field, value in (data.get(section) or {}).items():
            if value and field in merged[section]:
                merged[section][field] = value

    merged['schools'] = data.get('schools') or []
    merged['source'] = source
    return NeighborhoodInfo.model_validate(merged)


class RealEstateDataService:
    """
    Usage:
        service = RealEstateDataService(settings, repository, cache, sources)
        listings = await service.fetch_property_listings(PropertySearchParams(location="Austin, TX"))
    """

    def __init__(
        self,
        settings: Settings,
        repository: ListingRepository,
        cache: ResponseCache,
        sources: Sequence[ExternalDataSource] = ()
    ):
        self.settings = settings
        self.repository = repository
        self.cache = cache
        self.sources = list(sources)

    def _external(self, capability: str, only: Optional[Sequence[str]] = None) -> List[ExternalDataSource]:
        """Providers eligible for a capability, in priority order"""
        if not self.settings.USE_REAL_APIS:
            return []
        return [
            source for source in self.sources
            if source.enabled and source.supports(capability) and (only is None or source.name in only)
        ]

    async def _resolve(
        self,
        method: str,
        key: str,
        attempts: List[Attempt],
        fallback: Optional[Callable[[], Awaitable[Any]]] = None,
        empty: Any = None
    ) -> Any:
        """
        Run a fallback chain.

        `fallback` produces the last-resort value (cached like any other);
        without one, `empty` is returned uncached when every tier fails.
        """
        for attempt in attempts:
            try:
                result = await attempt.fetch()
            except Exception as e:
                logger.warning("data_source_failed", method=method, source=attempt.source, error=str(e))
                continue

            if result or attempt.accept_empty:
                logger.debug("data_source_resolved", method=method, source=attempt.source)
                self.cache.set(key, result)
                return result

            logger.debug("data_source_empty", method=method, source=attempt.source)

        if fallback is None:
            return empty

        result = await fallback()
        logger.debug("data_source_resolved", method=method, source="synthetic")
        self.cache.set(key, result)
        return result

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    async def fetch_property_listings(self, params: PropertySearchParams) -> List[PropertyDetails]:
        key = cache_key("fetch_property_listings", params)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        attempts = [
            Attempt(source.name, lambda source=source: source.search_properties(params))
            for source in self._external(SEARCH)
        ]

        async def from_database():
            rows = await self.repository.search_listings(
                location=params.location,
                min_price=params.min_price,
                max_price=params.max_price,
                bedrooms=params.bedrooms,
                bathrooms=params.bathrooms,
                property_type=params.property_type,
                limit=params.limit,
            )
            return [listing_to_details(row) for row in rows]

        attempts.append(Attempt("database", from_database, accept_empty=True))
        return await self._resolve("fetch_property_listings", key, attempts, empty=[])

    # ------------------------------------------------------------------
    # Market trends
    # ------------------------------------------------------------------

    async def fetch_market_trends(
        self,
        region: Optional[str] = None,
        region_type: Optional[str] = None,
        months: int = 12
    ) -> List[MarketTrend]:
        params = {'region': region, 'region_type': region_type, 'months': months}
        key = cache_key("fetch_market_trends", params)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        attempts = []
        if region:
            attempts = [
                Attempt(source.name, lambda source=source: source.get_market_trends(region, region_type, months))
                for source in self._external(TRENDS, only=("repliers", "redfin"))
            ]

        async def from_database():
            rows = await self.repository.list_market_trends(region=region, region_type=region_type, limit=months)
            return [trend_to_record(row) for row in rows]

        async def generate():
            return synthetic.market_trends(
                region or "United States", region_type or "city", seeded_rng(key), months=months
            )

        attempts.append(Attempt("database", from_database))
        return await self._resolve("fetch_market_trends", key, attempts, fallback=generate)

    # ------------------------------------------------------------------
    # Valuation
    # ------------------------------------------------------------------

    async def get_property_valuation(self, property_id: str, base_price: Optional[float] = None) -> PropertyValuation:
        """
        Raises:
            PropertyNotFound: the listing is not stored and no base_price was given
            Exception: the listing lookup failed and no base_price was given
        """
        key = cache_key("get_property_valuation", {'property_id': property_id, 'base_price': base_price})
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        listing = None
        try:
            listing = await self.repository.get_listing(property_id)
        except Exception as e:
            # nothing to value without the listing or a base_price
            if base_price is None:
                raise
            logger.warning("valuation_listing_lookup_failed", property_id=property_id, error=str(e))

        if listing is None and base_price is None:
            raise PropertyNotFound(property_id)
        price = listing.price if listing is not None else base_price

        attempts = []
        for source in self._external(VALUATION, only=("repliers", "zillow")):
            if source.name == "zillow":
                if listing is None:
                    continue
                attempts.append(Attempt(source.name, lambda source=source: source.get_property_valuation(
                    property_id, address=listing.address, zip_code=listing.zip_code)))
            else:
                attempts.append(Attempt(source.name, lambda source=source: source.get_property_valuation(property_id)))

        async def generate():
            return synthetic.property_valuation(property_id, price, seeded_rng(key))

        return await self._resolve("get_property_valuation", key, attempts, fallback=generate)

    # ------------------------------------------------------------------
    # Neighborhood
    # ------------------------------------------------------------------

    async def get_neighborhood_info(self, city: str, state: str, zip_code: Optional[str] = None) -> NeighborhoodInfo:
        key = cache_key("get_neighborhood_info", {'city': city, 'state': state, 'zip_code': zip_code})
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        attempts = []
        for source in self._external(NEIGHBORHOOD, only=("repliers", "redfin")):
            if source.name == "redfin":
                async def from_redfin(source=source):
                    raw = await source.get_neighborhood_info(city, state, zip_code)
                    return merge_neighborhood(raw, source.name) if raw else None
                attempts.append(Attempt(source.name, from_redfin))
            else:
                attempts.append(Attempt(source.name, lambda source=source: source.get_neighborhood_info(
                    city, state, zip_code)))

        async def generate():
            return synthetic.neighborhood_info()

        return await self._resolve("get_neighborhood_info", key, attempts, fallback=generate)

    # ------------------------------------------------------------------
    # Insights, analysis, opportunity zones
    # ------------------------------------------------------------------

    async def get_market_insights(self, region: str, region_type: Optional[str] = None) -> MarketInsight:
        key = cache_key("get_market_insights", {'region': region, 'region_type': region_type})
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        attempts = [
            Attempt(source.name, lambda source=source: source.get_market_insights(region, region_type))
            for source in self._external(INSIGHTS, only=("repliers",))
        ]

        async def generate():
            return synthetic.market_insight(region, region_type, seeded_rng(key))

        return await self._resolve("get_market_insights", key, attempts, fallback=generate)

    async def get_property_analysis(self, property_id: str) -> PropertyAnalysis:
        """
        Raises:
            PropertyNotFound: no provider answered and the listing is not stored
        """
        key = cache_key("get_property_analysis", {'property_id': property_id})
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        attempts = [
            Attempt(source.name, lambda source=source: source.get_property_analysis(property_id))
            for source in self._external(ANALYSIS, only=("repliers",))
        ]

        async def generate():
            listing = await self.repository.get_listing(property_id)
            if listing is None:
                raise PropertyNotFound(property_id)
            return synthetic.property_analysis(
                property_id,
                address=listing.address,
                price=listing.price,
                square_feet=listing.square_feet,
                bedrooms=listing.bedrooms,
                bathrooms=listing.bathrooms,
                year_built=listing.year_built,
                rng=seeded_rng(key),
            )

        return await self._resolve("get_property_analysis", key, attempts, fallback=generate)

    async def get_opportunity_zones(self, region: str, region_type: Optional[str] = None) -> List[OpportunityZone]:
        key = cache_key("get_opportunity_zones", {'region': region, 'region_type': region_type})
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        attempts = [
            Attempt(source.name, lambda source=source: source.get_opportunity_zones(region, region_type))
            for source in self._external(OPPORTUNITY_ZONES, only=("repliers",))
        ]

        async def generate():
            return synthetic.opportunity_zones(region, region_type)

        return await self._resolve("get_opportunity_zones", key, attempts, fallback=generate)

    async def close(self) -> None:
        for source in self.sources:
            await source.close()
