"""
Base class for credential-gated external real estate data providers.

Each provider is a plain JSON-over-HTTPS API with bearer authentication.
Subclasses declare which capabilities they support and map the provider's
payloads onto the shared record shapes in `data_sources.models`.
"""

import re
from typing import Any, Dict, FrozenSet, List, Optional

import aiohttp
import structlog

from ..exceptions import UpstreamError
from .models import (
    MarketInsight,
    MarketTrend,
    NeighborhoodInfo,
    OpportunityZone,
    PropertyAnalysis,
    PropertyDetails,
    PropertySearchParams,
    PropertyValuation,
)

logger = structlog.get_logger(__name__)

# Capability names used by the aggregation layer to build provider chains
SEARCH = "search_properties"
TRENDS = "market_trends"
VALUATION = "property_valuation"
NEIGHBORHOOD = "neighborhood_info"
INSIGHTS = "market_insights"
ANALYSIS = "property_analysis"
OPPORTUNITY_ZONES = "opportunity_zones"


class ExternalDataSource:
    """
    One external data provider.

    Usage:
        source = RepliersDataSource(api_key, base_url, region="us")
        listings = await source.search_properties(PropertySearchParams(location="Austin, TX"))
        await source.close()
    """

    name: str = "external"
    capabilities: FrozenSet[str] = frozenset()

    def __init__(self, api_key: str, base_url: str, timeout: int = 30):
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session: Optional[aiohttp.ClientSession] = None

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def supports(self, capability: str) -> bool:
        return capability in self.capabilities

    def default_params(self) -> Dict[str, Any]:
        """Query parameters appended to every request"""
        return {}

    async def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={
                    'Authorization': f'Bearer {self.api_key}',
                    'Content-Type': 'application/json',
                }
            )
        return self.session

    async def close(self) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def _request(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET a JSON document.

        Raises:
            UpstreamError: missing credential or non-2xx response
        """
        if not self.api_key:
            raise UpstreamError(self.name, "API key is not configured")

        query = {k: str(v) for k, v in (params or {}).items() if v is not None}
        query.update({k: str(v) for k, v in self.default_params().items()})

        session = await self._get_session()
        url = f"{self.base_url}{endpoint}"
        async with session.get(url, params=query) as response:
            if response.status >= 300:
                body = await response.text()
                logger.warning("upstream_request_failed", source=self.name, endpoint=endpoint, status=response.status)
                raise UpstreamError(self.name, body[:500], status=response.status)
            return await response.json(content_type=None)

    # ------------------------------------------------------------------
    # Capabilities (override in subclasses that support them)
    # ------------------------------------------------------------------

    async def search_properties(self, params: PropertySearchParams) -> List[PropertyDetails]:
        raise NotImplementedError(f"{self.name} does not support property search")

    async def get_market_trends(
        self, region: str, region_type: Optional[str] = None, months: int = 12
    ) -> List[MarketTrend]:
        raise NotImplementedError(f"{self.name} does not support market trends")

    async def get_property_valuation(
        self, property_id: str, address: Optional[str] = None, zip_code: Optional[str] = None
    ) -> PropertyValuation:
        raise NotImplementedError(f"{self.name} does not support valuations")

    async def get_neighborhood_info(
        self, city: str, state: str, zip_code: Optional[str] = None
    ) -> Optional[NeighborhoodInfo]:
        raise NotImplementedError(f"{self.name} does not support neighborhood info")

    async def get_market_insights(self, region: str, region_type: Optional[str] = None) -> MarketInsight:
        raise NotImplementedError(f"{self.name} does not support market insights")

    async def get_property_analysis(self, property_id: str) -> PropertyAnalysis:
        raise NotImplementedError(f"{self.name} does not support property analysis")

    async def get_opportunity_zones(self, region: str, region_type: Optional[str] = None) -> List[OpportunityZone]:
        raise NotImplementedError(f"{self.name} does not support opportunity zones")


def search_query(params: PropertySearchParams, names: Dict[str, str]) -> Dict[str, Any]:
    """
    Build a provider search query.

    `names` maps our filter names (min_price, max_price, bedrooms, bathrooms,
    property_type) to the provider's parameter names.
    """
    query: Dict[str, Any] = {'location': params.location or '', 'limit': params.limit}
    for field, provider_name in names.items():
        value = getattr(params, field)
        if value:
            query[provider_name] = value
    return query


def lower_or_unknown(value: Optional[str]) -> str:
    return value.lower() if value else "unknown"


def _snake(name: str) -> str:
    return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()


def snake_case_keys(data: Any) -> Any:
    """Recursively rename camelCase payload keys (pricePerSqFt -> price_per_sq_ft)."""
    if isinstance(data, dict):
        return {_snake(k): snake_case_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [snake_case_keys(item) for item in data]
    return data
