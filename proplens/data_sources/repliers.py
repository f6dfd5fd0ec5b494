"""
Repliers API client.

Primary provider: supports every aggregation capability, including the
insight / analysis / opportunity-zone endpoints no other provider offers.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .base import (
    ANALYSIS, INSIGHTS, NEIGHBORHOOD, OPPORTUNITY_ZONES, SEARCH, TRENDS, VALUATION,
    ExternalDataSource, lower_or_unknown, search_query, snake_case_keys,
)
from .models import (
    HistoricalValue,
    MarketInsight,
    MarketTrend,
    NeighborhoodInfo,
    OpportunityZone,
    PropertyAnalysis,
    PropertyDetails,
    PropertySearchParams,
    PropertyValuation,
    ValuationRange,
)


class RepliersDataSource(ExternalDataSource):
    name = "repliers"
    capabilities = frozenset({SEARCH, TRENDS, VALUATION, NEIGHBORHOOD, INSIGHTS, ANALYSIS, OPPORTUNITY_ZONES})

    def __init__(self, api_key: str, base_url: str, region: str = "us", timeout: int = 30):
        super().__init__(api_key, base_url, timeout)
        self.region = region

    def default_params(self) -> Dict[str, Any]:
        return {'region': self.region}

    def _property(self, item: Dict[str, Any]) -> PropertyDetails:
        address = item.get('address') or {}
        location = item.get('location') or {}
        return PropertyDetails(
            id=str(item.get('id') or ''),
            address=address.get('full', ''),
            city=address.get('city', ''),
            state=address.get('state', ''),
            zip_code=address.get('zip', ''),
            price=item.get('price') or 0,
            bedrooms=item.get('bedrooms') or 0,
            bathrooms=item.get('bathrooms') or 0,
            square_feet=item.get('squareFeet') or 0,
            year_built=item.get('yearBuilt') or 0,
            property_type=lower_or_unknown(item.get('propertyType')),
            listing_status=lower_or_unknown(item.get('status')),
            description=item.get('description') or '',
            features=item.get('features') or [],
            images=item.get('images') or [],
            latitude=location.get('latitude'),
            longitude=location.get('longitude'),
            days_on_market=item.get('daysOnMarket') or 0,
            listing_date=item.get('listDate') or '',
            source=self.name,
        )

    async def search_properties(self, params: PropertySearchParams) -> List[PropertyDetails]:
        query = search_query(params, {
            'min_price': 'minPrice',
            'max_price': 'maxPrice',
            'bedrooms': 'minBedrooms',
            'bathrooms': 'minBathrooms',
            'property_type': 'propertyType',
        })
        data = await self._request("/properties/search", query)
        return [self._property(item) for item in data.get('properties') or []]

    async def get_property_valuation(
        self, property_id: str, address: Optional[str] = None, zip_code: Optional[str] = None
    ) -> PropertyValuation:
        data = await self._request(f"/properties/{property_id}/valuation")
        value_range = data.get('valuationRange') or {}
        return PropertyValuation(
            property_id=property_id,
            estimated_value=data.get('estimatedValue') or 0,
            valuation_range=ValuationRange(low=value_range.get('low') or 0, high=value_range.get('high') or 0),
            last_updated=data.get('lastUpdated') or datetime.now(timezone.utc).isoformat(),
            historical_values=[
                HistoricalValue(date=item['date'], value=item['value'])
                for item in data.get('historicalValues') or []
            ],
            source=self.name,
        )

    async def get_market_trends(
        self, region: str, region_type: Optional[str] = None, months: int = 12
    ) -> List[MarketTrend]:
        data = await self._request("/market/trends", {
            'region': region,
            'months': months,
            'regionType': region_type,
        })
        now = datetime.now(timezone.utc)
        return [
            MarketTrend(
                region=item.get('region') or region,
                region_type=item.get('regionType') or region_type or 'city',
                median_price=item.get('medianPrice') or 0,
                price_change_pct=item.get('priceChangePct') or 0,
                avg_days_on_market=item.get('avgDaysOnMarket') or 0,
                inventory_count=item.get('inventoryCount') or 0,
                month=item.get('month') or now.month,
                year=item.get('year') or now.year,
                source=self.name,
            )
            for item in data.get('trends') or []
        ]

    async def get_neighborhood_info(
        self, city: str, state: str, zip_code: Optional[str] = None
    ) -> Optional[NeighborhoodInfo]:
        data = await self._request("/neighborhood", {'city': city, 'state': state, 'zipCode': zip_code})
        if not data:
            return None
        return NeighborhoodInfo.model_validate({**snake_case_keys(data), 'source': self.name})

    async def get_market_insights(self, region: str, region_type: Optional[str] = None) -> MarketInsight:
        data = await self._request("/market/insights", {'region': region, 'regionType': region_type})
        return MarketInsight.model_validate({**snake_case_keys(data), 'source': self.name})

    async def get_property_analysis(self, property_id: str) -> PropertyAnalysis:
        data = await self._request(f"/properties/{property_id}/analysis")
        return PropertyAnalysis.model_validate({**snake_case_keys(data), 'source': self.name})

    async def get_opportunity_zones(self, region: str, region_type: Optional[str] = None) -> List[OpportunityZone]:
        data = await self._request("/market/opportunity-zones", {'region': region, 'regionType': region_type})
        return [
            OpportunityZone.model_validate({**snake_case_keys(zone), 'source': self.name})
            for zone in data.get('opportunityZones') or []
        ]
