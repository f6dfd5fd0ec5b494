"""Redfin API client: listing search, market trends and raw neighborhood data."""

from typing import Any, Dict, List, Optional

from .base import NEIGHBORHOOD, SEARCH, TRENDS, ExternalDataSource, lower_or_unknown, search_query
from .models import MarketTrend, PropertyDetails, PropertySearchParams


class RedfinDataSource(ExternalDataSource):
    name = "redfin"
    capabilities = frozenset({SEARCH, TRENDS, NEIGHBORHOOD})

    async def search_properties(self, params: PropertySearchParams) -> List[PropertyDetails]:
        query = search_query(params, {
            'min_price': 'minPrice',
            'max_price': 'maxPrice',
            'bedrooms': 'minBeds',
            'bathrooms': 'minBaths',
            'property_type': 'propertyType',
        })
        data = await self._request("/properties", query)

        results = []
        for item in data.get('properties') or []:
            address = item.get('address') or {}
            location = item.get('location') or {}
            results.append(PropertyDetails(
                id=str(item.get('mlsId') or ''),
                address=address.get('line', ''),
                city=address.get('city', ''),
                state=address.get('state', ''),
                zip_code=address.get('postalCode', ''),
                price=(item.get('price') or {}).get('list') or 0,
                bedrooms=item.get('beds') or 0,
                bathrooms=item.get('baths') or 0,
                square_feet=item.get('livingArea') or 0,
                year_built=item.get('yearBuilt') or 0,
                property_type=lower_or_unknown(item.get('propertyType')),
                listing_status=lower_or_unknown(item.get('status')),
                description=item.get('description') or '',
                features=item.get('features') or [],
                images=[media['url'] for media in item.get('media') or [] if media.get('url')],
                latitude=location.get('latitude'),
                longitude=location.get('longitude'),
                days_on_market=item.get('daysOnMarket') or 0,
                listing_date=item.get('listDate') or '',
                source=self.name,
            ))
        return results

    async def get_market_trends(
        self, region: str, region_type: Optional[str] = None, months: int = 12
    ) -> List[MarketTrend]:
        data = await self._request("/market-trends", {
            'region': region,
            'months': months,
            'regionType': region_type,
        })
        return [
            MarketTrend(
                region=item.get('region') or '',
                region_type=item.get('regionType') or 'city',
                median_price=item.get('medianPrice') or 0,
                price_change_pct=item.get('priceChangePct') or 0,
                avg_days_on_market=item.get('avgDaysOnMarket') or 0,
                inventory_count=item.get('inventoryCount') or 0,
                month=item.get('month') or 0,
                year=item.get('year') or 0,
                source=self.name,
            )
            for item in data.get('trends') or []
        ]

    async def get_neighborhood_info(
        self, city: str, state: str, zip_code: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """Raw camelCase payload; the aggregation layer merges it over defaults."""
        return await self._request("/neighborhood", {'city': city, 'state': state, 'zipCode': zip_code})
