"""Zillow (Bridge Zestimates) API client: listing search and address-based valuations."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..exceptions import UpstreamError
from .base import SEARCH, VALUATION, ExternalDataSource, lower_or_unknown, search_query
from .models import HistoricalValue, PropertyDetails, PropertySearchParams, PropertyValuation, ValuationRange


class ZillowDataSource(ExternalDataSource):
    name = "zillow"
    capabilities = frozenset({SEARCH, VALUATION})

    def _property(self, item: Dict[str, Any], images: List[str]) -> PropertyDetails:
        address = item.get('address') or {}
        return PropertyDetails(
            id=str(item.get('zpid') or ''),
            address=address.get('streetAddress', ''),
            city=address.get('city', ''),
            state=address.get('state', ''),
            zip_code=address.get('zipcode', ''),
            price=item.get('price') or 0,
            bedrooms=item.get('bedrooms') or 0,
            bathrooms=item.get('bathrooms') or 0,
            square_feet=item.get('livingArea') or 0,
            year_built=item.get('yearBuilt') or 0,
            property_type=lower_or_unknown(item.get('homeType')),
            listing_status=lower_or_unknown(item.get('homeStatus')),
            description=item.get('description') or '',
            features=item.get('homeFactsAndFeatures') or [],
            images=images,
            latitude=item.get('latitude'),
            longitude=item.get('longitude'),
            days_on_market=item.get('daysOnZillow') or 0,
            listing_date=item.get('datePosted') or '',
            source=self.name,
        )

    async def search_properties(self, params: PropertySearchParams) -> List[PropertyDetails]:
        query = search_query(params, {
            'min_price': 'minPrice',
            'max_price': 'maxPrice',
            'bedrooms': 'beds',
            'bathrooms': 'baths',
            'property_type': 'homeType',
        })
        data = await self._request("/search", query)
        return [
            self._property(item, [item['imgSrc']] if item.get('imgSrc') else [])
            for item in data.get('results') or []
        ]

    async def get_property_valuation(
        self, property_id: str, address: Optional[str] = None, zip_code: Optional[str] = None
    ) -> PropertyValuation:
        if not address or not zip_code:
            raise UpstreamError(self.name, "valuation lookup needs address and zip code")

        data = await self._request("/zestimate", {'address': address, 'zipcode': zip_code})
        value_range = data.get('valuationRange') or {}
        return PropertyValuation(
            property_id=str(data.get('zpid') or property_id),
            estimated_value=data.get('zestimate') or 0,
            valuation_range=ValuationRange(low=value_range.get('low') or 0, high=value_range.get('high') or 0),
            last_updated=data.get('lastUpdated') or datetime.now(timezone.utc).isoformat(),
            historical_values=[
                HistoricalValue(date=item['date'], value=item['value'])
                for item in data.get('historicalValues') or []
            ],
            source=self.name,
        )
