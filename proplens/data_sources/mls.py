"""MLS Grid API client: listing search only."""

from typing import Any, Dict, List

from .base import SEARCH, ExternalDataSource, lower_or_unknown, search_query
from .models import PropertyDetails, PropertySearchParams


class MLSDataSource(ExternalDataSource):
    name = "mls"
    capabilities = frozenset({SEARCH})

    def _property(self, item: Dict[str, Any]) -> PropertyDetails:
        address = item.get('address') or {}
        geo = item.get('geo') or {}
        return PropertyDetails(
            id=str(item.get('listingId') or ''),
            address=address.get('full', ''),
            city=address.get('city', ''),
            state=address.get('state', ''),
            zip_code=address.get('zip', ''),
            price=item.get('listPrice') or 0,
            bedrooms=item.get('bedrooms') or 0,
            bathrooms=item.get('bathrooms') or 0,
            square_feet=item.get('squareFeet') or 0,
            year_built=item.get('yearBuilt') or 0,
            property_type=lower_or_unknown(item.get('propertyType')),
            listing_status=lower_or_unknown(item.get('status')),
            description=item.get('remarks') or '',
            features=item.get('features') or [],
            images=item.get('photos') or [],
            latitude=geo.get('lat'),
            longitude=geo.get('lng'),
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
        data = await self._request("/properties", query)
        return [self._property(item) for item in data.get('properties') or []]
