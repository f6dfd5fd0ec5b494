"""Data aggregation services"""

from .aggregation import RealEstateDataService
from .response_cache import ResponseCache

__all__ = ['RealEstateDataService', 'ResponseCache']
