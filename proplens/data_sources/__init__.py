"""External real estate data providers and the synthetic fallback generator"""

from .base import ExternalDataSource
from .mls import MLSDataSource
from .redfin import RedfinDataSource
from .repliers import RepliersDataSource
from .zillow import ZillowDataSource

__all__ = [
    'ExternalDataSource',
    'MLSDataSource',
    'RedfinDataSource',
    'RepliersDataSource',
    'ZillowDataSource',
]
