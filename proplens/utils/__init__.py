"""Utility modules for PropLens"""

from .logging import configure_logging, get_logger
from .serialization import cache_key, extract_json_object, make_serializable, seeded_rng, truncate

__all__ = [
    'configure_logging',
    'get_logger',
    'cache_key',
    'extract_json_object',
    'make_serializable',
    'seeded_rng',
    'truncate',
]
