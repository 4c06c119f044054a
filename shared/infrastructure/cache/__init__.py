"""
Cache package initialization.
"""

from shared.infrastructure.cache.order_cache import (
    KeyValueStore,
    OrderCache,
)

__all__ = [
    "KeyValueStore",
    "OrderCache",
]
