"""
Redis constants and key builders.
Centralizes key prefixes so every writer and reader agrees on them.
TTLs live in settings (order_cache_ttl, order_idempotency_ttl, order_counter_ttl).
"""

# =============================================================================
# Key Prefixes
# =============================================================================

PREFIX_CACHE_ORDER = "order:"
PREFIX_IDEMPOTENCY_ORDER = "idempotency:order:"
PREFIX_ORDER_COUNTER = "order_counter:"


def get_order_cache_key(order_id: int) -> str:
    """Cache key for an active order snapshot."""
    return f"{PREFIX_CACHE_ORDER}{order_id}"


def get_order_idempotency_key(idempotency_key: str) -> str:
    """Key under which a createOrder result is stored for replay."""
    return f"{PREFIX_IDEMPOTENCY_ORDER}{idempotency_key}"


def get_order_counter_key(date_str: str) -> str:
    """Daily order-number counter key; date_str is YYYYMMDD."""
    return f"{PREFIX_ORDER_COUNTER}{date_str}"
