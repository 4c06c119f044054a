"""
Event Type Constants.

Defines the order event types published over Redis pub/sub.
"""

# =============================================================================
# Order lifecycle events
# =============================================================================

ORDER_CREATED = "ORDER_CREATED"
STATUS_UPDATED = "STATUS_UPDATED"

ORDER_EVENT_TYPES = frozenset({ORDER_CREATED, STATUS_UPDATED})

# =============================================================================
# Size limits
# =============================================================================

MAX_EVENT_SIZE = 64 * 1024  # 64 KB
