"""
Utilities module: Exceptions, schemas.
"""

from shared.utils.exceptions import (
    NotFoundError,
    ValidationError,
    ConflictError,
    InsufficientStockError,
    InvalidTransitionError,
    ServiceUnavailableError,
)
from shared.utils.schemas import ErrorResponse

__all__ = [
    # exceptions
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "InsufficientStockError",
    "InvalidTransitionError",
    "ServiceUnavailableError",
    # schemas
    "ErrorResponse",
]
