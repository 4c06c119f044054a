"""
Order endpoints.

Thin controllers: parse the request, resolve the acting staff member and
delegate to OrderService. Domain exceptions are HTTPExceptions already, so
nothing is translated here.
"""

from fastapi import APIRouter, Depends, status

from pos_api.core.dependencies import (
    current_staff,
    get_idempotency_key,
    get_order_service,
)
from pos_api.services.domain import OrderService
from shared.utils.schemas import (
    CreateOrderRequest,
    ErrorResponse,
    OrderDetailOutput,
    OrderOutput,
    StaffContext,
    UpdateOrderStatusRequest,
)


router = APIRouter(prefix="/api/orders", tags=["orders"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@router.post(
    "",
    response_model=OrderOutput,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
def create_order(
    body: CreateOrderRequest,
    actor: StaffContext = Depends(current_staff),
    key: str | None = Depends(get_idempotency_key),
    service: OrderService = Depends(get_order_service),
) -> OrderOutput:
    """
    Create a new order.

    Send the same Idempotency-Key (or X-Idempotency-Key) header when retrying
    to get the original order back instead of a duplicate.
    """
    return service.create_order(body, actor, idempotency_key=key)


@router.get("/{order_id}", response_model=OrderDetailOutput, responses=ERROR_RESPONSES)
def get_order(
    order_id: int,
    actor: StaffContext = Depends(current_staff),
    service: OrderService = Depends(get_order_service),
) -> OrderDetailOutput:
    """Get an order with its lines, history and kitchen progress."""
    return service.get_order_by_id(order_id)


@router.patch("/{order_id}/status", response_model=OrderDetailOutput, responses=ERROR_RESPONSES)
def update_order_status(
    order_id: int,
    body: UpdateOrderStatusRequest,
    actor: StaffContext = Depends(current_staff),
    service: OrderService = Depends(get_order_service),
) -> OrderDetailOutput:
    """
    Move an order to its next status.

    Returns 409 with the allowed next statuses when the change is not
    permitted from the current status.
    """
    return service.update_order_status(order_id, body.status, actor, notes=body.notes)
