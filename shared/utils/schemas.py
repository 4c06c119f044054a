"""
Shared Pydantic schemas used across the application.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, PositiveInt

from shared.config.constants import Limits


# =============================================================================
# Common Types
# =============================================================================

OrderTypeLiteral = Literal["DINE_IN", "TAKEAWAY", "DELIVERY", "PARTY", "OPEN_BUFFET"]
CustomerTypeLiteral = Literal["INDIVIDUAL", "COMPANY"]


class ErrorResponse(BaseModel):
    """Error body of a rejected request."""

    detail: str


# =============================================================================
# Acting Staff
# =============================================================================


class StaffContext(BaseModel):
    """
    Who is performing an order operation.

    user_id identifies the authenticated account. staff_id is set only when
    that account has a staff identity (cashier, kitchen, hall manager,
    delivery); customers ordering for themselves have none.
    """

    user_id: int
    staff_id: int | None = None


# =============================================================================
# Order Requests
# =============================================================================


class OrderLineInput(BaseModel):
    """One requested line of an order."""

    # Checked by the order item validator so unknown types surface as InvalidInput
    item_type: str = Field(min_length=1, max_length=20)
    item_reference_id: PositiveInt
    quantity: PositiveInt
    cooking_method_id: PositiveInt | None = None
    special_instructions: str | None = Field(
        default=None, max_length=Limits.MAX_LINE_INSTRUCTIONS_LENGTH
    )


class CreateOrderRequest(BaseModel):
    """Request to create an order."""

    order_type: OrderTypeLiteral
    customer_type: CustomerTypeLiteral = "INDIVIDUAL"
    customer_id: PositiveInt | None = None
    company_id: PositiveInt | None = None
    table_id: PositiveInt | None = None
    delivery_area_id: PositiveInt | None = None
    items: list[OrderLineInput] = Field(default_factory=list)
    special_instructions: str | None = Field(
        default=None, max_length=Limits.MAX_ORDER_INSTRUCTIONS_LENGTH
    )


class UpdateOrderStatusRequest(BaseModel):
    """Request to move an order to a new status."""

    status: str = Field(min_length=1, max_length=20)
    notes: str | None = Field(default=None, max_length=Limits.MAX_STATUS_NOTES_LENGTH)


# =============================================================================
# Order Outputs
# =============================================================================


class OrderItemOutput(BaseModel):
    """Output for a single order line."""

    id: int
    item_type: str
    item_id: int | None = None
    recipe_id: int | None = None
    meal_id: int | None = None
    cooking_method_id: int | None = None
    name: str | None = None
    cooking_method_name: str | None = None
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    status: str
    special_instructions: str | None = None


class OrderOutput(BaseModel):
    """Output for a created order with its lines."""

    id: int
    order_number: str
    order_type: str
    customer_type: str
    status: str
    customer_id: int | None = None
    company_id: int | None = None
    table_id: int | None = None
    delivery_area_id: int | None = None
    cashier_id: int | None = None
    subtotal: Decimal
    tax_amount: Decimal
    delivery_fee: Decimal
    total_amount: Decimal
    special_instructions: str | None = None
    is_paid: bool
    estimated_ready_time: datetime | None = None
    created_at: datetime | None = None
    items: list[OrderItemOutput]


class PersonSummary(BaseModel):
    """Name and contact of a customer or staff member."""

    id: int
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None


class CompanySummary(BaseModel):
    """Company customer summary."""

    id: int
    company_name: str
    contact_person: str | None = None
    contact_phone: str | None = None


class TableSummary(BaseModel):
    """Table summary."""

    id: int
    table_number: str
    table_type: str | None = None
    capacity: int | None = None


class OrderStatusHistoryOutput(BaseModel):
    """One audit row of an order's status history."""

    id: int
    old_status: str | None = None
    new_status: str
    changed_by_staff_id: int | None = None
    changed_by_name: str | None = None
    notes: str | None = None
    changed_at: datetime | None = None


class OrderDetailOutput(OrderOutput):
    """Full order view with related entities and derived progress fields."""

    kitchen_staff_id: int | None = None
    hall_manager_id: int | None = None
    delivery_staff_id: int | None = None
    confirmed_at: datetime | None = None
    kitchen_start_at: datetime | None = None
    ready_at: datetime | None = None
    served_at: datetime | None = None
    delivered_at: datetime | None = None

    customer: PersonSummary | None = None
    company: CompanySummary | None = None
    table: TableSummary | None = None
    cashier: PersonSummary | None = None
    kitchen_staff: PersonSummary | None = None
    delivery_staff: PersonSummary | None = None
    status_history: list[OrderStatusHistoryOutput] = Field(default_factory=list)

    items_ready: int
    total_items: int
    is_fully_ready: bool
    estimated_time_remaining: int | None = None
