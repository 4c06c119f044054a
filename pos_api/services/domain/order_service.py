"""
Order Domain Service.

Creates orders, moves them through the status state machine and builds the
detailed order view. Routers stay thin and delegate here.

Each write operation follows the same shape:
1. Validate everything that can fail without writing
2. Write in one transaction (atomic)
3. After commit, run cache and event steps through best_effort so they can
   never change the outcome
"""

from __future__ import annotations

import math
import time
from datetime import datetime, timedelta, timezone
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from pos_api.models import (
    CompanyCustomer,
    Customer,
    DeliveryArea,
    Order,
    OrderItem,
    OrderStatusHistory,
    Staff,
    Table,
)
from shared.config.constants import (
    CustomerType,
    OrderItemStatus,
    OrderStatus,
    OrderType,
    TableStatus,
)
from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.infrastructure.best_effort import best_effort
from shared.infrastructure.cache.order_cache import OrderCache
from shared.infrastructure.db import atomic
from shared.infrastructure.events.event_schema import OrderEvent
from shared.infrastructure.events.event_types import ORDER_CREATED, STATUS_UPDATED
from shared.utils.exceptions import (
    ConflictError,
    NotFoundError,
    OrderNotFoundError,
    ValidationError,
)
from shared.utils.schemas import (
    CompanySummary,
    CreateOrderRequest,
    OrderDetailOutput,
    OrderItemOutput,
    OrderOutput,
    OrderStatusHistoryOutput,
    PersonSummary,
    StaffContext,
    TableSummary,
)

from .catalog_lookup import CatalogLookup
from .order_item_validator import OrderItemValidator, ValidatedOrderLine
from .order_number import OrderNumberGenerator
from .order_status import apply_transition, ensure_transition, parse_order_status
from .order_totals import OrderTotals, calculate_order_totals

logger = get_logger(__name__)


class EventSink(Protocol):
    """Anything that accepts order events without blocking the caller."""

    def submit(self, event: OrderEvent) -> object: ...


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class OrderService:
    """
    Domain service for order creation, status changes and retrieval.

    Usage:
        service = OrderService(db, cache, publisher, number_generator)
        order = service.create_order(request, actor, idempotency_key="abc")
        detail = service.update_order_status(order.id, "CONFIRMED", actor)
    """

    def __init__(
        self,
        db: Session,
        cache: OrderCache | None,
        publisher: EventSink | None,
        number_generator: OrderNumberGenerator,
        clock=_utc_now,
    ):
        self._db = db
        self._cache = cache
        self._publisher = publisher
        self._number_generator = number_generator
        self._clock = clock
        self._item_validator = OrderItemValidator(CatalogLookup(db))

    # =========================================================================
    # Create
    # =========================================================================

    def create_order(
        self,
        request: CreateOrderRequest,
        actor: StaffContext,
        idempotency_key: str | None = None,
    ) -> OrderOutput:
        """
        Create a PENDING order with its lines.

        A repeated idempotency key returns the stored result of the first
        call without touching the database.

        Raises:
            ValidationError, NotFoundError, ConflictError, InsufficientStockError:
                Request rejected before any write
            ServiceUnavailableError: Transaction failed or timed out
        """
        start = time.perf_counter()

        if idempotency_key and self._cache is not None:
            cached = best_effort(
                "read idempotent order",
                self._cache.get_idempotent_result,
                idempotency_key,
                log_context={"idempotency_key": idempotency_key},
            )
            if cached is not None:
                logger.info(
                    "Returning cached order from idempotency key",
                    idempotency_key=idempotency_key,
                    order_id=cached.id,
                )
                return cached

        try:
            table, delivery_area = self._validate_order_request(request)
            lines = self._item_validator.validate_all(request.items)
            totals = calculate_order_totals(lines, delivery_area)
            order_number = self._number_generator.generate(
                unique_check=self._is_order_number_unused
            )
            order = self._persist_new_order(request, actor, lines, totals, order_number, table)
        except Exception as e:
            logger.error(
                "Create order failed",
                error=str(e),
                error_type=type(e).__name__,
                order_type=request.order_type,
                item_count=len(request.items),
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            raise

        result = self._to_order_output(order)

        if self._cache is not None:
            best_effort(
                "cache order",
                self._cache.set_order,
                result,
                log_context={"order_id": result.id},
            )
        self._publish(
            OrderEvent(
                type=ORDER_CREATED,
                order_id=result.id,
                data={
                    "order_number": result.order_number,
                    "order_type": result.order_type,
                    "total_amount": str(result.total_amount),
                },
            )
        )
        if idempotency_key and self._cache is not None:
            best_effort(
                "store idempotent order",
                self._cache.store_idempotent_result,
                idempotency_key,
                result,
                log_context={"order_id": result.id, "idempotency_key": idempotency_key},
            )

        logger.info(
            "Order created successfully",
            order_id=result.id,
            order_number=result.order_number,
            total_amount=str(result.total_amount),
            item_count=len(result.items),
            created_by=actor.user_id,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return result

    def _validate_order_request(
        self,
        request: CreateOrderRequest,
    ) -> tuple[Table | None, DeliveryArea | None]:
        """Order-level checks. Reads only."""
        if not request.items:
            raise ValidationError("Order must contain at least one item", field="items")

        if request.customer_type == CustomerType.COMPANY and not request.company_id:
            raise ValidationError("Company ID required for company orders", field="company_id")
        if request.customer_type == CustomerType.INDIVIDUAL and request.company_id:
            raise ValidationError(
                "Cannot specify company for individual orders", field="company_id"
            )
        if request.customer_type == CustomerType.COMPANY and request.customer_id:
            raise ValidationError(
                "Cannot specify customer for company orders", field="customer_id"
            )

        if request.customer_id:
            customer = self._get_live(Customer, request.customer_id, "Customer")
            if not customer.is_active:
                raise ConflictError("Customer account is inactive", customer_id=customer.id)

        if request.company_id:
            company = self._get_live(CompanyCustomer, request.company_id, "Company")
            if not company.is_active:
                raise ConflictError("Company account is inactive", company_id=company.id)

        if request.order_type == OrderType.DINE_IN and not request.table_id:
            raise ValidationError("Table is required for dine-in orders", field="table_id")

        table = None
        if request.table_id:
            table = self._get_live(Table, request.table_id, "Table")
            if table.status != TableStatus.AVAILABLE:
                raise ConflictError(
                    f"Table is {table.status.lower()}",
                    table_id=table.id,
                    table_status=table.status,
                )

        if request.order_type == OrderType.DELIVERY and not request.delivery_area_id:
            raise ValidationError(
                "Delivery area is required for delivery orders", field="delivery_area_id"
            )

        delivery_area = None
        if request.delivery_area_id:
            delivery_area = self._get_live(
                DeliveryArea, request.delivery_area_id, "Delivery area"
            )
            if not delivery_area.is_active:
                raise ConflictError(
                    "Delivery area is not active", delivery_area_id=delivery_area.id
                )

        return table, delivery_area

    def _persist_new_order(
        self,
        request: CreateOrderRequest,
        actor: StaffContext,
        lines: list[ValidatedOrderLine],
        totals: OrderTotals,
        order_number: str,
        table: Table | None,
    ) -> Order:
        now = self._clock()

        with atomic(
            self._db,
            "create order",
            statement_timeout_ms=settings.order_tx_timeout_ms,
            lock_timeout_ms=settings.order_tx_lock_wait_ms,
        ):
            if table is not None:
                # Re-check under a row lock: the table may have been taken
                # since validation
                table = self._db.scalar(
                    select(Table)
                    .where(Table.id == table.id)
                    .with_for_update()
                    .execution_options(populate_existing=True)
                )
                if table is None or table.status != TableStatus.AVAILABLE:
                    raise ConflictError(
                        "Table is no longer available", table_id=request.table_id
                    )

            order = Order(
                order_number=order_number,
                order_type=request.order_type,
                customer_type=request.customer_type,
                status=OrderStatus.PENDING,
                customer_id=request.customer_id,
                company_id=request.company_id,
                table_id=request.table_id,
                delivery_area_id=request.delivery_area_id,
                cashier_id=actor.staff_id,
                subtotal=totals.subtotal,
                tax_amount=totals.tax_amount,
                delivery_fee=totals.delivery_fee,
                total_amount=totals.total_amount,
                special_instructions=request.special_instructions,
                is_paid=False,
                estimated_ready_time=now + timedelta(minutes=totals.estimated_time),
                created_at=now,
            )
            order.set_created_by(actor.user_id)
            self._db.add(order)
            self._db.flush()

            for line in lines:
                self._db.add(
                    OrderItem(
                        order_id=order.id,
                        item_type=line.reference.item_type,
                        **line.reference.foreign_keys(),
                        cooking_method_id=line.cooking_method_id,
                        quantity=line.quantity,
                        unit_price=line.unit_price,
                        total_price=line.total_price,
                        status=OrderItemStatus.PENDING,
                        special_instructions=line.special_instructions,
                        created_at=now,
                    )
                )

            if table is not None:
                table.status = TableStatus.OCCUPIED
                table.set_updated_by(actor.user_id)

            self._db.add(
                OrderStatusHistory(
                    order_id=order.id,
                    old_status=None,
                    new_status=OrderStatus.PENDING,
                    changed_by_staff_id=actor.staff_id,
                    notes="Order created",
                    changed_at=now,
                )
            )

        return self._load_order(order.id)

    def _is_order_number_unused(self, order_number: str) -> bool:
        return (
            self._db.scalar(select(Order.id).where(Order.order_number == order_number))
            is None
        )

    # =========================================================================
    # Status
    # =========================================================================

    def update_order_status(
        self,
        order_id: int,
        new_status: str,
        actor: StaffContext,
        notes: str | None = None,
    ) -> OrderDetailOutput:
        """
        Move an order to a new status.

        The order row is locked for the whole change so concurrent updates
        see each other's result.

        Raises:
            ValidationError: Unknown status value
            NotFoundError: Order missing
            InvalidTransitionError: Status change not allowed from current status
            ServiceUnavailableError: Transaction failed or timed out
        """
        start = time.perf_counter()

        try:
            target = parse_order_status(new_status)
            old_status, order_number = self._change_status(order_id, target, actor, notes)
        except Exception as e:
            logger.error(
                "Update order status failed",
                order_id=order_id,
                new_status=new_status,
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            raise

        if self._cache is not None:
            best_effort(
                "clear order cache",
                self._cache.delete_order,
                order_id,
                log_context={"order_id": order_id},
            )
        self._publish(
            OrderEvent(
                type=STATUS_UPDATED,
                order_id=order_id,
                data={
                    "order_number": order_number,
                    "old_status": old_status,
                    "new_status": target,
                    "updated_by": actor.user_id,
                },
            )
        )

        logger.info(
            "Order status updated",
            order_id=order_id,
            old_status=old_status,
            new_status=target,
            updated_by=actor.user_id,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return self.get_order_by_id(order_id)

    def _change_status(
        self,
        order_id: int,
        target: str,
        actor: StaffContext,
        notes: str | None,
    ) -> tuple[str, str]:
        """Locked transition plus history row. Returns (old status, order number)."""
        with atomic(
            self._db,
            "update order status",
            statement_timeout_ms=settings.order_tx_timeout_ms,
            lock_timeout_ms=settings.order_tx_lock_wait_ms,
        ):
            order = self._db.scalar(
                select(Order)
                .where(Order.id == order_id, Order.deleted_at.is_(None))
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            if order is None:
                raise OrderNotFoundError(order_id)

            old_status = order.status
            ensure_transition(old_status, target, order_id=order_id)

            now = self._clock()
            apply_transition(order, target, actor.staff_id, now)
            order.set_updated_by(actor.user_id)
            self._db.add(
                OrderStatusHistory(
                    order_id=order.id,
                    old_status=old_status,
                    new_status=target,
                    changed_by_staff_id=actor.staff_id,
                    notes=notes or f"Status changed to {target}",
                    changed_at=now,
                )
            )
            return old_status, order.order_number

    # =========================================================================
    # Read
    # =========================================================================

    def get_order_by_id(self, order_id: int) -> OrderDetailOutput:
        """
        Detailed order view with summaries and progress fields.

        Raises NotFoundError when the order does not exist.
        """
        order = self._load_order(order_id, detailed=True)
        return self._to_detail_output(order)

    def _load_order(self, order_id: int, detailed: bool = False) -> Order:
        options = [
            selectinload(Order.items).selectinload(OrderItem.item),
            selectinload(Order.items).selectinload(OrderItem.recipe),
            selectinload(Order.items).selectinload(OrderItem.meal),
            selectinload(Order.items).selectinload(OrderItem.cooking_method),
        ]
        if detailed:
            options += [
                selectinload(Order.status_history).selectinload(
                    OrderStatusHistory.changed_by_staff
                ),
                selectinload(Order.customer),
                selectinload(Order.company),
                selectinload(Order.table),
                selectinload(Order.cashier),
                selectinload(Order.kitchen_staff),
                selectinload(Order.delivery_staff),
            ]

        order = self._db.scalar(
            select(Order)
            .options(*options)
            .where(Order.id == order_id, Order.deleted_at.is_(None))
            .execution_options(populate_existing=True)
        )
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def _get_live(self, model, entity_id: int, entity_label: str):
        row = self._db.scalar(
            select(model).where(model.id == entity_id, model.deleted_at.is_(None))
        )
        if row is None:
            raise NotFoundError(entity_label, entity_id)
        return row

    def _publish(self, event: OrderEvent) -> None:
        if self._publisher is None:
            return
        best_effort(
            "publish order event",
            self._publisher.submit,
            event,
            log_context={"order_id": event.order_id, "event_type": event.type},
        )

    # =========================================================================
    # Output builders
    # =========================================================================

    def _to_item_output(self, item: OrderItem) -> OrderItemOutput:
        name = None
        if item.item is not None:
            name = item.item.item_name_en
        elif item.recipe is not None:
            name = item.recipe.recipe_name_en
        elif item.meal is not None:
            name = item.meal.meal_name_en

        return OrderItemOutput(
            id=item.id,
            item_type=item.item_type,
            item_id=item.item_id,
            recipe_id=item.recipe_id,
            meal_id=item.meal_id,
            cooking_method_id=item.cooking_method_id,
            name=name,
            cooking_method_name=(
                item.cooking_method.method_name_en if item.cooking_method else None
            ),
            quantity=item.quantity,
            unit_price=item.unit_price,
            total_price=item.total_price,
            status=item.status,
            special_instructions=item.special_instructions,
        )

    def _order_fields(self, order: Order) -> dict:
        return {
            "id": order.id,
            "order_number": order.order_number,
            "order_type": order.order_type,
            "customer_type": order.customer_type,
            "status": order.status,
            "customer_id": order.customer_id,
            "company_id": order.company_id,
            "table_id": order.table_id,
            "delivery_area_id": order.delivery_area_id,
            "cashier_id": order.cashier_id,
            "subtotal": order.subtotal,
            "tax_amount": order.tax_amount,
            "delivery_fee": order.delivery_fee,
            "total_amount": order.total_amount,
            "special_instructions": order.special_instructions,
            "is_paid": order.is_paid,
            "estimated_ready_time": order.estimated_ready_time,
            "created_at": order.created_at,
            "items": [
                self._to_item_output(item) for item in order.items if item.deleted_at is None
            ],
        }

    def _to_order_output(self, order: Order) -> OrderOutput:
        return OrderOutput(**self._order_fields(order))

    def _to_detail_output(self, order: Order) -> OrderDetailOutput:
        fields = self._order_fields(order)
        items = fields["items"]
        items_ready = sum(1 for item in items if item.status == OrderItemStatus.READY)

        history = sorted(order.status_history, key=lambda h: h.id, reverse=True)

        return OrderDetailOutput(
            **fields,
            kitchen_staff_id=order.kitchen_staff_id,
            hall_manager_id=order.hall_manager_id,
            delivery_staff_id=order.delivery_staff_id,
            confirmed_at=order.confirmed_at,
            kitchen_start_at=order.kitchen_start_at,
            ready_at=order.ready_at,
            served_at=order.served_at,
            delivered_at=order.delivered_at,
            customer=(
                PersonSummary(
                    id=order.customer.id,
                    first_name=order.customer.first_name,
                    last_name=order.customer.last_name,
                    phone=order.customer.phone,
                )
                if order.customer
                else None
            ),
            company=(
                CompanySummary(
                    id=order.company.id,
                    company_name=order.company.company_name,
                    contact_person=order.company.contact_person,
                    contact_phone=order.company.contact_phone,
                )
                if order.company
                else None
            ),
            table=(
                TableSummary(
                    id=order.table.id,
                    table_number=order.table.table_number,
                    table_type=order.table.table_type,
                    capacity=order.table.capacity,
                )
                if order.table
                else None
            ),
            cashier=_staff_summary(order.cashier),
            kitchen_staff=_staff_summary(order.kitchen_staff),
            delivery_staff=_staff_summary(order.delivery_staff),
            status_history=[
                OrderStatusHistoryOutput(
                    id=h.id,
                    old_status=h.old_status,
                    new_status=h.new_status,
                    changed_by_staff_id=h.changed_by_staff_id,
                    changed_by_name=_full_name(h.changed_by_staff),
                    notes=h.notes,
                    changed_at=h.changed_at,
                )
                for h in history
            ],
            items_ready=items_ready,
            total_items=len(items),
            is_fully_ready=bool(items) and items_ready == len(items),
            estimated_time_remaining=self._remaining_minutes(order),
        )

    def _remaining_minutes(self, order: Order) -> int | None:
        """Whole minutes until the estimated ready time, never negative."""
        if order.status in OrderStatus.NO_REMAINING_TIME or order.estimated_ready_time is None:
            return None
        seconds = (_as_utc(order.estimated_ready_time) - self._clock()).total_seconds()
        return max(0, math.ceil(seconds / 60))


def _full_name(staff: Staff | None) -> str | None:
    if staff is None:
        return None
    return " ".join(part for part in (staff.first_name, staff.last_name) if part)


def _staff_summary(staff: Staff | None) -> PersonSummary | None:
    if staff is None:
        return None
    return PersonSummary(id=staff.id, first_name=staff.first_name, last_name=staff.last_name)
