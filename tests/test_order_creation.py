"""
Tests for OrderService.create_order.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import func, select, update
from sqlalchemy.exc import OperationalError

from pos_api.models import Order, OrderItem, OrderStatusHistory, Table
from pos_api.services.domain import OrderNumberGenerator, OrderService
from shared.infrastructure.events import ORDER_CREATED
from shared.utils.exceptions import (
    ConflictError,
    InsufficientStockError,
    NotFoundError,
    ServiceUnavailableError,
    ValidationError,
)
from shared.utils.schemas import OrderLineInput, StaffContext
from tests.conftest import make_order_request


def _count(db_session, model) -> int:
    return db_session.scalar(select(func.count()).select_from(model))


class TestCreateOrder:
    """Happy path."""

    def test_creates_pending_order_with_lines_and_history(
        self, db_session, order_service, cashier, seed_item
    ):
        result = order_service.create_order(make_order_request(), cashier)

        assert result.status == "PENDING"
        assert result.is_paid is False
        assert result.order_number == "ORD-20250115-400000-001"
        assert result.subtotal == Decimal("40.00")
        assert result.tax_amount == Decimal("6.00")
        assert result.delivery_fee == Decimal("0")
        assert result.total_amount == Decimal("46.00")
        assert result.cashier_id == cashier.staff_id
        assert len(result.items) == 1
        assert result.items[0].item_type == "ITEM"
        assert result.items[0].item_id == seed_item.id
        assert result.items[0].recipe_id is None
        assert result.items[0].meal_id is None
        assert result.items[0].name == "Fresh Juice"
        assert result.items[0].status == "PENDING"

        history = db_session.scalars(select(OrderStatusHistory)).all()
        assert len(history) == 1
        assert history[0].old_status is None
        assert history[0].new_status == "PENDING"
        assert history[0].notes == "Order created"
        assert history[0].changed_by_staff_id == cashier.staff_id

    def test_estimated_ready_time_uses_line_minutes(
        self, db_session, publisher, order_cache, number_generator, cashier, seed_recipe
    ):
        now = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)
        service = OrderService(
            db_session, order_cache, publisher, number_generator, clock=lambda: now
        )
        request = make_order_request(
            items=[OrderLineInput(item_type="recipe", item_reference_id=1, quantity=2)]
        )

        result = service.create_order(request, cashier)

        ready = result.estimated_ready_time.replace(tzinfo=timezone.utc)
        assert (ready - now).total_seconds() == 30 * 60

    def test_mixed_lines_with_cooking_method(
        self, order_service, cashier, seed_item, seed_meal, seed_cooking_method
    ):
        request = make_order_request(
            items=[
                OrderLineInput(
                    item_type="item",
                    item_reference_id=1,
                    quantity=2,
                    cooking_method_id=seed_cooking_method.id,
                    special_instructions="No ice",
                ),
                OrderLineInput(item_type="meal", item_reference_id=1, quantity=1),
            ]
        )

        result = order_service.create_order(request, cashier)

        assert result.subtotal == Decimal("100.00")
        assert result.tax_amount == Decimal("15.00")
        assert result.total_amount == Decimal("115.00")
        assert result.items[0].unit_price == Decimal("25.00")
        assert result.items[0].cooking_method_name == "Grilled"
        assert result.items[0].special_instructions == "No ice"
        assert result.items[1].meal_id == seed_meal.id

    def test_dine_in_occupies_table(self, db_session, order_service, cashier, seed_item, seed_table):
        order_service.create_order(
            make_order_request(order_type="DINE_IN", table_id=seed_table.id), cashier
        )

        db_session.refresh(seed_table)
        assert seed_table.status == "OCCUPIED"

    def test_delivery_order_charges_fee(
        self, order_service, cashier, seed_meal, seed_delivery_area
    ):
        request = make_order_request(
            order_type="DELIVERY",
            delivery_area_id=seed_delivery_area.id,
            items=[OrderLineInput(item_type="meal", item_reference_id=1, quantity=2)],
        )

        result = order_service.create_order(request, cashier)

        assert result.subtotal == Decimal("100.00")
        assert result.tax_amount == Decimal("15.00")
        assert result.delivery_fee == Decimal("15.00")
        assert result.total_amount == Decimal("130.00")

    def test_company_order(self, order_service, cashier, seed_item, seed_company):
        result = order_service.create_order(
            make_order_request(customer_type="COMPANY", company_id=seed_company.id), cashier
        )
        assert result.company_id == seed_company.id
        assert result.customer_type == "COMPANY"

    def test_customer_without_staff_identity(self, order_service, seed_item, seed_customer):
        actor = StaffContext(user_id=500)
        result = order_service.create_order(
            make_order_request(customer_id=seed_customer.id), actor
        )

        assert result.cashier_id is None
        assert result.customer_id == seed_customer.id


class TestCreateOrderSideEffects:
    """Cache, events and idempotency after commit."""

    def test_caches_order_and_publishes_event(
        self, order_service, publisher, fake_redis, cashier, seed_item
    ):
        result = order_service.create_order(make_order_request(), cashier)

        assert f"order:{result.id}" in fake_redis.store
        assert fake_redis.ttls[f"order:{result.id}"] == 300
        assert publisher.types() == [ORDER_CREATED]
        event = publisher.events[0]
        assert event.order_id == result.id
        assert event.data["order_number"] == result.order_number
        assert event.data["order_type"] == "TAKEAWAY"

    def test_same_idempotency_key_returns_first_order(
        self, db_session, order_service, publisher, fake_redis, cashier, seed_item
    ):
        first = order_service.create_order(make_order_request(), cashier, idempotency_key="k-1")
        second = order_service.create_order(make_order_request(), cashier, idempotency_key="k-1")

        assert second.id == first.id
        assert second.order_number == first.order_number
        assert second.total_amount == first.total_amount
        assert _count(db_session, Order) == 1
        assert _count(db_session, OrderItem) == 1
        assert len(publisher.events) == 1
        assert fake_redis.ttls["idempotency:order:k-1"] == 3600

    def test_different_keys_create_different_orders(
        self, db_session, order_service, cashier, seed_item
    ):
        first = order_service.create_order(make_order_request(), cashier, idempotency_key="a")
        second = order_service.create_order(make_order_request(), cashier, idempotency_key="b")

        assert first.id != second.id
        assert first.order_number.endswith("-001")
        assert second.order_number.endswith("-002")

    def test_redis_outage_does_not_fail_creation(
        self, db_session, order_service, fake_redis, cashier, seed_item
    ):
        fake_redis.fail = True

        result = order_service.create_order(
            make_order_request(), cashier, idempotency_key="k-2"
        )

        assert result.status == "PENDING"
        assert _count(db_session, Order) == 1
        # Fallback number with a random suffix
        assert result.order_number.startswith("ORD-20250115-400000-")
        assert "order_counter:20250115" not in fake_redis.store

    def test_publisher_failure_does_not_fail_creation(
        self, db_session, order_service, publisher, cashier, seed_item
    ):
        publisher.fail = True

        result = order_service.create_order(make_order_request(), cashier)

        assert result.id is not None
        assert _count(db_session, Order) == 1


class TestCreateOrderValidation:
    """Order-level rejections happen before any write."""

    def test_empty_items(self, db_session, order_service, cashier):
        with pytest.raises(ValidationError) as exc:
            order_service.create_order(make_order_request(items=[]), cashier)
        assert "at least one item" in exc.value.detail
        assert _count(db_session, Order) == 0

    def test_company_type_requires_company(self, order_service, cashier, seed_item):
        with pytest.raises(ValidationError):
            order_service.create_order(make_order_request(customer_type="COMPANY"), cashier)

    def test_individual_type_forbids_company(self, order_service, cashier, seed_item, seed_company):
        with pytest.raises(ValidationError):
            order_service.create_order(make_order_request(company_id=seed_company.id), cashier)

    def test_company_type_forbids_customer(
        self, db_session, order_service, cashier, seed_item, seed_company, seed_customer
    ):
        request = make_order_request(
            customer_type="COMPANY", company_id=seed_company.id, customer_id=seed_customer.id
        )

        with pytest.raises(ValidationError) as exc:
            order_service.create_order(request, cashier)

        assert exc.value.detail == "Cannot specify customer for company orders"
        assert db_session.scalar(select(func.count(Order.id))) == 0

    def test_unknown_customer(self, order_service, cashier, seed_item):
        with pytest.raises(NotFoundError):
            order_service.create_order(make_order_request(customer_id=77), cashier)

    def test_inactive_customer(self, db_session, order_service, cashier, seed_item, seed_customer):
        seed_customer.is_active = False
        db_session.commit()

        with pytest.raises(ConflictError):
            order_service.create_order(make_order_request(customer_id=seed_customer.id), cashier)

    def test_soft_deleted_company(self, db_session, order_service, cashier, seed_item, seed_company):
        seed_company.soft_delete(user_id=101, user_email=None)
        db_session.commit()

        with pytest.raises(NotFoundError):
            order_service.create_order(
                make_order_request(customer_type="COMPANY", company_id=seed_company.id), cashier
            )

    def test_dine_in_requires_table(self, order_service, cashier, seed_item):
        with pytest.raises(ValidationError):
            order_service.create_order(make_order_request(order_type="DINE_IN"), cashier)

    def test_dine_in_rejects_occupied_table(
        self, db_session, order_service, cashier, seed_item, seed_table
    ):
        seed_table.status = "OCCUPIED"
        db_session.commit()

        with pytest.raises(ConflictError) as exc:
            order_service.create_order(
                make_order_request(order_type="DINE_IN", table_id=seed_table.id), cashier
            )
        assert "occupied" in exc.value.detail

    def test_delivery_requires_area(self, order_service, cashier, seed_item):
        with pytest.raises(ValidationError):
            order_service.create_order(make_order_request(order_type="DELIVERY"), cashier)

    def test_delivery_rejects_inactive_area(
        self, db_session, order_service, cashier, seed_item, seed_delivery_area
    ):
        seed_delivery_area.is_active = False
        db_session.commit()

        with pytest.raises(ConflictError):
            order_service.create_order(
                make_order_request(order_type="DELIVERY", delivery_area_id=seed_delivery_area.id),
                cashier,
            )

    def test_insufficient_stock_leaves_no_rows(
        self, db_session, order_service, publisher, fake_redis, cashier, seed_item, seed_table
    ):
        request = make_order_request(
            order_type="DINE_IN",
            table_id=seed_table.id,
            items=[OrderLineInput(item_type="item", item_reference_id=1, quantity=11)],
        )

        with pytest.raises(InsufficientStockError):
            order_service.create_order(request, cashier)

        assert _count(db_session, Order) == 0
        assert _count(db_session, OrderItem) == 0
        assert _count(db_session, OrderStatusHistory) == 0
        db_session.refresh(seed_table)
        assert seed_table.status == "AVAILABLE"
        assert publisher.events == []
        # No order number consumed either
        assert "order_counter:20250115" not in fake_redis.store

    def test_failing_line_aborts_whole_order(self, db_session, order_service, cashier, seed_item):
        request = make_order_request(
            items=[
                OrderLineInput(item_type="item", item_reference_id=1, quantity=1),
                OrderLineInput(item_type="recipe", item_reference_id=404, quantity=1),
            ]
        )

        with pytest.raises(NotFoundError):
            order_service.create_order(request, cashier)
        assert _count(db_session, Order) == 0


class TestCreateOrderTransaction:
    """Failures inside the write transaction."""

    def test_table_taken_after_validation_is_rejected(
        self, db_session, order_cache, publisher, fake_redis, cashier, seed_item, seed_table
    ):
        class RacingGenerator(OrderNumberGenerator):
            """Another terminal seats the table while the number is generated."""

            def generate(self, unique_check=None):
                db_session.execute(
                    update(Table).where(Table.id == seed_table.id).values(status="OCCUPIED")
                )
                return super().generate(unique_check)

        service = OrderService(db_session, order_cache, publisher, RacingGenerator(fake_redis))

        with pytest.raises(ConflictError) as exc:
            service.create_order(
                make_order_request(order_type="DINE_IN", table_id=seed_table.id), cashier
            )

        assert "no longer available" in exc.value.detail
        assert _count(db_session, Order) == 0

    def test_database_failure_is_retryable_and_rolls_back(
        self, db_session, order_service, publisher, cashier, seed_item, monkeypatch
    ):
        def failing_flush(*args, **kwargs):
            raise OperationalError("INSERT INTO pos_order", {}, Exception("lock timeout"))

        monkeypatch.setattr(db_session, "flush", failing_flush)

        with pytest.raises(ServiceUnavailableError) as exc:
            order_service.create_order(make_order_request(), cashier)

        monkeypatch.undo()
        assert exc.value.status_code == 503
        assert exc.value.retryable is True
        assert exc.value.headers["Retry-After"] == "1"
        assert "lock" not in exc.value.detail
        assert _count(db_session, Order) == 0
        assert publisher.events == []

    def test_duplicate_order_number_is_retryable(
        self, db_session, order_cache, publisher, cashier, seed_item
    ):
        class FixedGenerator:
            def generate(self, unique_check=None):
                return "ORD-20250115-400000-ABC"

        service = OrderService(db_session, order_cache, publisher, FixedGenerator())
        service.create_order(make_order_request(), cashier)

        with pytest.raises(ServiceUnavailableError):
            service.create_order(make_order_request(), cashier)

        assert _count(db_session, Order) == 1
