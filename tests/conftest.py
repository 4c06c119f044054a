"""
Pytest configuration and fixtures for order lifecycle tests.
"""

import itertools
from datetime import datetime, timezone
from decimal import Decimal

import pytest
import redis
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pos_api.main import app
from pos_api.core.dependencies import (
    get_event_publisher,
    get_order_cache,
    get_order_number_generator,
)
from pos_api.models import (
    Base,
    CompanyCustomer,
    CookingMethod,
    Customer,
    DeliveryArea,
    Item,
    Meal,
    Recipe,
    Staff,
    Table,
)
from pos_api.services.domain import OrderNumberGenerator, OrderService
from shared.infrastructure.cache import OrderCache
from shared.infrastructure.db import get_db
from shared.utils.schemas import CreateOrderRequest, OrderLineInput, StaffContext


# ID counter for rows created inside tests
_id_counter = itertools.count(1000)


def next_id() -> int:
    """Get next unique ID for test entities."""
    return next(_id_counter)


# Fixed instant used by order-number and timing tests
FROZEN_NOW = datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# =============================================================================
# Test doubles for Redis-backed collaborators
# =============================================================================


class FakeRedis:
    """
    In-memory stand-in for the redis.Redis calls the order core makes.

    Set fail=True to make every call raise redis.ConnectionError.
    """

    def __init__(self):
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.published: list[tuple[str, str]] = []
        self.expire_calls: list[tuple[str, int]] = []
        self.fail = False

    def _check(self):
        if self.fail:
            raise redis.ConnectionError("Redis unavailable")

    def get(self, name):
        self._check()
        return self.store.get(name)

    def setex(self, name, time, value):
        self._check()
        self.store[name] = value
        self.ttls[name] = time
        return True

    def delete(self, *names):
        self._check()
        removed = 0
        for name in names:
            if self.store.pop(name, None) is not None:
                removed += 1
            self.ttls.pop(name, None)
        return removed

    def incr(self, name):
        self._check()
        value = int(self.store.get(name, 0)) + 1
        self.store[name] = str(value)
        return value

    def expire(self, name, time):
        self._check()
        self.expire_calls.append((name, time))
        self.ttls[name] = time
        return True

    def publish(self, channel, message):
        self._check()
        self.published.append((channel, message))
        return 1


class RecordingPublisher:
    """Collects submitted order events instead of publishing them."""

    def __init__(self):
        self.events = []
        self.fail = False

    def submit(self, event):
        if self.fail:
            raise RuntimeError("publisher down")
        self.events.append(event)
        return None

    def types(self) -> list[str]:
        return [event.type for event in self.events]


# =============================================================================
# Database and service fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def order_cache(fake_redis):
    return OrderCache(fake_redis)


@pytest.fixture
def number_generator(fake_redis):
    return OrderNumberGenerator(fake_redis, clock=lambda: FROZEN_NOW)


@pytest.fixture
def order_service(db_session, order_cache, publisher, number_generator):
    return OrderService(db_session, order_cache, publisher, number_generator)


@pytest.fixture(scope="function")
def client(db_session, order_cache, publisher, number_generator):
    """
    Create a test client with database and Redis collaborators overridden.

    The lifespan is not entered, so no real database or Redis is touched.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_order_cache] = lambda: order_cache
    app.dependency_overrides[get_event_publisher] = lambda: publisher
    app.dependency_overrides[get_order_number_generator] = lambda: number_generator

    yield TestClient(app)

    app.dependency_overrides.clear()


# =============================================================================
# Seed data
# =============================================================================


@pytest.fixture
def seed_cashier(db_session):
    """Create a cashier staff member."""
    staff = Staff(id=1, user_id=101, first_name="Sara", last_name="Ali", role="CASHIER")
    db_session.add(staff)
    db_session.commit()
    return staff


@pytest.fixture
def seed_kitchen_staff(db_session):
    """Create a kitchen staff member."""
    staff = Staff(id=2, user_id=102, first_name="Omar", last_name="Hassan", role="KITCHEN")
    db_session.add(staff)
    db_session.commit()
    return staff


@pytest.fixture
def seed_hall_manager(db_session):
    """Create a hall manager."""
    staff = Staff(id=3, user_id=103, first_name="Lina", last_name="Saad", role="HALL_MANAGER")
    db_session.add(staff)
    db_session.commit()
    return staff


@pytest.fixture
def seed_delivery_staff(db_session):
    """Create a delivery driver."""
    staff = Staff(id=4, user_id=104, first_name="Khaled", last_name=None, role="DELIVERY")
    db_session.add(staff)
    db_session.commit()
    return staff


@pytest.fixture
def cashier(seed_cashier):
    return StaffContext(user_id=seed_cashier.user_id, staff_id=seed_cashier.id)


@pytest.fixture
def kitchen(seed_kitchen_staff):
    return StaffContext(
        user_id=seed_kitchen_staff.user_id, staff_id=seed_kitchen_staff.id
    )


@pytest.fixture
def hall_manager(seed_hall_manager):
    return StaffContext(
        user_id=seed_hall_manager.user_id, staff_id=seed_hall_manager.id
    )


@pytest.fixture
def driver(seed_delivery_staff):
    return StaffContext(
        user_id=seed_delivery_staff.user_id, staff_id=seed_delivery_staff.id
    )


@pytest.fixture
def seed_customer(db_session):
    """Create an active individual customer."""
    customer = Customer(id=1, first_name="Noura", last_name="Fahad", phone="+966500000001")
    db_session.add(customer)
    db_session.commit()
    return customer


@pytest.fixture
def seed_company(db_session):
    """Create an active company customer."""
    company = CompanyCustomer(
        id=1,
        company_name="Acme Trading",
        contact_person="Faisal",
        contact_phone="+966500000002",
        vat_number="300000000000003",
    )
    db_session.add(company)
    db_session.commit()
    return company


@pytest.fixture
def seed_table(db_session):
    """Create an available table."""
    table = Table(id=1, table_number="T1", table_type="INDOOR", capacity=4, status="AVAILABLE")
    db_session.add(table)
    db_session.commit()
    return table


@pytest.fixture
def seed_delivery_area(db_session):
    """Create an active delivery area (fee 15, 30 minutes)."""
    area = DeliveryArea(
        id=1, area_name="Olaya", delivery_fee=Decimal("15.00"), estimated_delivery_time=30
    )
    db_session.add(area)
    db_session.commit()
    return area


@pytest.fixture
def seed_item(db_session):
    """Create a stock-tracked item priced 20 with 10 in stock."""
    item = Item(
        id=1,
        item_name_en="Fresh Juice",
        item_name_ar="عصير طازج",
        selling_price=Decimal("20.00"),
        is_available=True,
        current_stock=Decimal("10"),
    )
    db_session.add(item)
    db_session.commit()
    return item


@pytest.fixture
def seed_recipe(db_session):
    """Create a recipe priced 30 with no preparation time configured."""
    recipe = Recipe(
        id=1,
        recipe_name_en="Chicken Kabsa",
        recipe_name_ar="كبسة دجاج",
        selling_price=Decimal("30.00"),
        is_available=True,
        preparation_time=None,
    )
    db_session.add(recipe)
    db_session.commit()
    return recipe


@pytest.fixture
def seed_meal(db_session):
    """Create a meal priced 50 with a 25 minute preparation time."""
    meal = Meal(
        id=1,
        meal_name_en="Family Platter",
        meal_name_ar="صحن عائلي",
        selling_price=Decimal("50.00"),
        is_available=True,
        preparation_time=25,
    )
    db_session.add(meal)
    db_session.commit()
    return meal


@pytest.fixture
def seed_cooking_method(db_session):
    """Create a grill cooking method costing 5 extra and 10 minutes."""
    method = CookingMethod(
        id=1,
        method_name_en="Grilled",
        method_name_ar="مشوي",
        additional_cost=Decimal("5.00"),
        is_available=True,
        cooking_time=10,
    )
    db_session.add(method)
    db_session.commit()
    return method


def make_order_request(**overrides) -> CreateOrderRequest:
    """A TAKEAWAY order for two of item 1 unless overridden."""
    data = {
        "order_type": "TAKEAWAY",
        "items": [OrderLineInput(item_type="item", item_reference_id=1, quantity=2)],
    }
    data.update(overrides)
    return CreateOrderRequest(**data)
