"""
Tests for calculate_order_totals.
"""

from dataclasses import dataclass
from decimal import Decimal

from pos_api.services.domain.catalog_lookup import CatalogType
from pos_api.services.domain.order_item_validator import LineReference, ValidatedOrderLine
from pos_api.services.domain.order_totals import calculate_order_totals


@dataclass
class Area:
    delivery_fee: Decimal | None
    estimated_delivery_time: int | None


def _line(unit_price: str, quantity: int, minutes: int) -> ValidatedOrderLine:
    price = Decimal(unit_price)
    return ValidatedOrderLine(
        reference=LineReference(CatalogType.ITEM, 1),
        quantity=quantity,
        unit_price=price,
        total_price=price * quantity,
        estimated_time=minutes,
        resolved_name="Line",
    )


class TestOrderTotals:
    """Totals scenarios."""

    def test_single_item_without_delivery(self):
        totals = calculate_order_totals([_line("20", 2, 10)])

        assert totals.subtotal == Decimal("40")
        assert totals.tax_amount == Decimal("6.00")
        assert totals.delivery_fee == Decimal("0")
        assert totals.total_amount == Decimal("46.00")

    def test_cooking_method_price(self):
        totals = calculate_order_totals([_line("25", 2, 30)])

        assert totals.subtotal == Decimal("50")
        assert totals.tax_amount == Decimal("7.50")
        assert totals.total_amount == Decimal("57.50")

    def test_delivery_adds_fee_and_travel_time(self):
        totals = calculate_order_totals(
            [_line("50", 2, 40)], delivery_area=Area(Decimal("15"), 30)
        )

        assert totals.subtotal == Decimal("100")
        assert totals.tax_amount == Decimal("15.00")
        assert totals.delivery_fee == Decimal("15")
        assert totals.total_amount == Decimal("130.00")
        assert totals.estimated_time == 70

    def test_estimate_has_fifteen_minute_floor(self):
        totals = calculate_order_totals([_line("5", 1, 5)])
        assert totals.estimated_time == 15

    def test_tax_rounds_half_up_to_cents(self):
        # 0.15 * 0.10 = 0.015 -> 0.02
        totals = calculate_order_totals([_line("0.10", 1, 5)])
        assert totals.tax_amount == Decimal("0.02")

    def test_delivery_area_without_estimate_adds_no_time(self):
        totals = calculate_order_totals(
            [_line("10", 1, 20)], delivery_area=Area(Decimal("5"), None)
        )
        assert totals.estimated_time == 20

    def test_delivery_area_without_estimate_uses_configured_default(self):
        totals = calculate_order_totals(
            [_line("10", 1, 20)],
            delivery_area=Area(Decimal("5"), None),
            default_delivery_minutes=30,
        )
        assert totals.estimated_time == 50

    def test_total_is_sum_of_parts(self):
        lines = [_line("12.35", 3, 15), _line("7.99", 1, 5)]
        totals = calculate_order_totals(lines, delivery_area=Area(Decimal("9.50"), 25))

        assert totals.subtotal == sum(line.total_price for line in lines)
        assert totals.total_amount == totals.subtotal + totals.tax_amount + totals.delivery_fee
