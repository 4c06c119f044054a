"""
Order totals.

Pure arithmetic over validated lines: no database, no clock.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Protocol

from shared.config.settings import settings

from .order_item_validator import ValidatedOrderLine

CENT = Decimal("0.01")


class DeliveryPricing(Protocol):
    """What totals need from a delivery area (DeliveryArea rows qualify)."""

    delivery_fee: Decimal | None
    estimated_delivery_time: int | None


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    tax_amount: Decimal
    delivery_fee: Decimal
    total_amount: Decimal
    estimated_time: int


def calculate_order_totals(
    lines: Iterable[ValidatedOrderLine],
    delivery_area: DeliveryPricing | None = None,
    vat_rate: Decimal | float | str | None = None,
    min_estimated_minutes: int | None = None,
    default_delivery_minutes: int | None = None,
) -> OrderTotals:
    """
    Sum line prices and preparation times into order totals.

    Tax is VAT on the subtotal rounded half-up to cents. The estimate never
    drops below the configured minimum. A delivery area with no configured
    delivery time adds default_delivery_minutes.
    """
    rate = Decimal(str(vat_rate if vat_rate is not None else settings.vat_rate))
    floor_minutes = (
        min_estimated_minutes
        if min_estimated_minutes is not None
        else settings.order_min_estimated_minutes
    )
    fallback_delivery = (
        default_delivery_minutes
        if default_delivery_minutes is not None
        else settings.order_default_delivery_minutes
    )

    subtotal = Decimal("0")
    prep_minutes = 0
    for line in lines:
        subtotal += line.total_price
        prep_minutes += line.estimated_time

    tax_amount = (subtotal * rate).quantize(CENT, rounding=ROUND_HALF_UP)

    delivery_fee = Decimal("0")
    delivery_minutes = 0
    if delivery_area is not None:
        delivery_fee = Decimal(delivery_area.delivery_fee or 0)
        delivery_minutes = (
            delivery_area.estimated_delivery_time
            if delivery_area.estimated_delivery_time is not None
            else fallback_delivery
        )

    return OrderTotals(
        subtotal=subtotal,
        tax_amount=tax_amount,
        delivery_fee=delivery_fee,
        total_amount=subtotal + tax_amount + delivery_fee,
        estimated_time=max(prep_minutes + delivery_minutes, floor_minutes),
    )
