"""Shipment pricing and tracking identifiers.

All amounts are XAF. Prices are computed with ``Decimal`` and rounded half-up
to two places.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum

logger = logging.getLogger(__name__)

BASE_RATE_PER_KG = Decimal("500")
BASE_DISTANCE_RATE = Decimal("1000")
SPECIAL_HANDLING_FEE = Decimal("1000")
INSURANCE_RATE = Decimal("0.02")
MIN_INSURANCE_FEE = Decimal("500")

_CENTS = Decimal("0.01")


class TransportMode(str, Enum):
    TRUCK = "TRUCK"
    TRICYCLE = "TRICYCLE"
    MOTORCYCLE = "MOTORCYCLE"
    BICYCLE = "BICYCLE"
    CAR = "CAR"

    @property
    def display_name(self) -> str:
        return _TRANSPORT_DISPLAY[self]

    @property
    def max_weight_kg(self) -> Decimal:
        return _TRANSPORT_MAX_WEIGHT[self]

    @property
    def multiplier(self) -> Decimal:
        return _TRANSPORT_MULTIPLIER[self]


_TRANSPORT_DISPLAY = {
    TransportMode.TRUCK: "Camion",
    TransportMode.TRICYCLE: "Tricycle",
    TransportMode.MOTORCYCLE: "Moto",
    TransportMode.BICYCLE: "Vélo",
    TransportMode.CAR: "Voiture",
}
_TRANSPORT_MAX_WEIGHT = {
    TransportMode.TRUCK: Decimal("500"),
    TransportMode.TRICYCLE: Decimal("100"),
    TransportMode.MOTORCYCLE: Decimal("50"),
    TransportMode.BICYCLE: Decimal("20"),
    TransportMode.CAR: Decimal("150"),
}
_TRANSPORT_MULTIPLIER = {
    TransportMode.BICYCLE: Decimal("0.8"),
    TransportMode.MOTORCYCLE: Decimal("1.0"),
    TransportMode.TRICYCLE: Decimal("1.2"),
    TransportMode.CAR: Decimal("1.5"),
    TransportMode.TRUCK: Decimal("2.0"),
}


class DeliveryType(str, Enum):
    STANDARD = "STANDARD"
    EXPRESS_48H = "EXPRESS_48H"
    EXPRESS_24H = "EXPRESS_24H"

    @property
    def display_name(self) -> str:
        return _DELIVERY_DETAILS[self][0]

    @property
    def delivery_days(self) -> int:
        return _DELIVERY_DETAILS[self][1]

    @property
    def multiplier(self) -> Decimal:
        return _DELIVERY_DETAILS[self][2]


_DELIVERY_DETAILS = {
    DeliveryType.STANDARD: ("Standard", 3, Decimal("1.0")),
    DeliveryType.EXPRESS_48H: ("Express 48h", 2, Decimal("1.5")),
    DeliveryType.EXPRESS_24H: ("Express 24h", 1, Decimal("2.0")),
}


@dataclass(frozen=True)
class PriceEstimate:
    base_price: Decimal
    insurance_cost: Decimal
    total_price: Decimal

    @property
    def formatted_total(self) -> str:
        return format_xaf(self.total_price)

    def breakdown(self) -> str:
        lines = [f"Base price: {format_xaf(self.base_price)}"]
        if self.insurance_cost > 0:
            lines.append(f"Insurance: {format_xaf(self.insurance_cost)}")
        lines.append(f"TOTAL: {format_xaf(self.total_price)}")
        return "\n".join(lines)


def format_xaf(amount: Decimal) -> str:
    """Format an amount with thousands separators and no decimals, e.g. ``4,500 XAF``."""
    return f"{amount.quantize(Decimal('1'), rounding=ROUND_HALF_UP):,} XAF"


def to_decimal(value: str | float | Decimal) -> Decimal:
    """Parse a user-supplied amount.

    Raises:
        ValueError: If the value is not a finite number
    """
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"Not a number: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"Not a number: {value!r}")
    return result


def calculate_price(
    weight: Decimal,
    transport_mode: TransportMode,
    delivery_type: DeliveryType,
    special_handling: bool = False,
) -> Decimal:
    """Delivery price before insurance.

    ``(weight * 500 + 1000) * transport multiplier * delivery multiplier``,
    plus 1000 for special handling.
    """
    base = weight * BASE_RATE_PER_KG + BASE_DISTANCE_RATE
    price = base * transport_mode.multiplier * delivery_type.multiplier
    if special_handling:
        price += SPECIAL_HANDLING_FEE
    return price.quantize(_CENTS, rounding=ROUND_HALF_UP)


def calculate_insurance(declared_value: Decimal | None) -> Decimal:
    """2 % of the declared value, never below 500. Zero when nothing is declared."""
    if declared_value is None or declared_value <= 0:
        return Decimal("0")
    cost = max(declared_value * INSURANCE_RATE, MIN_INSURANCE_FEE)
    return cost.quantize(_CENTS, rounding=ROUND_HALF_UP)


def estimate(
    weight: Decimal,
    transport_mode: TransportMode,
    delivery_type: DeliveryType,
    special_handling: bool = False,
    declared_value: Decimal | None = None,
) -> PriceEstimate:
    base_price = calculate_price(weight, transport_mode, delivery_type, special_handling)
    insurance = calculate_insurance(declared_value)
    total = base_price + insurance
    logger.debug(f"Estimated {total} XAF for {weight} kg by {transport_mode.value}")
    return PriceEstimate(base_price=base_price, insurance_cost=insurance, total_price=total)


def generate_tracking_id(sequence: int, day: date | None = None) -> str:
    """Tracking id in the ``PKND-YYYYMMDD-NNNNN`` format."""
    day = day or date.today()
    return f"PKND-{day:%Y%m%d}-{sequence:05d}"
