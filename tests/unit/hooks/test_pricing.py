"""Tests for pricing and tracking ids"""

from datetime import date
from decimal import Decimal

import pytest

from ussd_gateway.hooks.pricing import (
    DeliveryType,
    TransportMode,
    calculate_insurance,
    calculate_price,
    estimate,
    format_xaf,
    generate_tracking_id,
    to_decimal,
)


class TestCalculatePrice:
    def test_standard_motorcycle(self):
        """(5 kg * 500 + 1000) * 1.0 * 1.0"""
        price = calculate_price(Decimal("5"), TransportMode.MOTORCYCLE, DeliveryType.STANDARD)
        assert price == Decimal("3500.00")

    def test_multipliers_compound(self):
        price = calculate_price(Decimal("10"), TransportMode.TRUCK, DeliveryType.EXPRESS_24H)
        assert price == Decimal("24000.00")

    def test_bicycle_discount_and_rounding(self):
        price = calculate_price(Decimal("2.25"), TransportMode.BICYCLE, DeliveryType.EXPRESS_48H)
        # (1125 + 1000) * 0.8 * 1.5
        assert price == Decimal("2550.00")

    def test_special_handling_fee(self):
        price = calculate_price(
            Decimal("5"), TransportMode.MOTORCYCLE, DeliveryType.STANDARD, special_handling=True
        )
        assert price == Decimal("4500.00")


class TestInsurance:
    @pytest.mark.parametrize(
        ("declared", "expected"),
        [
            (None, Decimal("0")),
            (Decimal("0"), Decimal("0")),
            (Decimal("10000"), Decimal("500.00")),
            (Decimal("100000"), Decimal("2000.00")),
        ],
    )
    def test_two_percent_with_minimum(self, declared, expected):
        assert calculate_insurance(declared) == expected


def test_estimate_totals_and_breakdown():
    # Act
    quote = estimate(
        Decimal("5"),
        TransportMode.MOTORCYCLE,
        DeliveryType.STANDARD,
        declared_value=Decimal("100000"),
    )

    # Assert
    assert quote.total_price == Decimal("5500.00")
    assert quote.formatted_total == "5,500 XAF"
    assert quote.breakdown() == (
        "Base price: 3,500 XAF\nInsurance: 2,000 XAF\nTOTAL: 5,500 XAF"
    )


def test_format_xaf():
    assert format_xaf(Decimal("1234567.50")) == "1,234,568 XAF"
    assert format_xaf(Decimal("500")) == "500 XAF"


def test_to_decimal_rejects_garbage():
    with pytest.raises(ValueError, match="Not a number"):
        to_decimal("twelve")
    with pytest.raises(ValueError):
        to_decimal("NaN")


def test_transport_capacity():
    assert TransportMode.BICYCLE.max_weight_kg == Decimal("20")
    assert TransportMode.TRUCK.max_weight_kg == Decimal("500")


def test_tracking_id_format():
    assert generate_tracking_id(42, date(2025, 1, 15)) == "PKND-20250115-00042"
