"""Tests for the package-delivery business hooks"""

import pytest

from ussd_gateway.core.errors import BusinessHookError
from ussd_gateway.hooks.collaborators import ShipmentStatus
from ussd_gateway.hooks.delivery import (
    CREATE_SHIPMENT,
    GENERATE_SHIPMENT_SUMMARY,
    GET_PACKAGE_TRACKING_INFO,
    compute_quote,
    generate_shipment_summary,
    quote_from_answers,
)

ANSWERS = {
    "recipientName": "John Doe",
    "recipientPhone": "+237670000123",
    "recipientCity": "Douala",
    "packageDescription": "Books and clothes",
    "packageWeight": "5",
    "transportMode": "MOTORCYCLE",
    "deliveryType": "STANDARD",
    "paymentMethod": "CASH",
    "phoneNumber": "+237670000999",
}


class TestQuote:
    def test_quote_from_answers(self):
        assert quote_from_answers(ANSWERS).formatted_total == "3,500 XAF"

    def test_delivery_type_defaults_to_standard(self):
        answers = {k: v for k, v in ANSWERS.items() if k != "deliveryType"}
        assert quote_from_answers(answers).formatted_total == "3,500 XAF"

    def test_overweight_for_transport(self):
        with pytest.raises(ValueError, match="at most 20"):
            quote_from_answers({**ANSWERS, "transportMode": "BICYCLE", "packageWeight": "25"})

    def test_missing_weight(self):
        with pytest.raises(ValueError, match="Missing answer: packageWeight"):
            quote_from_answers({"transportMode": "CAR"})

    def test_compute_quote_includes_breakdown(self):
        result = compute_quote({**ANSWERS, "declaredValue": "100000"})
        assert result["quote"] == "5,500 XAF"
        assert "Insurance: 2,000 XAF" in result["quoteBreakdown"]


class TestShipmentSummary:
    def test_summary_lists_answers_and_price(self):
        # Act
        result = generate_shipment_summary(ANSWERS)

        # Assert
        summary = result["shipmentSummary"]
        assert summary.startswith("SUMMARY:\n\nRecipient: John Doe")
        assert "Weight: 5 kg" in summary
        assert "Transport: Moto" in summary
        assert "Delivery: Standard" in summary
        assert summary.endswith("Price: 3,500 XAF")
        assert result["quote"] == "3,500 XAF"

    def test_summary_without_quote(self):
        result = generate_shipment_summary({"recipientName": "John Doe"})
        assert "Price:" not in result["shipmentSummary"]
        assert "quote" not in result


class TestShipmentHooks:
    @pytest.mark.asyncio
    async def test_create_shipment_persists_record(self, hooks, shipments):
        # Act
        result = await hooks.execute(CREATE_SHIPMENT, ANSWERS)

        # Assert
        assert result == {"trackingId": "PKND-20250115-00001", "quote": "3,500 XAF"}
        record = await shipments.find_by_tracking_id("PKND-20250115-00001")
        assert record.recipient_name == "John Doe"
        assert record.destination == "Douala"
        assert record.status is ShipmentStatus.PENDING

    @pytest.mark.asyncio
    async def test_tracking_ids_increase(self, hooks):
        first = await hooks.execute(CREATE_SHIPMENT, ANSWERS)
        second = await hooks.execute(CREATE_SHIPMENT, ANSWERS)
        assert first["trackingId"].endswith("00001")
        assert second["trackingId"].endswith("00002")

    @pytest.mark.asyncio
    async def test_create_shipment_with_missing_answer_fails(self, hooks, shipments):
        answers = {k: v for k, v in ANSWERS.items() if k != "recipientCity"}
        with pytest.raises(BusinessHookError, match="recipientCity"):
            await hooks.execute(CREATE_SHIPMENT, answers)
        assert len(shipments) == 0

    @pytest.mark.asyncio
    async def test_tracking_info_known_and_unknown(self, hooks):
        # Arrange
        created = await hooks.execute(CREATE_SHIPMENT, ANSWERS)

        # Act
        found = await hooks.execute(
            GET_PACKAGE_TRACKING_INFO, {"trackingId": created["trackingId"].lower()}
        )
        missing = await hooks.execute(
            GET_PACKAGE_TRACKING_INFO, {"trackingId": "PKND-20250115-09999"}
        )

        # Assert
        assert found["trackingInfo"] == (
            "Tracking: PKND-20250115-00001\nStatus: Pending\nDestination: Douala"
        )
        assert missing["trackingInfo"] == "Tracking: PKND-20250115-09999\nStatus: Not found"

    def test_all_hooks_registered(self, hooks):
        for name in (CREATE_SHIPMENT, GENERATE_SHIPMENT_SUMMARY, GET_PACKAGE_TRACKING_INFO):
            assert name in hooks
