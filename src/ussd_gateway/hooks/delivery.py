"""Business hooks of the package-delivery dialog."""

import logging
from collections.abc import Mapping
from typing import Any

from ussd_gateway.hooks.collaborators import ShipmentRecord, ShipmentRepository
from ussd_gateway.hooks.pricing import (
    DeliveryType,
    PriceEstimate,
    TransportMode,
    estimate,
    to_decimal,
)
from ussd_gateway.hooks.registry import HookRegistry
from ussd_gateway.observability.logging import mask_phone

logger = logging.getLogger(__name__)

COMPUTE_QUOTE = "computeQuote"
GENERATE_SHIPMENT_SUMMARY = "generateShipmentSummary"
CREATE_SHIPMENT = "createShipment"
GET_PACKAGE_TRACKING_INFO = "getPackageTrackingInfo"

_TRUTHY = {"1", "true", "yes", "y", "oui"}


def quote_from_answers(values: Mapping[str, Any]) -> PriceEstimate:
    """Price the shipment described by the collected answers.

    Reads ``packageWeight``, ``transportMode`` and ``deliveryType``, plus the
    optional ``specialHandling`` and ``declaredValue``.

    Raises:
        ValueError: If a required answer is missing or not understood
    """
    weight = to_decimal(_required(values, "packageWeight"))
    transport = _enum_value(TransportMode, _required(values, "transportMode"))
    delivery = _enum_value(DeliveryType, values.get("deliveryType") or DeliveryType.STANDARD.value)
    special = str(values.get("specialHandling", "")).strip().lower() in _TRUTHY
    declared = values.get("declaredValue")
    declared_value = to_decimal(declared) if declared not in (None, "", "0") else None

    if weight > transport.max_weight_kg:
        raise ValueError(
            f"{transport.display_name} carries at most {transport.max_weight_kg} kg, got {weight}"
        )
    return estimate(weight, transport, delivery, special, declared_value)


def compute_quote(values: dict[str, Any]) -> dict[str, str]:
    quote = quote_from_answers(values)
    return {"quote": quote.formatted_total, "quoteBreakdown": quote.breakdown()}


def generate_shipment_summary(values: dict[str, Any]) -> dict[str, str]:
    """Confirmation text shown before the shipment is created."""
    lines = [
        "SUMMARY:",
        "",
        f"Recipient: {values.get('recipientName', '')}",
        f"Phone: {values.get('recipientPhone', '')}",
        f"City: {values.get('recipientCity', '')}",
        f"Package: {values.get('packageDescription', '')}",
        f"Weight: {values.get('packageWeight', '')} kg",
        f"Transport: {_display(TransportMode, values.get('transportMode'))}",
        f"Delivery: {_display(DeliveryType, values.get('deliveryType'))}",
        f"Payment: {values.get('paymentMethod', '')}",
    ]
    result = {}
    try:
        quote = quote_from_answers(values)
    except ValueError as e:
        logger.debug(f"No quote for summary: {e}")
    else:
        lines.append(f"Price: {quote.formatted_total}")
        result["quote"] = quote.formatted_total
    result["shipmentSummary"] = "\n".join(lines)
    return result


def register_delivery_hooks(registry: HookRegistry, shipments: ShipmentRepository) -> HookRegistry:
    """Register the delivery hooks on a registry.

    Args:
        registry: Registry to populate
        shipments: Repository used to persist and look up shipments

    Returns:
        The same registry, for chaining
    """

    async def create_shipment(values: dict[str, Any]) -> dict[str, str]:
        quote = quote_from_answers(values)
        tracking_id = await shipments.next_tracking_id()
        sender_phone = str(values.get("phoneNumber", ""))
        record = ShipmentRecord(
            tracking_id=tracking_id,
            sender_phone=sender_phone,
            sender_id=values.get("userId"),
            recipient_name=_required(values, "recipientName"),
            recipient_phone=_required(values, "recipientPhone"),
            destination=_required(values, "recipientCity"),
            description=str(values.get("packageDescription", "")),
            weight_kg=to_decimal(_required(values, "packageWeight")),
            transport_mode=_required(values, "transportMode"),
            delivery_type=str(values.get("deliveryType") or DeliveryType.STANDARD.value),
            payment_method=str(values.get("paymentMethod", "")),
            total_price=quote.total_price,
        )
        await shipments.save(record)
        logger.info(
            f"Shipment {tracking_id} created for {mask_phone(sender_phone)}",
            extra={"hook": CREATE_SHIPMENT},
        )
        return {"trackingId": tracking_id, "quote": quote.formatted_total}

    async def get_package_tracking_info(values: dict[str, Any]) -> dict[str, str]:
        tracking_id = _required(values, "trackingId").strip().upper()
        shipment = await shipments.find_by_tracking_id(tracking_id)
        if shipment is None:
            return {"trackingInfo": f"Tracking: {tracking_id}\nStatus: Not found"}
        info = (
            f"Tracking: {tracking_id}\n"
            f"Status: {shipment.status.display_name}\n"
            f"Destination: {shipment.destination}"
        )
        return {"trackingInfo": info}

    registry.register_handler(COMPUTE_QUOTE, compute_quote)
    registry.register_handler(GENERATE_SHIPMENT_SUMMARY, generate_shipment_summary)
    registry.register_handler(CREATE_SHIPMENT, create_shipment)
    registry.register_handler(GET_PACKAGE_TRACKING_INFO, get_package_tracking_info)
    return registry


def _required(values: Mapping[str, Any], key: str) -> str:
    value = values.get(key)
    if value is None or not str(value).strip():
        raise ValueError(f"Missing answer: {key}")
    return str(value)


def _enum_value(enum_type, raw: str):
    try:
        return enum_type(str(raw).strip().upper())
    except ValueError as e:
        raise ValueError(f"Unknown {enum_type.__name__}: {raw}") from e


def _display(enum_type, raw: Any) -> str:
    if raw is None:
        return ""
    try:
        return _enum_value(enum_type, raw).display_name
    except ValueError:
        return str(raw)
