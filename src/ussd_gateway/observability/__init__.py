"""Observability module for the USSD gateway."""

from ussd_gateway.observability.logging import ContextLogger, mask_phone, setup_logging

__all__ = ["ContextLogger", "mask_phone", "setup_logging"]
