"""Configuration module for the USSD gateway."""

from ussd_gateway.config.loader import ConfigLoader
from ussd_gateway.config.models import (
    AutomatonConfig,
    MenuOptionConfig,
    StateConfig,
    TransitionConfig,
)
from ussd_gateway.config.settings import GatewaySettings, PersistenceConfig

__all__ = [
    "AutomatonConfig",
    "ConfigLoader",
    "GatewaySettings",
    "MenuOptionConfig",
    "PersistenceConfig",
    "StateConfig",
    "TransitionConfig",
]
