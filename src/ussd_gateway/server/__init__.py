"""USSD Gateway Server Module.

Provides the FastAPI application receiving aggregator callbacks.
"""

from ussd_gateway.server.api import app, create_app, extract_last_input

__all__ = ["app", "create_app", "extract_last_input"]
