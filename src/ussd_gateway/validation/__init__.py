"""Input validation: tag registry and built-in validators."""

# Importing the module registers the built-in validators.
from ussd_gateway.validation import validators
from ussd_gateway.validation.registry import ValidationResult, ValidatorRegistry

__all__ = ["ValidationResult", "ValidatorRegistry", "validators"]
