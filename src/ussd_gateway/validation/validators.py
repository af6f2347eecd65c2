"""Built-in validators for the delivery dialog"""

import re

from ussd_gateway.validation.registry import ValidationResult, ValidatorRegistry

_NAME_PATTERN = re.compile(r"[a-zA-Z\s'-]{2,50}")
_PHONE_PATTERN = re.compile(r"[+]?[0-9]{7,15}")
_PHONE_NOISE = re.compile(r"[\s\-()]")
_EMAIL_PATTERN = re.compile(r"[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
_ADDRESS_PATTERN = re.compile(r"[a-zA-Z0-9\s,.'\-]{5,100}")
_DECIMAL_PATTERN = re.compile(r"[0-9]+(\.[0-9]{1,2})?")
_SIGNED_DECIMAL_PATTERN = re.compile(r"-?[0-9]+(\.[0-9]{1,2})?")
_TRACKING_ID_PATTERN = re.compile(r"PKND-\d{8}-\d{5}")
_PASSWORD_SYMBOLS = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>?]")

MIN_WEIGHT = 0.5
MAX_WEIGHT = 500.0
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 50
DESCRIPTION_MIN_LENGTH = 5
SKIP_OPTIONAL = "0"


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


@ValidatorRegistry.register("NAME")
def validate_name(value: str) -> ValidationResult:
    """Person name: letters, spaces, hyphens and apostrophes, 2-50 chars."""
    if _blank(value):
        return ValidationResult.failed("Name cannot be empty")
    if not _NAME_PATTERN.fullmatch(value.strip()):
        return ValidationResult.failed(
            "Invalid name format. Only letters, spaces, hyphens and apostrophes allowed"
        )
    return ValidationResult.success()


@ValidatorRegistry.register("PHONE")
def validate_phone(value: str) -> ValidationResult:
    """
    Validate a phone number.

    Spaces, hyphens and parentheses are ignored; what remains must be 7-15
    digits with an optional leading ``+``.

    Args:
        value: Phone number as typed

    Returns:
        ValidationResult
    """
    if _blank(value):
        return ValidationResult.failed("Phone number cannot be empty")
    if not _PHONE_PATTERN.fullmatch(_PHONE_NOISE.sub("", value)):
        return ValidationResult.failed("Invalid phone number format")
    return ValidationResult.success()


@ValidatorRegistry.register("EMAIL")
def validate_email(value: str) -> ValidationResult:
    if _blank(value):
        return ValidationResult.failed("Email cannot be empty")
    if not _EMAIL_PATTERN.fullmatch(value.strip()):
        return ValidationResult.failed("Invalid email format")
    return ValidationResult.success()


@ValidatorRegistry.register("EMAIL_OPTIONAL")
def validate_optional_email(value: str) -> ValidationResult:
    """Email address, or ``0`` to skip."""
    if value is not None and value.strip() == SKIP_OPTIONAL:
        return ValidationResult.success()
    return validate_email(value)


@ValidatorRegistry.register("CITY")
def validate_city(value: str) -> ValidationResult:
    if _blank(value):
        return ValidationResult.failed("City cannot be empty")
    if not _NAME_PATTERN.fullmatch(value.strip()):
        return ValidationResult.failed(
            "Invalid city format. Only letters, spaces, hyphens and apostrophes allowed"
        )
    return ValidationResult.success()


@ValidatorRegistry.register("ADDRESS")
def validate_address(value: str) -> ValidationResult:
    if _blank(value):
        return ValidationResult.failed("Address cannot be empty")
    if not _ADDRESS_PATTERN.fullmatch(value.strip()):
        return ValidationResult.failed("Invalid address format. Please enter a valid address")
    return ValidationResult.success()


@ValidatorRegistry.register("WEIGHT")
def validate_weight(value: str) -> ValidationResult:
    """
    Validate a package weight in kilograms.

    Args:
        value: Weight with at most two decimals

    Returns:
        ValidationResult, failed outside [0.5, 500.0]
    """
    if _blank(value):
        return ValidationResult.failed("Weight cannot be empty")
    text = value.strip()
    if not _DECIMAL_PATTERN.fullmatch(text):
        return ValidationResult.failed(
            "Invalid weight format. Enter a number with up to 2 decimal places"
        )
    weight = float(text)
    if weight < MIN_WEIGHT or weight > MAX_WEIGHT:
        return ValidationResult.failed(f"Weight must be between {MIN_WEIGHT} and {MAX_WEIGHT}")
    return ValidationResult.success()


@ValidatorRegistry.register("PASSWORD")
def validate_password(value: str) -> ValidationResult:
    """Password strength checks, reported one rule at a time."""
    if not value:
        return ValidationResult.failed("Password cannot be empty")
    if len(value) < PASSWORD_MIN_LENGTH:
        return ValidationResult.failed(
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
        )
    if len(value) > PASSWORD_MAX_LENGTH:
        return ValidationResult.failed(
            f"Password must not exceed {PASSWORD_MAX_LENGTH} characters"
        )
    if not re.search(r"[A-Z]", value):
        return ValidationResult.failed("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", value):
        return ValidationResult.failed("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", value):
        return ValidationResult.failed("Password must contain at least one digit")
    if not _PASSWORD_SYMBOLS.search(value):
        return ValidationResult.failed("Password must contain at least one special character")
    return ValidationResult.success()


@ValidatorRegistry.register("DESCRIPTION")
def validate_description(value: str) -> ValidationResult:
    if _blank(value):
        return ValidationResult.failed("Description cannot be empty")
    if len(value.strip()) < DESCRIPTION_MIN_LENGTH:
        return ValidationResult.failed(
            f"Description must be at least {DESCRIPTION_MIN_LENGTH} characters long"
        )
    return ValidationResult.success()


@ValidatorRegistry.register("DECLARED_VALUE")
def validate_declared_value(value: str) -> ValidationResult:
    if _blank(value):
        return ValidationResult.failed("Value cannot be empty")
    text = value.strip()
    if not _SIGNED_DECIMAL_PATTERN.fullmatch(text):
        return ValidationResult.failed(
            "Invalid value format. Enter a number with up to 2 decimal places"
        )
    if float(text) <= 0:
        return ValidationResult.failed("Value must be greater than 0")
    return ValidationResult.success()


@ValidatorRegistry.register("TRACKING_ID")
def validate_tracking_id(value: str) -> ValidationResult:
    """Tracking ids look like ``PKND-20240115-00042``."""
    if _blank(value):
        return ValidationResult.failed("Tracking number cannot be empty")
    if not _TRACKING_ID_PATTERN.fullmatch(value.strip().upper()):
        return ValidationResult.failed("Invalid tracking number. Format: PKND-YYYYMMDD-NNNNN")
    return ValidationResult.success()
