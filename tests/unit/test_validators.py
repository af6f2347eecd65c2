"""Tests for ValidatorRegistry and the built-in validators"""

import pytest

from ussd_gateway.validation import ValidationResult, ValidatorRegistry


def test_builtin_tags_are_registered():
    """Importing the package registers the delivery validators"""
    for tag in ("NAME", "PHONE", "CITY", "WEIGHT", "DESCRIPTION", "TRACKING_ID", "PASSWORD"):
        assert tag in ValidatorRegistry.list_validators()


def test_tags_are_case_insensitive():
    assert ValidatorRegistry.validate("name", "John Doe").ok
    assert not ValidatorRegistry.validate("nAmE", "1234").ok


def test_missing_or_unknown_tag_accepts():
    """No tag, or a tag nobody registered, accepts any input"""
    assert ValidatorRegistry.validate(None, "x").ok
    assert ValidatorRegistry.validate("", "x").ok
    assert ValidatorRegistry.validate("SHOE_SIZE", "x").ok


def test_register_custom_validator():
    """Test registering a validator with the decorator"""

    # Arrange
    @ValidatorRegistry.register("TEST_EVEN")
    def validate_even(value: str) -> ValidationResult:
        if int(value) % 2:
            return ValidationResult.failed("Must be even")
        return ValidationResult.success()

    # Act & Assert
    assert ValidatorRegistry.validate("TEST_EVEN", "4").ok
    assert ValidatorRegistry.validate("TEST_EVEN", "3").reason == "Must be even"


@pytest.mark.parametrize(
    ("tag", "value"),
    [
        ("NAME", "John Doe"),
        ("NAME", "Jean-Pierre O'Neil"),
        ("PHONE", "+237 670-000-123"),
        ("PHONE", "670000123"),
        ("EMAIL", "a.b@example.cm"),
        ("EMAIL_OPTIONAL", "0"),
        ("CITY", "Douala"),
        ("ADDRESS", "12 Rue de la Joie, Akwa"),
        ("WEIGHT", "0.5"),
        ("WEIGHT", "500"),
        ("WEIGHT", "12.25"),
        ("PASSWORD", "Secr3t!pass"),
        ("DESCRIPTION", "Books and clothes"),
        ("DECLARED_VALUE", "25000"),
        ("TRACKING_ID", "PKND-20250115-00042"),
        ("TRACKING_ID", "pknd-20250115-00042"),
    ],
)
def test_valid_inputs(tag, value):
    result = ValidatorRegistry.validate(tag, value)
    assert result.ok, result.reason


@pytest.mark.parametrize(
    ("tag", "value", "reason"),
    [
        ("NAME", "", "Name cannot be empty"),
        ("NAME", "1234", "Invalid name format"),
        ("NAME", "A", "Invalid name format"),
        ("PHONE", "12ab", "Invalid phone number format"),
        ("EMAIL", "not-an-email", "Invalid email format"),
        ("EMAIL_OPTIONAL", "nope", "Invalid email format"),
        ("CITY", "  ", "City cannot be empty"),
        ("ADDRESS", "#!", "Invalid address format"),
        ("WEIGHT", "abc", "Invalid weight format"),
        ("WEIGHT", "1.234", "Invalid weight format"),
        ("WEIGHT", "0.4", "Weight must be between 0.5 and 500.0"),
        ("WEIGHT", "501", "Weight must be between 0.5 and 500.0"),
        ("PASSWORD", "short", "at least 8 characters"),
        ("PASSWORD", "alllowercase1!", "uppercase"),
        ("PASSWORD", "NoDigits!!", "digit"),
        ("PASSWORD", "NoSymbol123", "special character"),
        ("DESCRIPTION", "abc", "at least 5 characters"),
        ("DECLARED_VALUE", "-5", "greater than 0"),
        ("TRACKING_ID", "PKND-2025-1", "Invalid tracking number"),
    ],
)
def test_invalid_inputs(tag, value, reason):
    result = ValidatorRegistry.validate(tag, value)
    assert not result.ok
    assert reason in result.reason
