"""Tests for HookRegistry"""

import pytest

from ussd_gateway.core.errors import BusinessHookError
from ussd_gateway.hooks.registry import HookRegistry


@pytest.mark.asyncio
async def test_sync_hook_executes():
    """Test a sync hook result is stringified"""
    # Arrange
    registry = HookRegistry()
    registry.register_handler("double", lambda values: {"result": int(values["n"]) * 2})

    # Act
    result = await registry.execute("double", {"n": "21"})

    # Assert
    assert result == {"result": "42"}


@pytest.mark.asyncio
async def test_async_hook_executes():
    # Arrange
    registry = HookRegistry()

    async def greet(values):
        return {"greeting": f"Hello {values['name']}"}

    registry.register_handler("greet", greet)

    # Act
    result = await registry.execute("greet", {"name": "Ada"})

    # Assert
    assert result == {"greeting": "Hello Ada"}


@pytest.mark.asyncio
async def test_hook_receives_a_copy():
    """Hooks cannot mutate the caller's mapping"""
    registry = HookRegistry()
    registry.register_handler("mutate", lambda values: values.clear())
    values = {"a": "1"}

    result = await registry.execute("mutate", values)

    assert result == {}
    assert values == {"a": "1"}


@pytest.mark.asyncio
async def test_unknown_hook_raises():
    with pytest.raises(BusinessHookError, match="Unknown business hook") as exc_info:
        await HookRegistry().execute("nope", {})
    assert exc_info.value.hook == "nope"


@pytest.mark.asyncio
async def test_failing_hook_is_wrapped():
    # Arrange
    registry = HookRegistry()

    def broken(values):
        raise RuntimeError("backend down")

    registry.register_handler("broken", broken)

    # Act & Assert
    with pytest.raises(BusinessHookError, match="backend down") as exc_info:
        await registry.execute("broken", {})
    assert isinstance(exc_info.value.__cause__, RuntimeError)


@pytest.mark.asyncio
async def test_non_mapping_result_is_rejected():
    registry = HookRegistry()
    registry.register_handler("bad", lambda values: ["not", "a", "dict"])
    with pytest.raises(BusinessHookError, match="expected a mapping"):
        await registry.execute("bad", {})

