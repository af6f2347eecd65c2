"""Configuration models for automaton definitions.

Field aliases match the camelCase JSON shape produced by the dialog
designers, while Python code uses snake_case names.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

StateType = Literal["INITIAL", "NORMAL", "FINAL"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class MenuOptionConfig(_CamelModel):
    """A menu line displayed under a state's message."""

    option_key: str = Field(alias="optionKey", description="Key the user types")
    option_text: str = Field(alias="optionText", description="Label shown next to the key")
    transition_trigger: str = Field(
        default="", alias="transitionTrigger", description="Trigger fired by this option"
    )


class StateConfig(_CamelModel):
    """Configuration for a single dialog state."""

    state_id: str = Field(alias="stateId", min_length=1)
    label: str = Field(default="")
    state_type: StateType = Field(default="NORMAL", alias="stateType")
    display_message: str = Field(alias="displayMessage")
    validation_type: str | None = Field(default=None, alias="validationType")
    business_service_method: str | None = Field(
        default=None, alias="businessServiceMethod", description="Business hook run on landing"
    )
    context_storage_key: str | None = Field(
        default=None, alias="contextStorageKey", description="Answer key for the raw input"
    )
    terminates_session: bool = Field(default=False, alias="terminatesSession")
    menu_options: list[MenuOptionConfig] = Field(default_factory=list, alias="menuOptions")


class TransitionConfig(_CamelModel):
    """Configuration for a transition between two states."""

    from_state_id: str = Field(alias="fromStateId")
    to_state_id: str = Field(alias="toStateId")
    trigger: str = Field(default="", description="Exact text, '*' wildcard or '' for epsilon")
    priority: int = Field(default=0, description="Higher priority is tried first")
    requires_validation: bool = Field(default=False, alias="requiresValidation")
    validation_type: str | None = Field(default=None, alias="validationType")
    guard_conditions: list[str] = Field(default_factory=list, alias="guardConditions")
    actions: list[str] = Field(default_factory=list, description="'verb:payload' directives")
    is_error_transition: bool = Field(default=False, alias="isErrorTransition")
    is_fallback_transition: bool = Field(default=False, alias="isFallbackTransition")
    error_message: str | None = Field(default=None, alias="errorMessage")
    max_retries: int = Field(default=3, alias="maxRetries", ge=0)


class AutomatonConfig(_CamelModel):
    """Root of an automaton definition file."""

    automaton_id: str = Field(alias="automatonId")
    name: str
    version: str = Field(default="1.0")
    description: str | None = None
    initial_state_id: str = Field(alias="initialStateId")
    states: list[StateConfig] = Field(default_factory=list)
    transitions: list[TransitionConfig] = Field(default_factory=list)
    final_state_ids: list[str] = Field(default_factory=list, alias="finalStateIds")
    metadata: dict[str, str] = Field(default_factory=dict)
