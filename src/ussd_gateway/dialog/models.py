"""Inbound request and outbound directive of one dialog step."""

from enum import Enum

from pydantic import BaseModel, Field

from ussd_gateway.core.constants import RESPONSE_CONTINUE, RESPONSE_END


class DirectiveKind(str, Enum):
    CONTINUE = "CONTINUE"
    END = "END"


class DialogRequest(BaseModel):
    """One keystroke batch from the handset, already reduced to a single token."""

    session_id: str = Field(..., min_length=1, description="Aggregator session id")
    phone_number: str = Field(..., min_length=1, description="Caller MSISDN")
    raw_input: str = Field(default="", description="Latest user input")


class DialogDirective(BaseModel):
    """What the transport layer should send back."""

    kind: DirectiveKind
    message: str

    @classmethod
    def cont(cls, message: str) -> "DialogDirective":
        return cls(kind=DirectiveKind.CONTINUE, message=message)

    @classmethod
    def end(cls, message: str) -> "DialogDirective":
        return cls(kind=DirectiveKind.END, message=message)

    @property
    def is_end(self) -> bool:
        return self.kind is DirectiveKind.END

    def format(self) -> str:
        """Render as the aggregator expects: ``CON <message>`` or ``END <message>``."""
        prefix = RESPONSE_END if self.is_end else RESPONSE_CONTINUE
        return f"{prefix} {self.message}"
