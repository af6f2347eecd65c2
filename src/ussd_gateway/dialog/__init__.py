"""Per-request dialog control loop."""

from ussd_gateway.dialog.models import DialogDirective, DialogRequest, DirectiveKind
from ussd_gateway.dialog.orchestrator import DialogOrchestrator

__all__ = ["DialogDirective", "DialogOrchestrator", "DialogRequest", "DirectiveKind"]
