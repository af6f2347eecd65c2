"""FastAPI dependencies for server endpoints.

The runtime is created by the application lifespan and read from
``app.state``; endpoints never touch module-level state.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from ussd_gateway.automaton.graph import GraphHolder
from ussd_gateway.dialog.orchestrator import DialogOrchestrator
from ussd_gateway.runtime import GatewayRuntime


def get_runtime(request: Request) -> GatewayRuntime:
    """Dependency to get the initialized runtime.

    Raises:
        HTTPException: 503 if the runtime is not initialized
    """
    runtime = getattr(request.app.state, "runtime", None)

    if runtime is None:
        raise HTTPException(
            status_code=503,
            detail={
                "error": "Service temporarily unavailable",
                "message": "Server is starting up. Please try again in a few seconds.",
            },
        )

    return runtime


RuntimeDep = Annotated[GatewayRuntime, Depends(get_runtime)]


def get_orchestrator(runtime: RuntimeDep) -> DialogOrchestrator:
    return runtime.orchestrator


def get_graphs(runtime: RuntimeDep) -> GraphHolder:
    return runtime.graphs


# Type aliases for cleaner endpoint signatures
OrchestratorDep = Annotated[DialogOrchestrator, Depends(get_orchestrator)]
GraphsDep = Annotated[GraphHolder, Depends(get_graphs)]
