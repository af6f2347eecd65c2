"""USSD Gateway FastAPI Application.

Receives aggregator callbacks, runs them through the dialog orchestrator and
answers with ``CON ...`` / ``END ...`` plain text.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Annotated, Literal

from fastapi import APIRouter, FastAPI, Form, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from ussd_gateway.__version__ import __version__, get_version_info
from ussd_gateway.config.settings import GatewaySettings
from ussd_gateway.core.errors import GraphLoadError
from ussd_gateway.dialog.models import DialogRequest
from ussd_gateway.observability.logging import mask_phone
from ussd_gateway.runtime import GatewayRuntime
from ussd_gateway.server.dependencies import GraphsDep, OrchestratorDep, RuntimeDep
from ussd_gateway.server.errors import global_exception_handler
from ussd_gateway.server.models import (
    AutomatonInfoResponse,
    CancelResponse,
    HealthResponse,
    ReadinessResponse,
    ReloadResponse,
    UssdTestRequest,
    VersionResponse,
)
from ussd_gateway.session.store import new_session_id

logger = logging.getLogger(__name__)

INPUT_SEPARATOR = "*"


def extract_last_input(text: str | None) -> str:
    """Reduce the aggregator's cumulative input to the latest entry.

    ``""`` on the first request, then ``"1"``, ``"1*2"``, ``"1*2*John"``...
    Trailing separators are ignored.
    """
    if text is None or not text.strip():
        return ""
    parts = text.rstrip(INPUT_SEPARATOR).split(INPUT_SEPARATOR)
    return parts[-1].strip()


router = APIRouter()


@router.post("/ussd/callback", response_class=PlainTextResponse)
async def ussd_callback(
    orchestrator: OrchestratorDep,
    session_id: Annotated[str, Form(alias="sessionId")],
    phone_number: Annotated[str, Form(alias="phoneNumber")],
    service_code: Annotated[str, Form(alias="serviceCode")] = "",
    text: Annotated[str, Form()] = "",
) -> PlainTextResponse:
    """Aggregator callback (form-encoded)."""
    user_input = extract_last_input(text)
    logger.info(
        f"USSD request from {mask_phone(phone_number)} on {service_code or '-'}",
        extra={"session_id": session_id},
    )
    directive = await orchestrator.handle(
        DialogRequest(session_id=session_id, phone_number=phone_number, raw_input=user_input)
    )
    return PlainTextResponse(directive.format())


@router.post("/ussd/test", response_class=PlainTextResponse)
async def ussd_test(request: UssdTestRequest, orchestrator: OrchestratorDep) -> PlainTextResponse:
    """Same as the callback, with a JSON body."""
    session_id = request.session_id or new_session_id()
    directive = await orchestrator.handle(
        DialogRequest(
            session_id=session_id,
            phone_number=request.phone_number,
            raw_input=extract_last_input(request.text),
        )
    )
    return PlainTextResponse(directive.format(), headers={"X-Session-Id": session_id})


@router.delete("/ussd/sessions/{session_id}", response_model=CancelResponse)
async def cancel_session(session_id: str, orchestrator: OrchestratorDep) -> CancelResponse:
    """End a session explicitly."""
    removed = await orchestrator.cancel(session_id)
    if removed:
        return CancelResponse(success=True, message="Session cancelled")
    return CancelResponse(success=False, message="No active session")


@router.get("/health", response_model=HealthResponse)
@router.get("/ussd/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Liveness check."""
    runtime = getattr(request.app.state, "runtime", None)
    status: Literal["healthy", "starting"] = "healthy" if runtime else "starting"
    return HealthResponse(status=status, version=__version__)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(request: Request) -> ReadinessResponse:
    """Readiness check."""
    runtime = getattr(request.app.state, "runtime", None)
    if not runtime:
        return ReadinessResponse(
            ready=False, message="Runtime not initialized", checks={"runtime": False}
        )
    return ReadinessResponse(
        ready=True, message="Service is ready", checks={"runtime": True, "automaton": True}
    )


@router.get("/version", response_model=VersionResponse)
def get_version() -> VersionResponse:
    """Get detailed version information."""
    info = get_version_info()
    return VersionResponse(
        version=__version__, major=info["major"], minor=info["minor"], patch=info["patch"]
    )


@router.get("/automaton/info", response_model=AutomatonInfoResponse)
async def automaton_info(graphs: GraphsDep) -> AutomatonInfoResponse:
    graph = graphs.current
    return AutomatonInfoResponse(
        automaton_id=graph.automaton_id,
        name=graph.name,
        version=graph.version,
        description=graph.description,
        statistics=graph.statistics(),
    )


@router.post("/automaton/reload", response_model=ReloadResponse)
async def reload_automaton(runtime: RuntimeDep) -> ReloadResponse | JSONResponse:
    """Re-read the automaton definition; the running graph stays active on failure."""
    try:
        graph = await asyncio.to_thread(runtime.reload_automaton)
    except GraphLoadError as e:
        logger.warning(f"Automaton reload rejected: {e}")
        return JSONResponse(
            status_code=422,
            content=ReloadResponse(success=False, errors=e.errors).model_dump(),
        )
    return ReloadResponse(success=True, version=graph.version)


def create_app(
    settings: GatewaySettings | None = None,
    runtime: GatewayRuntime | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Settings used by the lifespan; read from the environment when None
        runtime: Pre-built runtime (tests); the lifespan then only starts and stops it

    Returns:
        Configured FastAPI app
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Build the runtime on startup, stop it on shutdown."""
        from dotenv import load_dotenv

        load_dotenv()

        active = runtime
        if active is None:
            active = GatewayRuntime.build(settings or GatewaySettings.from_env())

        async with active:
            app.state.runtime = active
            logger.info(f"USSD gateway ready with {active.graphs.current}")
            yield
            logger.info("USSD gateway shutting down")
        app.state.runtime = None

    app = FastAPI(
        title="USSD Gateway",
        description="Automaton-driven USSD dialog engine for package delivery",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_exception_handler(Exception, global_exception_handler)
    app.include_router(router)
    return app


app = create_app()
