"""FastAPI HTTP server for the VM gateway.

Routes:

    GET  /health        -> {"status": "ok", "vm_path": "..."}
    GET  /vms           -> {"response": ["web1", "db1"]}
    POST /vms/{alias}   -> {"H":2,"W":7}\\n{"H":4,"W":7}\\n...  (streamed)

Errors raised by handlers are rendered as ``{"error": "..."}`` with the
status code of their :class:`~vmgateway.errors.ErrorKind`. Anything
unexpected becomes a 500 response and the server keeps serving.
"""

from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from vmgateway import __version__
from vmgateway.bridge.invoker import InvocationBridge, SubprocessRunner
from vmgateway.config.settings import Settings
from vmgateway.domain.models import ErrorResponse, HealthResponse, VmListResponse
from vmgateway.errors import ErrorKind, GatewayError
from vmgateway.inventory.lister import list_vms
from vmgateway.streaming.emitter import MEDIA_TYPE, RecordEmitter

logger = logging.getLogger(__name__)

CallNext = Callable[[Request], Awaitable[Response]]


def reply_json_error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


def build_bridge(settings: Settings) -> InvocationBridge:
    """Create the default bridge that runs govc as a child process."""
    runner = SubprocessRunner(
        binary=settings.command.binary,
        env=settings.govc.to_environment(),
        timeout=settings.command.timeout,
    )
    return InvocationBridge(runner)


def create_app(
    settings: Settings | None = None,
    vm_path: str | None = None,
    bridge: InvocationBridge | None = None,
    emitter: RecordEmitter | None = None,
) -> FastAPI:
    """Create and configure the gateway application.

    Args:
        settings: Resolved settings. Defaults are used if None.
        vm_path: Inventory root override (for testing).
        bridge: Optional pre-configured InvocationBridge (for testing).
        emitter: Optional pre-configured RecordEmitter (for testing).
    """
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="vmgateway",
        description="HTTP API in front of the govc virtualization CLI",
        version=__version__,
    )
    app.state.vm_path = vm_path if vm_path is not None else settings.vm_path
    app.state.bridge = bridge if bridge is not None else build_bridge(settings)
    app.state.emitter = emitter if emitter is not None else RecordEmitter()

    # -------------------------------------------------------------------
    # Middleware (registered inner first: recovery, then access log)
    # -------------------------------------------------------------------

    @app.middleware("http")
    async def recover(request: Request, call_next: CallNext) -> Response:
        try:
            return await call_next(request)
        except Exception:
            logger.exception("Unhandled error in %s %s", request.method, request.url.path)
            return reply_json_error(ErrorKind.UNRECOVERABLE.status_code, "internal server error")

    @app.middleware("http")
    async def access_log(request: Request, call_next: CallNext) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s -> %d (%.1f ms)",
            request.method, request.url.path, response.status_code, elapsed_ms,
        )
        return response

    # -------------------------------------------------------------------
    # Error translation
    # -------------------------------------------------------------------

    @app.exception_handler(GatewayError)
    async def handle_gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
        logger.warning("%s %s failed (%s): %s", request.method, request.url.path, exc.kind.value, exc)
        return reply_json_error(exc.kind.status_code, str(exc))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return reply_json_error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return reply_json_error(422, str(exc))

    # -------------------------------------------------------------------
    # Routes
    # -------------------------------------------------------------------

    @app.get("/health")
    async def health_check() -> HealthResponse:
        return HealthResponse(status="ok", vm_path=app.state.vm_path)

    @app.get("/vms")
    def handle_list_vms() -> VmListResponse:
        # Runs in the threadpool; the govc call blocks.
        names = list_vms(app.state.bridge, app.state.vm_path)
        return VmListResponse(response=names)

    @app.post("/vms/{alias}")
    async def handle_stream_vm(alias: str) -> StreamingResponse:
        logger.info("Streaming operation for %s", alias)
        em: RecordEmitter = app.state.emitter
        return StreamingResponse(em.stream(alias), status_code=200, media_type=MEDIA_TYPE)

    return app
