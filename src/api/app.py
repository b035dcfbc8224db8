"""
src/api/app.py
===============
HTTP API — SignRelay

Responsibility:
    - Expose POST /transcribe      (multipart field "audio" → speech2sign)
    - Expose POST /process-video   (multipart field "video" → sign2speech)
    - Expose GET  /health          (which remote Spaces are connected)
    - Build the Connection Registry once during application startup
    - Convert every RelayError into the JSON envelope {"error": message}

This module does NOT:
    - Call the remote Spaces directly (handled by src.relay.relay)
    - Retry, authenticate, or rate-limit requests
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Callable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile

from src import config
from src.relay.errors import DISTINCT_STATUS_CODES, RelayError, RelayErrorKind
from src.relay.registry import connect_all
from src.relay.relay import PROCESS_VIDEO, TRANSCRIBE, RelayRoute, relay

logger = logging.getLogger("signrelay.api")

ERROR_KIND_HEADER = "X-Relay-Error"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _error_status(request: Request, kind: RelayErrorKind) -> int:
    if request.app.state.distinct_error_status:
        return DISTINCT_STATUS_CODES[kind]
    return 500


async def _uploaded_file(request: Request, route: RelayRoute) -> UploadFile | None:
    """
    Return the route's file part, or None.

    A plain text value or a file part without a filename counts as no file.
    """
    try:
        form = await request.form()
    except Exception as exc:
        raise RelayError(RelayErrorKind.CLIENT_DATA, route.missing_file_message) from exc

    value = form.get(route.field_name)
    if isinstance(value, UploadFile) and value.filename:
        return value
    return None


async def _serve(request: Request, route: RelayRoute) -> dict:
    upload = await _uploaded_file(request, route)

    payload = None
    if upload is not None:
        try:
            data = await upload.read()
        except Exception as exc:
            raise RelayError(
                RelayErrorKind.CLIENT_DATA, "Failed to read uploaded file."
            ) from exc
        payload = route.payload(data, upload.filename)

    result = await relay(route, request.app.state.registry, payload)
    return {"result": result.to_dict()}


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


def create_app(
    connect: Callable[[str], Any] | None = None,
    distinct_error_status: bool | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        connect: Optional ``url -> client`` factory passed to the registry
                 (defaults to a real Gradio client).
        distinct_error_status: Map error kinds to 400/503/502 instead of a
                 uniform 500. Defaults to RELAY_DISTINCT_STATUS.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.registry = await connect_all(config.service_descriptors(), connect)
        yield

    app = FastAPI(
        title="SignRelay",
        description="Relay for hosted speech-to-sign and sign-to-speech Gradio Spaces.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.distinct_error_status = (
        config.DISTINCT_ERROR_STATUS
        if distinct_error_status is None
        else distinct_error_status
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[ERROR_KIND_HEADER],
    )

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError):
        logger.warning("%s %s failed (%s): %s", request.method, request.url.path, exc.kind.value, exc.message)
        return JSONResponse(
            status_code=_error_status(request, exc.kind),
            content={"error": exc.message},
            headers={ERROR_KIND_HEADER: exc.kind.value},
        )

    @app.post("/transcribe")
    async def transcribe(request: Request):
        """Relay the multipart "audio" file to the speech2sign Space."""
        return await _serve(request, TRANSCRIBE)

    @app.post("/process-video")
    async def process_video(request: Request):
        """Relay the multipart "video" file to the sign2speech Space."""
        return await _serve(request, PROCESS_VIDEO)

    @app.get("/health")
    async def health(request: Request):
        return {"status": "ok", "services": request.app.state.registry.status()}

    return app


app = create_app()
