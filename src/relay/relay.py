"""
src/relay/relay.py
===================
Request Relay — SignRelay

Responsibility:
    - Look up the connection handle a route needs
    - Validate that the route's file was uploaded
    - Forward the payload to the remote Space's /predict endpoint
    - Decode the remote response into a RelayResult

Every route is one RelayRoute instance; the two HTTP endpoints differ only
in connection key, form field, media type and predict() argument shape.

This module does NOT:
    - Connect to remote services (handled by src.relay.registry)
    - Shape HTTP responses (handled by src.api.app)
    - Retry failed predictions
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from src.relay.errors import RelayError, RelayErrorKind
from src.relay.payloads import (
    AUDIO_MEDIA_TYPE,
    VIDEO_MEDIA_TYPE,
    RelayResult,
    UploadPayload,
    audio_arguments,
    decode_result,
    staged_file,
    video_arguments,
)
from src.relay.registry import ConnectionRegistry

logger = logging.getLogger("signrelay.relay")

PREDICT_API_NAME = "/predict"


# ---------------------------------------------------------------------------
# Route definition
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RelayRoute:
    connection_key: str
    field_name: str
    media_type: str
    missing_file_message: str
    error_label: str
    build_arguments: Callable[[Any], tuple[tuple[Any, ...], dict[str, Any]]]
    decode: Callable[[Sequence[Any]], RelayResult] = decode_result

    def payload(self, data: bytes | None, filename: str | None = None) -> UploadPayload | None:
        if data is None:
            return None
        return UploadPayload(data=data, media_type=self.media_type, filename=filename)


TRANSCRIBE = RelayRoute(
    connection_key="speech2sign",
    field_name="audio",
    media_type=AUDIO_MEDIA_TYPE,
    missing_file_message="No audio file provided",
    error_label="Transcription error",
    build_arguments=audio_arguments,
)

PROCESS_VIDEO = RelayRoute(
    connection_key="sign2speech",
    field_name="video",
    media_type=VIDEO_MEDIA_TYPE,
    missing_file_message="No video file provided",
    error_label="Video processing error",
    build_arguments=video_arguments,
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def _predict(client: Any, route: RelayRoute, payload: UploadPayload) -> Any:
    with staged_file(payload) as file_ref:
        args, kwargs = route.build_arguments(file_ref)
        return client.predict(*args, api_name=PREDICT_API_NAME, **kwargs)


async def relay(
    route: RelayRoute,
    registry: ConnectionRegistry,
    payload: UploadPayload | None,
) -> RelayResult:
    """
    Forward one uploaded file to the route's remote Space.

    Args:
        route:    Which endpoint is being served.
        registry: Connections established at startup.
        payload:  The uploaded file, or None if the field was missing.

    Returns:
        RelayResult with the recognised text and result URLs.

    Raises:
        RelayError: SERVICE_UNAVAILABLE if the route's connection is absent,
            CLIENT_DATA if no file was uploaded, UPSTREAM_FAILURE if the
            remote call or its response decoding fails.
    """
    client = registry.require(route.connection_key)

    if payload is None:
        raise RelayError(RelayErrorKind.CLIENT_DATA, route.missing_file_message)

    logger.info(
        "Relaying %s (%.2f KB, %s) to %s",
        payload.filename or route.field_name,
        len(payload.data) / 1024,
        payload.media_type,
        route.connection_key,
    )

    try:
        prediction = await asyncio.to_thread(_predict, client, route, payload)
    except Exception as exc:
        logger.error("%s: %s", route.error_label, exc, exc_info=True)
        raise RelayError(RelayErrorKind.UPSTREAM_FAILURE, str(exc)) from exc

    try:
        result = route.decode(prediction)
    except RelayError as exc:
        logger.error("%s: %s", route.error_label, exc.message)
        raise

    logger.info("%s relay complete.", route.connection_key)
    return result
