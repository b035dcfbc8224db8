"""
src/relay/payloads.py
======================
Upload Payloads & Result Decoding — SignRelay

Responsibility:
    - Hold one uploaded file in memory for the duration of a request
    - Stage it as a temporary file the Gradio client can upload
    - Build the predict() arguments for each remote Space
    - Decode the remote (text, audio, video) result into a RelayResult

This module does NOT:
    - Talk to the network (handled by src.relay.relay)
    - Parse multipart bodies (handled by FastAPI in src.api.app)
"""

import contextlib
import mimetypes
import os
import tempfile
from dataclasses import asdict, dataclass
from typing import Any, Iterator, Sequence

from gradio_client import handle_file

from src.relay.errors import RelayError, RelayErrorKind


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

AUDIO_MEDIA_TYPE = "audio/wav"
VIDEO_MEDIA_TYPE = "video/mp4"

# mimetypes guesses vary by platform for these two.
_SUFFIXES: dict[str, str] = {
    AUDIO_MEDIA_TYPE: ".wav",
    VIDEO_MEDIA_TYPE: ".mp4",
}


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UploadPayload:
    """Raw bytes of one uploaded file plus its declared media type."""

    data: bytes
    media_type: str
    filename: str | None = None

    @property
    def suffix(self) -> str:
        return _SUFFIXES.get(self.media_type) or mimetypes.guess_extension(self.media_type) or ""


@dataclass(frozen=True)
class RelayResult:
    text: str
    audio: str
    video: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Staging
# ---------------------------------------------------------------------------


@contextlib.contextmanager
def staged_file(payload: UploadPayload) -> Iterator[Any]:
    """
    Write ``payload`` to a named temporary file and yield it wrapped with
    ``gradio_client.handle_file``. The file is removed on exit.
    """
    fd, path = tempfile.mkstemp(prefix="signrelay-", suffix=payload.suffix)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(payload.data)
        yield handle_file(path)
    finally:
        with contextlib.suppress(FileNotFoundError):
            os.remove(path)


# ---------------------------------------------------------------------------
# predict() argument builders
# ---------------------------------------------------------------------------


def audio_arguments(file_ref: Any) -> tuple[tuple[Any, ...], dict[str, Any]]:
    """speech2sign takes the audio file as its sole positional input."""
    return (file_ref,), {}


def video_arguments(file_ref: Any) -> tuple[tuple[Any, ...], dict[str, Any]]:
    """sign2speech takes a Video component value under ``input_video_path``."""
    return (), {"input_video_path": {"video": file_ref}}


# ---------------------------------------------------------------------------
# Result decoding
# ---------------------------------------------------------------------------


def _upstream(message: str) -> RelayError:
    return RelayError(RelayErrorKind.UPSTREAM_FAILURE, message)


def decode_result(data: Sequence[Any]) -> RelayResult:
    """
    Decode a ``(text, audio, video)`` prediction.

    ``audio`` is a file value carrying ``url``; ``video`` is a Video
    component value carrying ``video.url``.

    Raises:
        RelayError: UPSTREAM_FAILURE if the prediction has another shape.
    """
    if isinstance(data, (str, bytes)) or not isinstance(data, Sequence) or len(data) != 3:
        raise _upstream(f"Unexpected prediction shape: {type(data).__name__}")

    text, audio, video = data

    try:
        audio_url = audio["url"]
        video_url = video["video"]["url"]
    except (KeyError, TypeError) as exc:
        raise _upstream(f"Prediction is missing a file URL: {exc}") from exc

    return RelayResult(text=text, audio=audio_url, video=video_url)
