"""
src/config.py
==============
Runtime Configuration — SignRelay

Responsibility:
    - Read environment variables (already loaded from .env by main.py)
    - Define the static Service Descriptors for the remote Gradio Spaces
    - Expose server bind settings and error-status policy

This module does NOT:
    - Connect to any remote service (handled by src.relay.registry)
    - Configure logging (handled by main.py)
"""

import os

from src.relay.registry import ServiceDescriptor


# ---------------------------------------------------------------------------
# Remote Gradio Spaces
# ---------------------------------------------------------------------------

SPEECH2SIGN = "speech2sign"
SIGN2SPEECH = "sign2speech"

_DEFAULT_URLS: dict[str, str] = {
    SPEECH2SIGN: "https://adelshousha-sahla-speech2sign.hf.space",
    SIGN2SPEECH: "https://adelshousha-sahla-sign2speech.hf.space",
}


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def service_descriptors() -> tuple[ServiceDescriptor, ...]:
    """
    Build the descriptor list, honouring SPEECH2SIGN_URL / SIGN2SPEECH_URL
    overrides.
    """
    return (
        ServiceDescriptor(
            name=SPEECH2SIGN,
            url=os.getenv("SPEECH2SIGN_URL") or _DEFAULT_URLS[SPEECH2SIGN],
        ),
        ServiceDescriptor(
            name=SIGN2SPEECH,
            url=os.getenv("SIGN2SPEECH_URL") or _DEFAULT_URLS[SIGN2SPEECH],
        ),
    )


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------

HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT") or 3000)
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

CORS_ALLOW_ORIGINS: list[str] = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
    if origin.strip()
]

# When False every relay failure is reported as HTTP 500.
DISTINCT_ERROR_STATUS: bool = _env_flag("RELAY_DISTINCT_STATUS")
