# src/relay/__init__.py
# ======================
# Relay Core — SignRelay
#
#   registry.py : connect to every remote Gradio Space once at startup
#   payloads.py : upload payloads, staging, predict() arguments, decoding
#   relay.py    : one parameterised relay operation, two route instances
#   errors.py   : closed error-kind enumeration
#
# Public API:
#   connect_all(descriptors) → ConnectionRegistry
#   relay(route, registry, payload) → RelayResult

from src.relay.errors import RelayError, RelayErrorKind  # noqa: F401
from src.relay.payloads import RelayResult, UploadPayload  # noqa: F401
from src.relay.registry import (  # noqa: F401
    ConnectionRegistry,
    ServiceDescriptor,
    connect_all,
)
from src.relay.relay import PROCESS_VIDEO, TRANSCRIBE, RelayRoute, relay  # noqa: F401

__all__ = [
    "RelayError",
    "RelayErrorKind",
    "RelayResult",
    "UploadPayload",
    "ConnectionRegistry",
    "ServiceDescriptor",
    "connect_all",
    "RelayRoute",
    "TRANSCRIBE",
    "PROCESS_VIDEO",
    "relay",
]
