"""
src/relay/errors.py
====================
Relay Error Taxonomy — SignRelay

A small closed set of failure kinds so the HTTP layer (and its callers) can
tell failure classes apart without matching on message text.
"""

from enum import Enum


class RelayErrorKind(str, Enum):
    CLIENT_DATA = "client_data"
    SERVICE_UNAVAILABLE = "service_unavailable"
    UPSTREAM_FAILURE = "upstream_failure"


# Used only when distinct status codes are enabled (see src.config).
DISTINCT_STATUS_CODES: dict[RelayErrorKind, int] = {
    RelayErrorKind.CLIENT_DATA: 400,
    RelayErrorKind.SERVICE_UNAVAILABLE: 503,
    RelayErrorKind.UPSTREAM_FAILURE: 502,
}


class RelayError(Exception):
    """Raised when a relay request cannot produce a result."""

    def __init__(self, kind: RelayErrorKind, message: str):
        self.kind = kind
        self.message = message
        super().__init__(message)
