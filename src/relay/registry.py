"""
src/relay/registry.py
======================
Connection Registry — SignRelay

Responsibility:
    - Attempt one Gradio connection per Service Descriptor at startup
    - Run all attempts concurrently; each attempt is independent
    - Record successes, log failures, never retry
    - Freeze the result into a read-only mapping for the request handlers

This module does NOT:
    - Retry failed connections or tear connections down
    - Apply any timeout beyond the transport default
    - Send any prediction request (handled by src.relay.relay)
"""

import asyncio
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping

from gradio_client import Client

from src.relay.errors import RelayError, RelayErrorKind

logger = logging.getLogger("signrelay.relay.registry")


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ServiceDescriptor:
    """A remote inference service: unique logical name + Space URL."""

    name: str
    url: str


class ConnectionRegistry:
    """
    Read-only mapping from logical service name to an established client.

    Services whose connection failed are remembered as descriptors but have
    no handle; ``get`` returns None for them.
    """

    def __init__(
        self,
        descriptors: Iterable[ServiceDescriptor],
        handles: Mapping[str, Any],
    ):
        self._descriptors = tuple(descriptors)
        self._handles = MappingProxyType(dict(handles))

    @property
    def descriptors(self) -> tuple[ServiceDescriptor, ...]:
        return self._descriptors

    @property
    def handles(self) -> Mapping[str, Any]:
        return self._handles

    def get(self, name: str) -> Any | None:
        return self._handles.get(name)

    def require(self, name: str) -> Any:
        """
        Return the handle for ``name``.

        Raises:
            RelayError: SERVICE_UNAVAILABLE if the connection was never
                established.
        """
        handle = self._handles.get(name)
        if handle is None:
            raise RelayError(
                RelayErrorKind.SERVICE_UNAVAILABLE,
                f"Gradio client for {name} not initialized",
            )
        return handle

    def status(self) -> dict[str, bool]:
        return {d.name: d.name in self._handles for d in self._descriptors}

    def __contains__(self, name: object) -> bool:
        return name in self._handles

    def __len__(self) -> int:
        return len(self._handles)


# ---------------------------------------------------------------------------
# Connection
# ---------------------------------------------------------------------------


def gradio_connect(url: str) -> Client:
    """
    Open a Gradio client for ``url``.

    Files are not downloaded: results keep their remote URLs so they can be
    relayed to the caller as-is.
    """
    return Client(url, download_files=False, verbose=False)


async def _attempt(
    descriptor: ServiceDescriptor,
    connect: Callable[[str], Any],
) -> tuple[str, Any | None]:
    try:
        handle = await asyncio.to_thread(connect, descriptor.url)
    except Exception as exc:
        logger.error(
            "Failed to initialize Gradio client for %s (%s): %s",
            descriptor.name,
            descriptor.url,
            exc,
            exc_info=True,
        )
        return descriptor.name, None

    logger.info("Gradio client for %s initialized successfully", descriptor.name)
    return descriptor.name, handle


async def connect_all(
    descriptors: Iterable[ServiceDescriptor],
    connect: Callable[[str], Any] | None = None,
) -> ConnectionRegistry:
    """
    Establish every named connection once and freeze the outcome.

    A failed attempt is logged and leaves its entry absent; it never fails
    the other attempts or the caller.

    Args:
        descriptors: Services to connect to. Names must be unique.
        connect:     Blocking ``url -> handle`` factory, run in a worker
                     thread. Defaults to ``gradio_connect``.

    Returns:
        ConnectionRegistry holding the successful handles.

    Raises:
        ValueError: If two descriptors share a name.
    """
    descriptors = tuple(descriptors)
    names = [d.name for d in descriptors]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ValueError(f"Duplicate service names: {', '.join(duplicates)}")

    connect = connect or gradio_connect

    outcomes = await asyncio.gather(*(_attempt(d, connect) for d in descriptors))
    handles = {name: handle for name, handle in outcomes if handle is not None}

    logger.info(
        "Connection registry ready: %d/%d services connected.",
        len(handles),
        len(descriptors),
    )
    return ConnectionRegistry(descriptors, handles)
