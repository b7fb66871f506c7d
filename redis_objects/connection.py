"""
Process-scoped default transport.

Handles normally receive their transport explicitly. For applications that
use a single store, one transport can be registered at start-up and picked
up by every handle constructed without one:

    >>> await redis_objects.connect()            # RedisTransport from REDIS_* env
    >>> counter = RedisValue("hits", marshal=int)  # uses the registered transport

Invariants:
    - The default is only ever set by connect() and cleared by disconnect()
    - Handles resolve the default once, at construction; later calls on a
      handle never consult this module
"""

from __future__ import annotations

import logging
from typing import Optional

from .config import RedisConfig
from .errors import UsageError
from .transport.base import Transport
from .transport.redis_server import RedisTransport

logger = logging.getLogger(__name__)

_default_transport: Optional[Transport] = None


async def connect(
    transport: Optional[Transport] = None,
    config: Optional[RedisConfig] = None,
) -> Transport:
    """Register (and connect) the process default transport.

    Args:
        transport: Transport to register; a RedisTransport is built when omitted
        config: Settings for the RedisTransport (REDIS_* environment when omitted)

    Returns:
        The registered, connected transport

    Raises:
        TransportConnectionError: If connecting fails (nothing is registered)
    """
    global _default_transport

    if transport is None:
        transport = RedisTransport(config or RedisConfig.from_env())
    if not transport.is_connected:
        await transport.connect()

    _default_transport = transport
    logger.info(
        "Default transport registered",
        extra={"transport": type(transport).__name__},
    )
    return transport


def get_transport() -> Transport:
    """Return the registered default transport.

    Raises:
        UsageError: If connect() has not been called
    """
    if _default_transport is None:
        raise UsageError(
            "No transport given and no default registered; call connect() at start-up",
            argument="transport",
        )
    return _default_transport


def resolve_transport(transport: Optional[Transport]) -> Transport:
    """The given transport, or the registered default."""
    return transport if transport is not None else get_transport()


async def disconnect() -> None:
    """Close and unregister the default transport, if any."""
    global _default_transport

    transport, _default_transport = _default_transport, None
    if transport is not None:
        await transport.close()
        logger.info("Default transport closed")
