"""
Error types for redis-objects.

This module defines all exception types raised by the package:
- RedisObjectsError: Base exception
- TransportError: Failure reported by the store or the connection to it
- TransportConnectionError: Transport not connected or unreachable
- MarshalError: Value could not be encoded to or decoded from its wire form
- UsageError: Invalid call shape or configuration

Invariants:
    - All errors inherit from RedisObjectsError
    - Errors include context for debugging
    - Transport errors chain the backend exception via __cause__
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class RedisObjectsError(Exception):
    """Base exception for all redis-objects errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "REDIS_OBJECTS_ERROR"
        self.details = details or {}


class TransportError(RedisObjectsError):
    """The store rejected a command or could not be reached.

    Raised when:
    - A command fails (wrong type, no such key, index out of range)
    - The network or protocol layer fails mid-command

    The original backend exception, if any, is available as ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        key: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code="TRANSPORT_ERROR",
            details={"command": command, "key": key},
        )
        self.command = command
        self.key = key


class TransportConnectionError(TransportError):
    """Transport is not connected, or connecting to the store failed."""

    def __init__(
        self,
        message: str,
        address: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.code = "CONNECTION_ERROR"
        self.details = {"address": address}
        self.address = address


class MarshalError(RedisObjectsError):
    """A value could not be converted to or from its wire form.

    Raised when:
    - Wire text is not valid JSON under a JSON spec
    - Wire text is not numeric under an Integer/Float spec
    - A custom stringify/parse callable raises

    Attributes:
        spec: Name of the marshal spec that failed
        value: The offending value (repr-truncated in the message)
    """

    def __init__(
        self,
        message: str,
        spec: Optional[str] = None,
        value: Any = None,
    ) -> None:
        super().__init__(
            message,
            code="MARSHAL_ERROR",
            details={"spec": spec},
        )
        self.spec = spec
        self.value = value


class UsageError(RedisObjectsError):
    """Invalid call shape or configuration.

    Raised when:
    - A marshal spec is not recognized
    - An argument is out of its allowed domain
    - No transport is available for a handle
    """

    def __init__(
        self,
        message: str,
        argument: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code="USAGE_ERROR",
            details={"argument": argument},
        )
        self.argument = argument
