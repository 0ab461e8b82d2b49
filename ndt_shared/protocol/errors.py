from __future__ import annotations

from enum import IntEnum


class ErrorCode(IntEnum):
    """Reason codes attached to every protocol exception."""

    INCOMPLETE_FRAME = 1001
    BODY_TOO_LARGE = 1002
    MALFORMED_BODY = 1003
    UNEXPECTED_MESSAGE_TYPE = 1004
    MISSING_CAPABILITY = 1005
    BIND_ERROR = 1006
    DATA_CONNECT_ERROR = 1007
    INVALID_FRAME_TYPE = 1008


class ProtocolError(Exception):
    """Structured protocol exception carrying a reason code + message."""

    def __init__(self, code: ErrorCode, message: str = "") -> None:
        self.code = code
        self.message = message
        super().__init__(f"{code.name} ({int(code)}): {message}")


class FramingError(ProtocolError):
    """Incomplete or oversized frame."""


class MalformedBody(ProtocolError):
    """Frame body is not JSON of the expected shape."""

    def __init__(self, message: str = "") -> None:
        super().__init__(ErrorCode.MALFORMED_BODY, message)


class LoginError(ProtocolError):
    """Extended login has the wrong type or lacks a required capability."""


class ProtocolViolation(ProtocolError):
    """Peer sent a message type the state machine does not expect."""

    def __init__(self, message: str = "") -> None:
        super().__init__(ErrorCode.UNEXPECTED_MESSAGE_TYPE, message)


class ResourceError(ProtocolError):
    """The S2C data socket could not be bound or accepted."""


__all__ = [
    "ErrorCode",
    "ProtocolError",
    "FramingError",
    "MalformedBody",
    "LoginError",
    "ProtocolViolation",
    "ResourceError",
]
