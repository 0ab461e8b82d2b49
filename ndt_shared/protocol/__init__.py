"""
Shared protocol package that centralizes message types, capability bits, body models,
framing helpers, and validation utilities for the NDT control channel.
"""

from .commands import IMPLEMENTED_TESTS, MessageType, TestCapability, message_name
from .constants import ENCODING, KICKOFF_TOKEN, MAX_BODY_SIZE, PROTOCOL_VERSION
from .errors import (
    ErrorCode,
    FramingError,
    LoginError,
    MalformedBody,
    ProtocolError,
    ProtocolViolation,
    ResourceError,
)
from .framing import (
    Frame,
    decode_frame,
    decode_json_body,
    encode_frame,
    read_frame,
    read_standard_message,
    write_frame,
    write_raw_string,
    write_standard_message,
)
from .messages import ExtendedLoginMessage, ExtendedLoginWire, S2CResult, StandardMessage, format_float
from .validator import load_schema, validate_body

__all__ = [
    "MessageType",
    "TestCapability",
    "IMPLEMENTED_TESTS",
    "message_name",
    "ENCODING",
    "KICKOFF_TOKEN",
    "MAX_BODY_SIZE",
    "PROTOCOL_VERSION",
    "ErrorCode",
    "ProtocolError",
    "FramingError",
    "MalformedBody",
    "LoginError",
    "ProtocolViolation",
    "ResourceError",
    "Frame",
    "encode_frame",
    "decode_frame",
    "decode_json_body",
    "read_frame",
    "write_frame",
    "read_standard_message",
    "write_standard_message",
    "write_raw_string",
    "StandardMessage",
    "ExtendedLoginWire",
    "ExtendedLoginMessage",
    "S2CResult",
    "format_float",
    "load_schema",
    "validate_body",
]
