from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Tuple

from .commands import message_name
from .constants import ENCODING, HEADER_SIZE, MAX_BODY_SIZE
from .errors import ErrorCode, FramingError, MalformedBody
from .messages import StandardMessage
from .validator import validate_body

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Frame:
    """One typed, length-prefixed unit of the control channel."""

    type: int
    body: bytes

    @property
    def length(self) -> int:
        return len(self.body)


def encode_frame(message_type: int, body: bytes) -> bytes:
    """Encode a frame: 1 byte type + 2 bytes big-endian length + body."""
    if not (0 <= message_type <= 255):
        raise FramingError(ErrorCode.INVALID_FRAME_TYPE, "Frame type must be 0-255")
    if len(body) > MAX_BODY_SIZE:
        raise FramingError(ErrorCode.BODY_TOO_LARGE, f"Body of {len(body)} bytes exceeds {MAX_BODY_SIZE}")
    return bytes([message_type]) + len(body).to_bytes(2, "big") + body


def decode_frame(data: bytes) -> Frame:
    """Decode one complete frame held in `data`."""
    if len(data) < HEADER_SIZE:
        raise FramingError(ErrorCode.INCOMPLETE_FRAME, "Incomplete frame header")
    length = int.from_bytes(data[1:3], "big")
    body = data[HEADER_SIZE : HEADER_SIZE + length]
    if len(body) != length:
        raise FramingError(ErrorCode.INCOMPLETE_FRAME, "Frame body truncated")
    return Frame(type=data[0], body=body)


def decode_json_body(body: bytes, kind: str) -> Any:
    """Parse a frame body as JSON and check it against the `kind` schema."""
    try:
        data = json.loads(body.decode(ENCODING))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedBody(f"Decode failed: {exc}") from exc
    validate_body(data, kind)
    return data


async def read_frame(reader: asyncio.StreamReader) -> Frame:
    """Read exactly one frame: type byte, length, then `length` body bytes."""
    try:
        type_byte = await reader.readexactly(1)
        length = int.from_bytes(await reader.readexactly(2), "big")
        body = await reader.readexactly(length)
    except asyncio.IncompleteReadError as exc:
        raise FramingError(
            ErrorCode.INCOMPLETE_FRAME,
            f"Stream closed after {len(exc.partial)} of {exc.expected} bytes",
        ) from exc
    frame = Frame(type=type_byte[0], body=body)
    logger.debug("Read %s frame (%s bytes): %r", message_name(frame.type), frame.length, frame.body)
    return frame


async def write_frame(writer: asyncio.StreamWriter, message_type: int, body: bytes) -> None:
    """Write one frame and wait until it has been handed to the transport."""
    data = encode_frame(message_type, body)
    logger.debug("Write %s frame (%s bytes): %r", message_name(message_type), len(body), body)
    writer.write(data)
    await writer.drain()


async def read_standard_message(reader: asyncio.StreamReader) -> Tuple[int, str]:
    """Read a frame and decode its {"msg": ...} body."""
    frame = await read_frame(reader)
    message = StandardMessage.from_dict(decode_json_body(frame.body, "standard"))
    return frame.type, message.msg


async def write_standard_message(writer: asyncio.StreamWriter, message_type: int, msg: str) -> None:
    body = StandardMessage(msg=msg).model_dump_json().encode(ENCODING)
    await write_frame(writer, message_type, body)


async def write_raw_string(writer: asyncio.StreamWriter, text: str) -> None:
    """Write unframed text straight to the transport (legacy kickoff token)."""
    logger.debug("Write raw string: %r", text)
    writer.write(text.encode(ENCODING))
    await writer.drain()


__all__ = [
    "Frame",
    "encode_frame",
    "decode_frame",
    "decode_json_body",
    "read_frame",
    "write_frame",
    "read_standard_message",
    "write_standard_message",
    "write_raw_string",
]
