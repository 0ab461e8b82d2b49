from __future__ import annotations

import asyncio
import logging

from ndt_shared.protocol.commands import IMPLEMENTED_TESTS, MessageType, TestCapability, message_name
from ndt_shared.protocol.errors import ErrorCode, LoginError
from ndt_shared.protocol.framing import decode_json_body, read_frame
from ndt_shared.protocol.messages import ExtendedLoginMessage, ExtendedLoginWire

logger = logging.getLogger(__name__)


async def read_extended_login(reader: asyncio.StreamReader) -> ExtendedLoginMessage:
    """Read MSG_EXTENDED_LOGIN and turn it into a validated login."""
    frame = await read_frame(reader)
    if frame.type != MessageType.MSG_EXTENDED_LOGIN:
        raise LoginError(
            ErrorCode.UNEXPECTED_MESSAGE_TYPE,
            f"Expected MSG_EXTENDED_LOGIN, got {message_name(frame.type)}",
        )
    wire = ExtendedLoginWire.from_dict(decode_json_body(frame.body, "extended_login"))
    logger.info("Client version: %s, requested tests: %s", wire.msg, wire.tests)
    return wire.to_login()


def negotiate(requested: int, implemented: int = IMPLEMENTED_TESTS) -> int:
    return requested & implemented


def describe_tests(negotiated: int) -> str:
    """
    Test list sent to the client after the version string.
    S2C contributes its id plus a trailing space, META its bare id; clients
    compare this text verbatim, so the format is fixed.
    """
    message = ""
    if negotiated & TestCapability.S2C:
        message += f"{int(TestCapability.S2C)} "
    if negotiated & TestCapability.META:
        message += str(int(TestCapability.META))
    return message


__all__ = ["read_extended_login", "negotiate", "describe_tests"]
