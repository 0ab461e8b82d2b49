from __future__ import annotations

from enum import IntEnum, IntFlag
from typing import Union


class MessageType(IntEnum):
    """
    Control channel message types.
    The numeric value is the type byte that prefixes every frame.
    """

    COMM_FAILURE = 0
    SRV_QUEUE = 1
    MSG_LOGIN = 2
    TEST_PREPARE = 3
    TEST_START = 4
    TEST_MSG = 5
    TEST_FINALIZE = 6
    MSG_ERROR = 7
    MSG_RESULTS = 8
    MSG_LOGOUT = 9
    MSG_WAITING = 10
    MSG_EXTENDED_LOGIN = 11


class TestCapability(IntFlag):
    """Sub-test bits carried in the extended login `tests` field."""

    # keep pytest from collecting this as a test class
    __test__ = False

    MID = 1
    C2S = 2
    S2C = 4
    SFW = 8
    STATUS = 16
    META = 32


IMPLEMENTED_TESTS = TestCapability.S2C | TestCapability.META


def message_name(message_type: Union[int, MessageType]) -> str:
    """Readable name of a type byte, falling back to the raw number."""
    try:
        return MessageType(message_type).name
    except ValueError:
        return f"UNKNOWN({int(message_type)})"


__all__ = [
    "MessageType",
    "TestCapability",
    "IMPLEMENTED_TESTS",
    "message_name",
]
