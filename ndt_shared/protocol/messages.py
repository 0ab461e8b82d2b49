from __future__ import annotations

import re
from decimal import Decimal
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .commands import TestCapability
from .errors import ErrorCode, LoginError, MalformedBody

_DECIMAL_INT = re.compile(r"^[+-]?[0-9]+$")
INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1


def format_float(value: float) -> str:
    """Shortest round-trip decimal text for `value`, never in exponent form."""
    text = format(Decimal(repr(float(value))), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


class StandardMessage(BaseModel):
    """Body of most control frames: {"msg": "..."}."""

    msg: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StandardMessage":
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise MalformedBody(f"Standard message validation failed: {exc}") from exc


class ExtendedLoginWire(BaseModel):
    """MSG_EXTENDED_LOGIN body exactly as sent: the bitmask is still a string."""

    msg: str
    tests: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExtendedLoginWire":
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise MalformedBody(f"Extended login validation failed: {exc}") from exc

    def to_login(self) -> "ExtendedLoginMessage":
        if not _DECIMAL_INT.match(self.tests):
            raise MalformedBody(f"tests is not a decimal integer: {self.tests!r}")
        requested = int(self.tests)
        if not (INT64_MIN <= requested <= INT64_MAX):
            raise MalformedBody(f"tests is out of range: {self.tests!r}")
        if not requested & TestCapability.STATUS:
            raise LoginError(ErrorCode.MISSING_CAPABILITY, "Client does not support TEST_STATUS")
        return ExtendedLoginMessage(client_version=self.msg, requested_tests=requested)


class ExtendedLoginMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    client_version: str
    requested_tests: int


class S2CResult(BaseModel):
    """Server side S2C measurement, sent once as a TEST_MSG."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    throughput_kbits: str = Field(alias="ThroughputValue")
    unsent_bytes: str = Field(default="0", alias="UnsentDataAmount")
    total_bytes_sent: str = Field(alias="TotalSentByte")

    @classmethod
    def from_measurement(cls, total_bytes: int, throughput_kbits: float) -> "S2CResult":
        return cls(throughput_kbits=format_float(throughput_kbits), total_bytes_sent=str(total_bytes))

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


__all__ = [
    "format_float",
    "StandardMessage",
    "ExtendedLoginWire",
    "ExtendedLoginMessage",
    "S2CResult",
]
