import asyncio
import json

import pytest

from ndt_server.services.login import describe_tests, negotiate, read_extended_login
from ndt_shared.protocol import (
    IMPLEMENTED_TESTS,
    ErrorCode,
    FramingError,
    LoginError,
    MalformedBody,
    MessageType,
    TestCapability,
    encode_frame,
)


def _login_frame(body, message_type=MessageType.MSG_EXTENDED_LOGIN) -> bytes:
    return encode_frame(message_type, json.dumps(body).encode("utf-8"))


def _read(make_reader, data: bytes):
    async def scenario():
        return await read_extended_login(make_reader(data))

    return asyncio.run(scenario())


def test_read_extended_login(make_reader):
    login = _read(make_reader, _login_frame({"msg": "v3.7.0", "tests": "52"}))
    assert login.client_version == "v3.7.0"
    assert login.requested_tests == 52


def test_login_without_status_is_rejected(make_reader):
    with pytest.raises(LoginError) as excinfo:
        _read(make_reader, _login_frame({"msg": "v1", "tests": "4"}))
    assert excinfo.value.code is ErrorCode.MISSING_CAPABILITY


def test_login_with_wrong_message_type(make_reader):
    with pytest.raises(LoginError) as excinfo:
        _read(make_reader, _login_frame({"msg": "v1", "tests": "52"}, MessageType.MSG_LOGIN))
    assert excinfo.value.code is ErrorCode.UNEXPECTED_MESSAGE_TYPE


@pytest.mark.parametrize(
    "body",
    [
        {"msg": "v1", "tests": "abc"},
        {"msg": "v1", "tests": ""},
        {"msg": "v1", "tests": "99999999999999999999"},
        {"msg": "v1", "tests": "-9223372036854775809"},
        {"msg": "v1", "tests": 52},
        {"msg": "v1"},
        {"tests": "52"},
    ],
)
def test_login_with_malformed_body(make_reader, body):
    with pytest.raises(MalformedBody):
        _read(make_reader, _login_frame(body))


def test_login_on_closed_stream(make_reader):
    with pytest.raises(FramingError) as excinfo:
        _read(make_reader, b"")
    assert excinfo.value.code is ErrorCode.INCOMPLETE_FRAME


def test_negotiate():
    assert IMPLEMENTED_TESTS == 36
    assert negotiate(63) == 36
    assert negotiate(63, implemented=36) == 36
    assert negotiate(TestCapability.S2C | TestCapability.STATUS) == 4
    assert negotiate(TestCapability.C2S | TestCapability.STATUS) == 0


def test_describe_tests():
    assert describe_tests(36) == "4 32"
    assert describe_tests(4) == "4 "
    assert describe_tests(32) == "32"
    assert describe_tests(0) == ""
    assert describe_tests(63) == "4 32"


def test_login_accepts_largest_64bit_mask(make_reader):
    login = _read(make_reader, _login_frame({"msg": "v1", "tests": str(2**63 - 1)}))
    assert negotiate(login.requested_tests) == 36
