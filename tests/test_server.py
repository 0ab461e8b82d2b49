import asyncio
import json

import pytest

from ndt_server.core import SocketServer
from ndt_server.core.orchestrator import SERVER_VERSION
from ndt_shared.protocol import (
    KICKOFF_TOKEN,
    MessageType,
    decode_json_body,
    encode_frame,
    read_frame,
    read_standard_message,
    write_standard_message,
)

CONFIG = {
    "host": "127.0.0.1",
    "port": 0,
    "s2c_port": 0,
    "s2c_duration": 0.2,
    "log_level": "DEBUG",
}


async def _with_server(client, *args):
    server = SocketServer(CONFIG["host"], CONFIG["port"], CONFIG)
    await server.start()
    try:
        return await client(server.bound_port, *args)
    finally:
        await server.stop()


async def _login(port, tests):
    reader, writer = await asyncio.open_connection("127.0.0.1", port)
    body = json.dumps({"msg": "v3.7.0", "tests": tests}).encode("utf-8")
    writer.write(encode_frame(MessageType.MSG_EXTENDED_LOGIN, body))
    await writer.drain()
    return reader, writer


async def _full_client(port, tests, metadata=("a=1", "b=2")):
    """Speak the client side of a whole session; return (kickoff, [(type, msg)])."""
    reader, writer = await _login(port, tests)
    seen = []

    async def expect(message_type):
        got_type, msg = await read_standard_message(reader)
        seen.append((got_type, msg))
        assert got_type == message_type
        return msg

    kickoff = await reader.readexactly(len(KICKOFF_TOKEN))
    await expect(MessageType.SRV_QUEUE)
    await expect(MessageType.MSG_LOGIN)
    test_list = await expect(MessageType.MSG_LOGIN)

    if "4" in test_list.split():
        data_port = int(await expect(MessageType.TEST_PREPARE))
        data_reader, data_writer = await asyncio.open_connection("127.0.0.1", data_port)
        await expect(MessageType.TEST_START)
        received = 0
        while chunk := await data_reader.read(65536):
            received += len(chunk)
        data_writer.close()
        frame = await read_frame(reader)
        report = decode_json_body(frame.body, "s2c_result")
        seen.append((frame.type, report))
        assert int(report["TotalSentByte"]) == received
        await write_standard_message(writer, MessageType.TEST_MSG, "5000.5")
        await expect(MessageType.TEST_FINALIZE)

    if "32" in test_list.split():
        await expect(MessageType.TEST_PREPARE)
        await expect(MessageType.TEST_START)
        for item in (*metadata, ""):
            await write_standard_message(writer, MessageType.TEST_MSG, item)
        await expect(MessageType.TEST_FINALIZE)

    await expect(MessageType.MSG_LOGOUT)
    assert await reader.read() == b""
    writer.close()
    await writer.wait_closed()
    return kickoff, seen


def test_full_session_frame_sequence():
    kickoff, seen = asyncio.run(_with_server(_full_client, "52"))

    assert kickoff == b"123456 654321"
    assert [t for t, _ in seen] == [
        MessageType.SRV_QUEUE,
        MessageType.MSG_LOGIN,
        MessageType.MSG_LOGIN,
        MessageType.TEST_PREPARE,
        MessageType.TEST_START,
        MessageType.TEST_MSG,
        MessageType.TEST_FINALIZE,
        MessageType.TEST_PREPARE,
        MessageType.TEST_START,
        MessageType.TEST_FINALIZE,
        MessageType.MSG_LOGOUT,
    ]
    assert seen[0][1] == "0"
    assert seen[1][1] == SERVER_VERSION
    assert seen[1][1] == "v3.7.0 (ndt-server/0.1.0)"
    assert seen[2][1] == "4 32"
    assert seen[-1][1] == ""


def test_meta_only_session():
    _, seen = asyncio.run(_with_server(_full_client, "48"))
    assert seen[2] == (MessageType.MSG_LOGIN, "32")
    assert [t for t, _ in seen[3:]] == [
        MessageType.TEST_PREPARE,
        MessageType.TEST_START,
        MessageType.TEST_FINALIZE,
        MessageType.MSG_LOGOUT,
    ]


def test_session_without_implemented_tests():
    _, seen = asyncio.run(_with_server(_full_client, "18"))
    assert seen[2] == (MessageType.MSG_LOGIN, "")
    assert [t for t, _ in seen[3:]] == [MessageType.MSG_LOGOUT]


def test_concurrent_sessions_are_independent():
    async def two_clients(port):
        return await asyncio.gather(
            _full_client(port, "48", ("client=1",)),
            _full_client(port, "48", ("client=2",)),
        )

    results = asyncio.run(_with_server(two_clients))
    for _, seen in results:
        assert seen[-1] == (MessageType.MSG_LOGOUT, "")


@pytest.mark.parametrize("tests", ["4", "36"])
def test_login_without_status_closes_connection(tests):
    async def client(port):
        reader, writer = await _login(port, tests)
        data = await reader.read()
        writer.close()
        await writer.wait_closed()
        return data

    assert asyncio.run(_with_server(client)) == b""


def test_protocol_violation_aborts_without_logout():
    async def client(port):
        reader, writer = await _login(port, "48")
        await reader.readexactly(len(KICKOFF_TOKEN))
        for _ in range(5):  # queue, version, test list, prepare, start
            await read_standard_message(reader)
        await write_standard_message(writer, MessageType.MSG_LOGOUT, "")
        data = await reader.read()
        writer.close()
        await writer.wait_closed()
        return data

    assert asyncio.run(_with_server(client)) == b""
