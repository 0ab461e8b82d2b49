from __future__ import annotations

import asyncio
import logging
import socket
import time
from enum import StrEnum
from typing import Tuple

from ndt_shared.protocol.commands import MessageType, message_name
from ndt_shared.protocol.constants import DEFAULT_S2C_DURATION, ENCODING, S2C_BUFFER_SIZE, S2C_FILL_BYTE
from ndt_shared.protocol.errors import ErrorCode, ProtocolViolation, ResourceError
from ndt_shared.protocol.framing import read_standard_message, write_frame, write_standard_message
from ndt_shared.protocol.messages import S2CResult
from ndt_shared.protocol.validator import validate_body

logger = logging.getLogger(__name__)


class S2CState(StrEnum):
    AWAIT_PORT_ANNOUNCE = "await_port_announce"
    AWAIT_DATA_CONNECT = "await_data_connect"
    STREAMING = "streaming"
    AWAIT_CLIENT_REPORT = "await_client_report"
    COMPLETE = "complete"


def compute_throughput(total_bytes: int, elapsed_seconds: float) -> float:
    """Throughput in kbit/s over the measured (not nominal) window."""
    if elapsed_seconds <= 0:
        raise ValueError("elapsed_seconds must be positive")
    return 8 * total_bytes / 1000 / elapsed_seconds


class S2CTest:
    """Server-to-client throughput test over a dedicated data connection."""

    def __init__(self, host: str, port: int, duration: float = DEFAULT_S2C_DURATION) -> None:
        self.host = host
        self.port = port
        self.duration = duration
        self.state = S2CState.AWAIT_PORT_ANNOUNCE

    async def run(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> S2CResult:
        listener = self._bind()
        try:
            port = listener.getsockname()[1]
            await write_standard_message(writer, MessageType.TEST_PREPARE, str(port))
            self._transition(S2CState.AWAIT_DATA_CONNECT)

            data_writer = await self._accept(listener)
            try:
                await write_standard_message(writer, MessageType.TEST_START, "")
                self._transition(S2CState.STREAMING)
                total_bytes, elapsed = await self._stream(data_writer)
            finally:
                # closing tells the client the stream is over
                await _close_writer(data_writer)
        finally:
            listener.close()

        throughput = compute_throughput(total_bytes, elapsed)
        result = S2CResult.from_measurement(total_bytes, throughput)
        logger.info("S2C sent %s bytes in %.3fs (%s kbit/s)", total_bytes, elapsed, result.throughput_kbits)
        validate_body(result.model_dump(by_alias=True), "s2c_result")
        await write_frame(writer, MessageType.TEST_MSG, result.to_json().encode(ENCODING))
        self._transition(S2CState.AWAIT_CLIENT_REPORT)

        message_type, client_speed = await read_standard_message(reader)
        if message_type != MessageType.TEST_MSG:
            raise ProtocolViolation(f"Expected TEST_MSG with client speed, got {message_name(message_type)}")
        logger.info("Client measured speed: %s", client_speed)

        await write_standard_message(writer, MessageType.TEST_FINALIZE, "")
        self._transition(S2CState.COMPLETE)
        return result

    def _transition(self, state: S2CState) -> None:
        logger.debug("S2C %s -> %s", self.state, state)
        self.state = state

    def _bind(self) -> socket.socket:
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            listener.bind((self.host, self.port))
            listener.listen(1)
            listener.setblocking(False)
        except OSError as exc:
            listener.close()
            raise ResourceError(ErrorCode.BIND_ERROR, f"Cannot bind S2C port {self.port}: {exc}") from exc
        return listener

    async def _accept(self, listener: socket.socket) -> asyncio.StreamWriter:
        loop = asyncio.get_running_loop()
        try:
            conn, addr = await loop.sock_accept(listener)
        except OSError as exc:
            raise ResourceError(ErrorCode.DATA_CONNECT_ERROR, f"S2C accept failed: {exc}") from exc
        try:
            _, data_writer = await asyncio.open_connection(sock=conn)
        except OSError as exc:
            conn.close()
            raise ResourceError(ErrorCode.DATA_CONNECT_ERROR, f"S2C data connection failed: {exc}") from exc
        logger.debug("S2C data connection from %s", addr)
        return data_writer

    async def _stream(self, data_writer: asyncio.StreamWriter) -> Tuple[int, float]:
        buffer = S2C_FILL_BYTE * S2C_BUFFER_SIZE
        total_bytes = 0
        start = time.monotonic()
        try:
            while True:
                data_writer.write(buffer)
                await data_writer.drain()
                total_bytes += len(buffer)
                if time.monotonic() - start > self.duration:
                    logger.debug("S2C measurement window elapsed")
                    break
        except OSError as exc:
            # partial result, still reported by the caller
            logger.warning("S2C stream stopped early: %s", exc)
        return total_bytes, time.monotonic() - start


async def _close_writer(writer: asyncio.StreamWriter) -> None:
    try:
        writer.close()
        await writer.wait_closed()
    except OSError as exc:
        logger.debug("Error closing S2C data connection: %s", exc)


__all__ = ["S2CState", "S2CTest", "compute_throughput"]
