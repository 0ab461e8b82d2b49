from __future__ import annotations

import asyncio
import json
from typing import List

import pytest

from ndt_shared.protocol import Frame, MessageType, decode_frame, encode_frame


class RecordingWriter:
    """Stand-in for asyncio.StreamWriter that keeps everything written."""

    def __init__(self) -> None:
        self.data = bytearray()
        self.closed = False

    def write(self, data: bytes) -> None:
        self.data.extend(data)

    async def drain(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True

    async def wait_closed(self) -> None:
        pass

    def is_closing(self) -> bool:
        return self.closed

    def get_extra_info(self, name, default=None):
        return ("127.0.0.1", 40000) if name == "peername" else default


def split_frames(data: bytes) -> List[Frame]:
    frames = []
    while data:
        frame = decode_frame(data)
        frames.append(frame)
        data = data[3 + frame.length :]
    return frames


def standard_frame(message_type: int, msg: str) -> bytes:
    return encode_frame(message_type, json.dumps({"msg": msg}).encode("utf-8"))


@pytest.fixture
def writer() -> RecordingWriter:
    return RecordingWriter()


@pytest.fixture
def make_reader():
    """Build a StreamReader preloaded with `chunks`; call inside a running loop."""

    def _make(*chunks: bytes, eof: bool = True) -> asyncio.StreamReader:
        reader = asyncio.StreamReader()
        for chunk in chunks:
            reader.feed_data(chunk)
        if eof:
            reader.feed_eof()
        return reader

    return _make


@pytest.fixture
def frames_of():
    return split_frames


@pytest.fixture
def msg_frame():
    return standard_frame


@pytest.fixture
def client_msg():
    def _make(msg: str) -> bytes:
        return standard_frame(MessageType.TEST_MSG, msg)

    return _make
