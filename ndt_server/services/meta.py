from __future__ import annotations

import asyncio
import logging
from typing import List

from ndt_shared.protocol.commands import MessageType, message_name
from ndt_shared.protocol.errors import ProtocolViolation
from ndt_shared.protocol.framing import read_standard_message, write_standard_message

logger = logging.getLogger(__name__)


class MetaTest:
    """Collects free-form metadata strings the client sends as TEST_MSG frames."""

    async def run(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> List[str]:
        await write_standard_message(writer, MessageType.TEST_PREPARE, "")
        await write_standard_message(writer, MessageType.TEST_START, "")

        # No item limit and no timeout: a client that never sends the empty
        # terminator and never disconnects keeps this handler waiting.
        items: List[str] = []
        while True:
            message_type, body = await read_standard_message(reader)
            if message_type != MessageType.TEST_MSG:
                raise ProtocolViolation(f"Expected TEST_MSG with metadata, got {message_name(message_type)}")
            if body == "":
                break
            logger.info("Metadata from client: %s", body)
            items.append(body)

        await write_standard_message(writer, MessageType.TEST_FINALIZE, "")
        return items


__all__ = ["MetaTest"]
