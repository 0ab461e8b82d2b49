from __future__ import annotations

import logging
from enum import StrEnum
from typing import Any, Dict

from ndt_shared.protocol.commands import MessageType, TestCapability
from ndt_shared.protocol.constants import (
    KICKOFF_TOKEN,
    PROTOCOL_VERSION,
    QUEUE_NOT_QUEUED,
    SERVER_PACKAGE_VERSION,
    SERVER_PRODUCT,
)
from ndt_shared.protocol.framing import write_raw_string, write_standard_message
from ndt_server.services.login import describe_tests, negotiate, read_extended_login
from ndt_server.services.meta import MetaTest
from ndt_server.services.s2c import S2CTest

from .connection import ConnectionContext

logger = logging.getLogger(__name__)

PRODUCT = f"{SERVER_PRODUCT}/{SERVER_PACKAGE_VERSION}"
SERVER_VERSION = f"{PROTOCOL_VERSION} ({PRODUCT})"


class OrchestratorState(StrEnum):
    LOGIN = "login"
    QUEUE_ANNOUNCE = "queue_announce"
    VERSION_EXCHANGE = "version_exchange"
    TEST_LIST_ANNOUNCE = "test_list_announce"
    RUN_S2C = "run_s2c"
    RUN_META = "run_meta"
    LOGOUT = "logout"
    CLOSED = "closed"


class ConnectionOrchestrator:
    """
    Drives one control connection from login to logout.

    The sequence is strictly linear. Any exception escapes to the caller,
    which closes the socket; only a completed run sends MSG_LOGOUT.
    MSG_RESULTS and MSG_ERROR are never sent.
    """

    def __init__(self, ctx: ConnectionContext, config: Dict[str, Any]) -> None:
        self.ctx = ctx
        self.config = config
        self.state = OrchestratorState.LOGIN

    async def run(self) -> None:
        reader, writer = self.ctx.reader, self.ctx.writer

        login = await read_extended_login(reader)
        self.ctx.mark_logged_in(login.client_version, negotiate(login.requested_tests))
        await write_raw_string(writer, KICKOFF_TOKEN)

        self._transition(OrchestratorState.QUEUE_ANNOUNCE)
        await write_standard_message(writer, MessageType.SRV_QUEUE, QUEUE_NOT_QUEUED)

        self._transition(OrchestratorState.VERSION_EXCHANGE)
        await write_standard_message(writer, MessageType.MSG_LOGIN, SERVER_VERSION)

        self._transition(OrchestratorState.TEST_LIST_ANNOUNCE)
        negotiated = self.ctx.negotiated_tests
        await write_standard_message(writer, MessageType.MSG_LOGIN, describe_tests(negotiated))

        # fixed server order, whatever order the client listed
        if negotiated & TestCapability.S2C:
            self._transition(OrchestratorState.RUN_S2C)
            s2c = S2CTest(self.config["host"], self.config["s2c_port"], self.config["s2c_duration"])
            self.ctx.s2c_result = await s2c.run(reader, writer)
        if negotiated & TestCapability.META:
            self._transition(OrchestratorState.RUN_META)
            self.ctx.metadata = await MetaTest().run(reader, writer)

        self._transition(OrchestratorState.LOGOUT)
        await write_standard_message(writer, MessageType.MSG_LOGOUT, "")

    async def close(self) -> None:
        writer = self.ctx.writer
        try:
            writer.close()
            await writer.wait_closed()
        except OSError as e:
            logger.debug("Error during writer cleanup for %s: %s", self.ctx.peername, e)
        finally:
            self._transition(OrchestratorState.CLOSED)

    def _transition(self, state: OrchestratorState) -> None:
        logger.debug("Connection %s: %s -> %s", self.ctx.peername, self.state, state)
        self.state = state
