from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from ndt_shared.protocol.errors import ProtocolError

from .connection import ConnectionContext
from .orchestrator import ConnectionOrchestrator

logger = logging.getLogger(__name__)


class SocketServer:
    """
    Accepts control connections; asyncio runs each handler in its own task.
    Handlers are never awaited or counted by the accept side.
    """

    def __init__(self, host: str, port: int, config: Dict[str, Any]) -> None:
        self.host = host
        self.port = port
        self.config = config
        self._server: Optional[asyncio.AbstractServer] = None

    @property
    def bound_port(self) -> int:
        if not self._server or not self._server.sockets:
            raise RuntimeError("Server is not listening")
        return self._server.sockets[0].getsockname()[1]

    async def start(self) -> None:
        self._server = await asyncio.start_server(self._handle_client, self.host, self.port)
        logger.info("NDT server listening on %s:%s", self.host, self.bound_port)

    async def stop(self) -> None:
        if self._server:
            self._server.close()
            await self._server.wait_closed()
            self._server = None

    async def serve_forever(self) -> None:
        if not self._server:
            await self.start()
        assert self._server is not None
        await self._server.serve_forever()

    async def _handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        ctx = ConnectionContext(reader=reader, writer=writer, peername=str(writer.get_extra_info("peername")))
        orchestrator = ConnectionOrchestrator(ctx, self.config)
        logger.info("Client %s connected", ctx.peername)
        try:
            await orchestrator.run()
            logger.info("Client %s completed tests", ctx.peername)
        except ProtocolError as exc:
            logger.warning("Protocol error for %s in %s: %s", ctx.peername, orchestrator.state, exc)
        except (ConnectionResetError, ConnectionAbortedError, BrokenPipeError, OSError) as exc:
            logger.info("Client %s connection lost in %s: %s", ctx.peername, orchestrator.state, exc)
        except Exception as exc:
            logger.exception("Unhandled error for %s: %s", ctx.peername, exc)
        finally:
            await orchestrator.close()
