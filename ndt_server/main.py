from __future__ import annotations

import asyncio
import logging

from ndt_server.config import SERVER_CONFIG, load_server_config
from ndt_server.core import SocketServer


async def run_server() -> None:
    load_server_config()
    logging.basicConfig(
        level=SERVER_CONFIG["log_level"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    server = SocketServer(SERVER_CONFIG["host"], SERVER_CONFIG["port"], SERVER_CONFIG)
    await server.start()
    try:
        await server.serve_forever()
    finally:
        await server.stop()


def main() -> None:
    try:
        asyncio.run(run_server())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
