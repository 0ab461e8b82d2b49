from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import List, Optional

from ndt_shared.protocol.messages import S2CResult


@dataclass
class ConnectionContext:
    """Per-connection session state, dropped when the handler returns."""

    reader: asyncio.StreamReader
    writer: asyncio.StreamWriter
    peername: str
    client_version: Optional[str] = None
    negotiated_tests: Optional[int] = None
    s2c_result: Optional[S2CResult] = None
    metadata: List[str] = field(default_factory=list)

    def mark_logged_in(self, client_version: str, negotiated_tests: int) -> None:
        if self.negotiated_tests is not None:
            raise RuntimeError("Test set already negotiated for this connection")
        self.client_version = client_version
        self.negotiated_tests = negotiated_tests
