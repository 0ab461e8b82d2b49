from .connection import ConnectionContext
from .orchestrator import ConnectionOrchestrator, OrchestratorState
from .server import SocketServer

__all__ = ["ConnectionContext", "ConnectionOrchestrator", "OrchestratorState", "SocketServer"]
