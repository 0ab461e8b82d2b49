"""Protocol-wide constants shared by client and server."""

ENCODING = "utf-8"
HEADER_SIZE = 3  # 1 byte type + 2 bytes big-endian length
MAX_BODY_SIZE = 65535

PROTOCOL_VERSION = "v3.7.0"
SERVER_PRODUCT = "ndt-server"
SERVER_PACKAGE_VERSION = "0.1.0"  # pyproject.toml reads the distribution version from here
KICKOFF_TOKEN = "123456 654321"  # legacy greeting, written unframed
QUEUE_NOT_QUEUED = "0"  # SRV_QUEUE placeholder, no admission control

S2C_BUFFER_SIZE = 8192
S2C_FILL_BYTE = b"A"
DEFAULT_S2C_PORT = 3010
DEFAULT_S2C_DURATION = 10.0  # seconds

__all__ = [
    "ENCODING",
    "HEADER_SIZE",
    "MAX_BODY_SIZE",
    "PROTOCOL_VERSION",
    "SERVER_PRODUCT",
    "SERVER_PACKAGE_VERSION",
    "KICKOFF_TOKEN",
    "QUEUE_NOT_QUEUED",
    "S2C_BUFFER_SIZE",
    "S2C_FILL_BYTE",
    "DEFAULT_S2C_PORT",
    "DEFAULT_S2C_DURATION",
]
