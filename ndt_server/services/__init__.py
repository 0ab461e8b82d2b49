from .login import describe_tests, negotiate, read_extended_login
from .meta import MetaTest
from .s2c import S2CState, S2CTest, compute_throughput

__all__ = [
    "read_extended_login",
    "negotiate",
    "describe_tests",
    "MetaTest",
    "S2CTest",
    "S2CState",
    "compute_throughput",
]
