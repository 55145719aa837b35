"""InfluxDB access: client wrapper, startup health gate and retrying publisher."""

from .influxdb_client import InfluxDBManager, InfluxDBError
from .publisher import ResilientPublisher
from .startup_gate import StartupGate, HealthCheckError

__all__ = [
    'InfluxDBManager',
    'InfluxDBError',
    'ResilientPublisher',
    'StartupGate',
    'HealthCheckError',
]
