"""Immutable settings built once at startup."""

from dataclasses import dataclass, field
from typing import Optional

DEFAULT_MEASUREMENT_NAME = "pi_wx"
DEFAULT_ELEVATION_METERS = 259.08
DEFAULT_SAMPLE_INTERVAL = 60.0
DEBUG_SAMPLE_INTERVAL = 10.0
DEFAULT_INFLUXDB_ORG = "-"
DEFAULT_BME280_ADDRESS = 0x77


@dataclass(frozen=True)
class InfluxDBSettings:
    """Connection settings for the InfluxDB store."""

    url: str
    bucket: str
    org: str = DEFAULT_INFLUXDB_ORG
    token: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    @property
    def auth_token(self) -> str:
        """Token to hand to the client.

        An explicit token wins. Otherwise username/password are combined into
        the ``user:pass`` form InfluxDB 1.8 accepts on its v2 compatibility API.
        """
        if self.token:
            return self.token
        if self.username or self.password:
            return f"{self.username or ''}:{self.password or ''}"
        return ""


@dataclass(frozen=True)
class RetrySettings:
    """Publish retry policy. The defaults retry immediately, three times."""

    max_attempts: int = 3
    timeout_seconds: float = 5.0
    initial_delay: float = 0.0
    backoff_factor: float = 2.0

    def delay_before(self, attempt: int) -> float:
        """Seconds to wait before the given (1-based) retry attempt."""
        if attempt <= 1:
            return 0.0
        return self.initial_delay * (self.backoff_factor ** (attempt - 2))


@dataclass(frozen=True)
class SensorSettings:
    i2c_address: int = DEFAULT_BME280_ADDRESS


@dataclass(frozen=True)
class StationConfig:
    """Everything the running station needs, fixed for the process lifetime."""

    influxdb: InfluxDBSettings
    sensor_name: str
    measurement_name: str = DEFAULT_MEASUREMENT_NAME
    elevation_meters: float = DEFAULT_ELEVATION_METERS
    sample_interval: float = DEFAULT_SAMPLE_INTERVAL
    log_readings: bool = False
    retry: RetrySettings = field(default_factory=RetrySettings)
    sensor: SensorSettings = field(default_factory=SensorSettings)
