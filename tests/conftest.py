"""Shared fixtures for the weather logger tests."""

import pytest

from src.config.settings import InfluxDBSettings, RetrySettings, StationConfig

CONFIG_ENV_VARS = [
    'CONFIG_PATH',
    'INFLUXDB_URL',
    'INFLUXDB_BUCKET',
    'INFLUXDB_ORG',
    'INFLUXDB_TOKEN',
    'INFLUXDB_USERNAME',
    'INFLUXDB_PASSWORD',
    'SENSOR_NAME',
    'MEASUREMENT_NAME',
    'ELEVATION_METERS',
    'SAMPLE_INTERVAL',
    'LOG_READINGS',
    'BME280_ADDRESS',
    'LOG_LEVEL',
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove configuration environment variables and run from an empty directory."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def station_config():
    """A complete station configuration pointing at a local InfluxDB."""
    return StationConfig(
        influxdb=InfluxDBSettings(url='http://localhost:8086', bucket='weather/autogen'),
        sensor_name='porch',
        retry=RetrySettings(max_attempts=3, timeout_seconds=5.0),
    )


class FakeClock:
    """Monotonic clock whose sleep advances time instantly."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()
