"""Configuration loading and the immutable station settings."""

from .config_manager import ConfigManager, ConfigError
from .settings import InfluxDBSettings, RetrySettings, SensorSettings, StationConfig

__all__ = [
    'ConfigManager',
    'ConfigError',
    'InfluxDBSettings',
    'RetrySettings',
    'SensorSettings',
    'StationConfig',
]
