"""Configuration manager for the weather logger."""

import math
import os
import yaml
from typing import Dict, Any, Optional

from .settings import (
    DEBUG_SAMPLE_INTERVAL,
    DEFAULT_BME280_ADDRESS,
    DEFAULT_ELEVATION_METERS,
    DEFAULT_INFLUXDB_ORG,
    DEFAULT_MEASUREMENT_NAME,
    DEFAULT_SAMPLE_INTERVAL,
    InfluxDBSettings,
    RetrySettings,
    SensorSettings,
    StationConfig,
)
from ..processing.conversions import MAX_ELEVATION_METERS


class ConfigError(ValueError):
    """Raised when the configuration is incomplete or invalid."""
    pass


_TRUE_STRINGS = {'1', 'true', 'yes', 'on'}
_FALSE_STRINGS = {'0', 'false', 'no', 'off', ''}


class ConfigManager:
    """Loads configuration from YAML, environment variables and CLI overrides.

    Precedence, highest first: CLI overrides, environment variables, the YAML
    file, built-in defaults.
    """

    def __init__(self, config_path: Optional[str] = None,
                 overrides: Optional[Dict[str, Any]] = None) -> None:
        """Initialize configuration manager.

        Args:
            config_path: Path to configuration file. If None, looks for config.yaml
                        via CONFIG_PATH and the current directory; running without
                        a file is allowed.
            overrides: Values keyed by dotted path (e.g. 'influxdb.url'), usually
                       from command line flags. None values are ignored.
        """
        if config_path is not None and not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        self._config_path = config_path or self._find_config_file()
        self._config: Dict[str, Any] = {}
        self._load_config(overrides or {})

    def _find_config_file(self) -> Optional[str]:
        """Find configuration file in standard locations."""
        possible_paths = [
            os.environ.get('CONFIG_PATH'),
            'config.yaml',
        ]

        for path in possible_paths:
            if path and os.path.exists(path):
                return os.path.abspath(path)

        return None

    def _load_config(self, overrides: Dict[str, Any]) -> None:
        """Load configuration from YAML file, environment variables and overrides."""
        if self._config_path:
            try:
                with open(self._config_path, 'r') as file:
                    self._config = yaml.safe_load(file) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigError(f"Failed to load configuration: {e}") from e

            if not isinstance(self._config, dict):
                raise ConfigError(f"Configuration file {self._config_path} must contain a mapping")

        # Override with environment variables
        self._apply_env_overrides()

        for path, value in overrides.items():
            if value is not None:
                self._set_nested_value(path.split('.'), value)

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        env_mappings = {
            'INFLUXDB_URL': ['influxdb', 'url'],
            'INFLUXDB_BUCKET': ['influxdb', 'bucket'],
            'INFLUXDB_ORG': ['influxdb', 'org'],
            'INFLUXDB_TOKEN': ['influxdb', 'token'],
            'INFLUXDB_USERNAME': ['influxdb', 'username'],
            'INFLUXDB_PASSWORD': ['influxdb', 'password'],
            'SENSOR_NAME': ['station', 'sensor_name'],
            'MEASUREMENT_NAME': ['station', 'measurement_name'],
            'ELEVATION_METERS': ['station', 'elevation_meters'],
            'SAMPLE_INTERVAL': ['station', 'sample_interval'],
            'LOG_READINGS': ['station', 'log_readings'],
            'BME280_ADDRESS': ['sensor', 'i2c_address'],
            'LOG_LEVEL': ['logging', 'level'],
        }

        for env_var, config_path in env_mappings.items():
            value = os.environ.get(env_var)
            if value:
                self._set_nested_value(config_path, value)

    def _set_nested_value(self, path: list, value: Any) -> None:
        """Set nested configuration value."""
        current = self._config
        for key in path[:-1]:
            if not isinstance(current.get(key), dict):
                current[key] = {}
            current = current[key]
        current[path[-1]] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation.

        Args:
            path: Configuration path using dot notation (e.g., 'influxdb.url')
            default: Default value if path not found

        Returns:
            Configuration value or default
        """
        keys = path.split('.')
        current = self._config

        try:
            for key in keys:
                current = current[key]
            return current
        except (KeyError, TypeError):
            return default

    def get_influxdb_config(self) -> Dict[str, Any]:
        """Get InfluxDB configuration."""
        return dict(self._config.get('influxdb') or {})

    def get_station_config(self) -> Dict[str, Any]:
        """Get station configuration."""
        return dict(self._config.get('station') or {})

    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return dict(self._config.get('logging') or {})

    def get_retry_config(self) -> Dict[str, Any]:
        """Get retry configuration."""
        return self._config.get('retry') or {
            'max_attempts': 3,
            'timeout_seconds': 5.0,
            'initial_delay': 0.0,
            'backoff_factor': 2,
        }

    def build_station_config(self) -> StationConfig:
        """Validate the loaded values and freeze them into a StationConfig.

        Raises:
            ConfigError: If a required value is missing or a value is invalid
        """
        influxdb = self.get_influxdb_config()
        station = self.get_station_config()

        if not influxdb.get('url') or not influxdb.get('bucket'):
            raise ConfigError("--influx-bucket and --influx-server must be supplied.")
        if not station.get('sensor_name'):
            raise ConfigError("--sensor-name must be supplied.")

        elevation = _as_float('station.elevation_meters',
                              station.get('elevation_meters', DEFAULT_ELEVATION_METERS))
        if not math.isfinite(elevation) or elevation >= MAX_ELEVATION_METERS:
            raise ConfigError(
                f"Elevation {elevation} m is out of range; it must be finite and "
                f"below {MAX_ELEVATION_METERS:g} m"
            )

        if station.get('sample_interval') is not None:
            interval = _as_float('station.sample_interval', station['sample_interval'])
        elif _as_bool('station.debug_interval', station.get('debug_interval', False)):
            interval = DEBUG_SAMPLE_INTERVAL
        else:
            interval = DEFAULT_SAMPLE_INTERVAL
        if not math.isfinite(interval) or not interval > 0:
            raise ConfigError(f"Sample interval must be a positive number of seconds, got {interval}")

        return StationConfig(
            influxdb=InfluxDBSettings(
                url=str(influxdb['url']),
                bucket=str(influxdb['bucket']),
                org=str(influxdb.get('org') or DEFAULT_INFLUXDB_ORG),
                token=influxdb.get('token') or None,
                username=influxdb.get('username') or None,
                password=influxdb.get('password') or None,
            ),
            sensor_name=str(station['sensor_name']),
            measurement_name=str(station.get('measurement_name') or DEFAULT_MEASUREMENT_NAME),
            elevation_meters=elevation,
            sample_interval=interval,
            log_readings=_as_bool('station.log_readings', station.get('log_readings', False)),
            retry=self._build_retry_settings(),
            sensor=SensorSettings(
                i2c_address=_as_int('sensor.i2c_address',
                                    self.get('sensor.i2c_address', DEFAULT_BME280_ADDRESS)),
            ),
        )

    def _build_retry_settings(self) -> RetrySettings:
        retry = self.get_retry_config()
        defaults = RetrySettings()
        settings = RetrySettings(
            max_attempts=_as_int('retry.max_attempts', retry.get('max_attempts', defaults.max_attempts)),
            timeout_seconds=_as_float('retry.timeout_seconds',
                                      retry.get('timeout_seconds', defaults.timeout_seconds)),
            initial_delay=_as_float('retry.initial_delay', retry.get('initial_delay', defaults.initial_delay)),
            backoff_factor=_as_float('retry.backoff_factor',
                                     retry.get('backoff_factor', defaults.backoff_factor)),
        )
        if settings.max_attempts < 1:
            raise ConfigError("retry.max_attempts must be at least 1")
        if not settings.timeout_seconds > 0:
            raise ConfigError("retry.timeout_seconds must be positive")
        if settings.initial_delay < 0:
            raise ConfigError("retry.initial_delay must not be negative")
        return settings

    @property
    def config_path(self) -> Optional[str]:
        """Get path to configuration file."""
        return self._config_path


def _as_float(name: str, value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number, got {value!r}")


def _as_int(name: str, value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        # accepts '119' as well as '0x77'
        return int(str(value), 0)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}")


def _as_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise ConfigError(f"{name} must be a boolean, got {value!r}")
