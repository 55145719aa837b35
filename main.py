"""Main application for the Raspberry Pi weather logger."""

import sys
import logging
import signal
import argparse
from typing import Optional, List

from src.config import ConfigManager, ConfigError, StationConfig
from src.config.settings import DEBUG_SAMPLE_INTERVAL
from src.database import InfluxDBManager, InfluxDBError, ResilientPublisher, StartupGate, HealthCheckError
from src.processing import DataProcessor
from src.scheduling import SamplingScheduler
from src.sensor import BME280Sensor, SensorError

EXIT_OK = 0
EXIT_FAILURE = 1

DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(log_config: dict) -> None:
    """Setup logging configuration."""
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_config.get('file'):
        handlers.append(logging.FileHandler(log_config['file']))

    logging.basicConfig(
        level=getattr(logging, str(log_config.get('level', 'INFO')).upper(), logging.INFO),
        format=log_config.get('format', DEFAULT_LOG_FORMAT),
        handlers=handlers,
        force=True,
    )


class WeatherStationApp:
    """Wires the sensor, processor, publisher and scheduler together.

    ``run()`` is the single place that decides the process exit status.
    """

    def __init__(self, config: StationConfig, sensor=None, store=None, **scheduler_kwargs) -> None:
        """Initialize the application.

        Args:
            config: Station configuration
            sensor: Sensor to read; a BME280Sensor is created when None
            store: InfluxDB store; an InfluxDBManager is created when None
            scheduler_kwargs: Passed through to SamplingScheduler (sleep, clock, now)
        """
        self.config = config
        self.logger = logging.getLogger(__name__)
        self._scheduler_kwargs = scheduler_kwargs
        self._sensor = sensor
        self.store = store
        self.gate: Optional[StartupGate] = None
        self.scheduler: Optional[SamplingScheduler] = None
        self._stop_requested = False

    def _initialize(self) -> None:
        """Create the store client and the startup gate."""
        if self.store is None:
            self.store = InfluxDBManager(self.config.influxdb, timeout_seconds=self.config.retry.timeout_seconds)
        self.gate = StartupGate(self.store)

    def _build_scheduler(self) -> SamplingScheduler:
        sensor = self._sensor if self._sensor is not None else BME280Sensor(self.config.sensor)
        publisher = ResilientPublisher(
            self.store,
            measurement_name=self.config.measurement_name,
            sensor_name=self.config.sensor_name,
            policy=self.config.retry,
        )
        return SamplingScheduler(
            self.config,
            sensor,
            DataProcessor(self.config.elevation_meters),
            publisher,
            **self._scheduler_kwargs
        )

    def _signal_handler(self, signum, frame) -> None:
        """Handle shutdown signals."""
        self.logger.info(f"Received signal {signum}, shutting down gracefully...")
        self._stop_requested = True
        if self.scheduler:
            self.scheduler.stop()

    def install_signal_handlers(self) -> None:
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def run(self) -> int:
        """Check the store, then sample until stopped.

        Returns:
            Process exit status
        """
        try:
            self._initialize()
            self.gate.check_ready()
        except (InfluxDBError, HealthCheckError) as e:
            self.logger.critical(f"Startup check failed: {e}")
            return EXIT_FAILURE

        try:
            self.scheduler = self._build_scheduler()
            if self._stop_requested:
                self.scheduler.stop()
            self.scheduler.run()
        except SensorError as e:
            self.logger.critical(f"Sensor failure, exiting: {e}")
            return EXIT_FAILURE

        return EXIT_OK

    def cleanup(self) -> None:
        """Cleanup resources."""
        if self.store is not None and hasattr(self.store, 'close'):
            self.store.close()

        self.logger.info("Weather logger shutdown complete")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.cleanup()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Sample a BME280 sensor and log readings to InfluxDB')
    parser.add_argument('--config', '-c', help='Path to YAML configuration file')
    parser.add_argument('--influx-server',
                        help="InfluxDB server, including protocol and port, eg. 'http://192.168.1.1:8086'. Required.")
    parser.add_argument('--influx-username', help='InfluxDB username.')
    parser.add_argument('--influx-password', help='InfluxDB password.')
    parser.add_argument('--influx-token', help='InfluxDB API token (InfluxDB 2.x).')
    parser.add_argument('--influx-org', help="InfluxDB organization (default: '-').")
    parser.add_argument('--influx-bucket',
                        help="InfluxDB bucket. Supply a string in the form 'database/retention-policy'. "
                             "For the default retention policy, pass just a database name. Required.")
    parser.add_argument('--sensor-name', help='Value for the sensor_name tag in InfluxDB. Required.')
    parser.add_argument('--measurement-name', help="Measurement name in InfluxDB (default: 'pi_wx').")
    parser.add_argument('--log-readings', action='store_true', default=None,
                        help='Log temperature/humidity/pressure readings.')
    parser.add_argument('--elevation-meters', type=float,
                        help='Elevation in meters, used for mean sea level pressure (default: 259.08).')
    parser.add_argument('--interval', '-i', type=float,
                        help='Sample interval in seconds (default: 60).')
    parser.add_argument('--debug-interval', action='store_true', default=None,
                        help='Sample every 10 seconds, for development. Overrides a configured '
                             'interval; --interval takes precedence.')
    parser.add_argument('--i2c-address', help='BME280 I2C address (default: 0x77).')
    return parser


def overrides_from_args(args: argparse.Namespace) -> dict:
    """Map parsed flags onto dotted configuration paths."""
    interval = args.interval
    if interval is None and args.debug_interval:
        interval = DEBUG_SAMPLE_INTERVAL

    return {
        'influxdb.url': args.influx_server,
        'influxdb.username': args.influx_username,
        'influxdb.password': args.influx_password,
        'influxdb.token': args.influx_token,
        'influxdb.org': args.influx_org,
        'influxdb.bucket': args.influx_bucket,
        'station.sensor_name': args.sensor_name,
        'station.measurement_name': args.measurement_name,
        'station.log_readings': args.log_readings,
        'station.elevation_meters': args.elevation_meters,
        'station.sample_interval': interval,
        'sensor.i2c_address': args.i2c_address,
    }


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config_manager = ConfigManager(args.config, overrides_from_args(args))
        config = config_manager.build_station_config()
    except (ConfigError, FileNotFoundError) as e:
        print(e, file=sys.stderr)
        sys.exit(EXIT_FAILURE)

    setup_logging(config_manager.get_logging_config())

    with WeatherStationApp(config) as app:
        app.install_signal_handlers()
        status = app.run()

    sys.exit(status)


if __name__ == '__main__':
    main()
