"""BME280 temperature/humidity/pressure sensor on the Raspberry Pi I2C bus."""

import logging
from typing import Optional

try:
    import board
    import busio
    from adafruit_bme280 import basic as adafruit_bme280
except (ImportError, NotImplementedError, RuntimeError) as e:
    # Blinka raises NotImplementedError on hosts that aren't a supported board
    logging.warning(f"BME280 hardware libraries not available: {e}")
    board = None
    busio = None
    adafruit_bme280 = None

from ..config.settings import SensorSettings
from ..processing.models import RawReading

PASCALS_PER_HECTOPASCAL = 100.0


class SensorError(Exception):
    """Raised when the sensor cannot be initialized."""
    pass


class SensorReadError(SensorError):
    """Raised when a reading cannot be taken from the sensor."""
    pass


class BME280Sensor:
    """Reads the BME280 over I2C."""

    def __init__(self, settings: SensorSettings = SensorSettings()) -> None:
        """Initialize the sensor.

        Args:
            settings: Sensor settings (I2C address)
        """
        self.settings = settings
        self.logger = logging.getLogger(__name__)
        self.bme280: Optional[object] = None
        self._initialize_sensor()

    def _initialize_sensor(self) -> None:
        """Open the I2C bus and attach the BME280 driver."""
        if not all([board, busio, adafruit_bme280]):
            raise SensorError("BME280 hardware libraries not available")

        try:
            i2c = busio.I2C(board.SCL, board.SDA)
            self.bme280 = adafruit_bme280.Adafruit_BME280_I2C(i2c, address=self.settings.i2c_address)
        except Exception as e:
            self.logger.error(f"Failed to initialize BME280: {e}")
            raise SensorError(f"BME280 initialization failed: {e}") from e

        self.logger.info(f"BME280 initialized at I2C address {self.settings.i2c_address:#04x}")

    def read(self) -> RawReading:
        """Take one reading.

        Returns:
            RawReading with temperature in Celsius, relative humidity in percent
            and station pressure in pascals

        Raises:
            SensorReadError: If any of the three measurements fails
        """
        if not self.bme280:
            raise SensorReadError("BME280 not initialized")

        try:
            temperature_c = float(self.bme280.temperature)
        except Exception as e:
            raise SensorReadError(f"failed to read temperature from BME280: {e}") from e
        try:
            humidity_pct = float(self.bme280.relative_humidity)
        except Exception as e:
            raise SensorReadError(f"failed to read humidity from BME280: {e}") from e
        try:
            # driver reports hPa
            raw_pressure_pa = float(self.bme280.pressure) * PASCALS_PER_HECTOPASCAL
        except Exception as e:
            raise SensorReadError(f"failed to read pressure from BME280: {e}") from e

        return RawReading(
            temperature_c=temperature_c,
            humidity_pct=humidity_pct,
            raw_pressure_pa=raw_pressure_pa,
        )
