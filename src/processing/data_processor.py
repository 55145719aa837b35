"""Data processor that turns raw sensor readings into publishable samples."""

import logging
from typing import List
from datetime import datetime

from .conversions import (
    dew_point_approx,
    recommended_max_indoor_humidity,
    sea_level_pressure,
    to_fahrenheit,
    to_inches_hg,
    to_millibar,
)
from .models import DerivedSample, RawReading


class DataProcessor:
    """Derives secondary weather metrics from BME280 readings."""

    def __init__(self, elevation_meters: float) -> None:
        """Initialize data processor.

        Args:
            elevation_meters: Station elevation, used for the sea level
                              pressure adjustment
        """
        self.elevation_meters = elevation_meters
        self.logger = logging.getLogger(__name__)

    def derive_sample(self, reading: RawReading, timestamp: datetime) -> DerivedSample:
        """Compute a DerivedSample from a raw reading.

        The result depends only on the reading, the configured elevation and
        the timestamp.

        Args:
            reading: Raw sensor reading
            timestamp: Capture time of the reading

        Returns:
            The derived sample
        """
        temperature_f = to_fahrenheit(reading.temperature_c)
        pressure_pa = sea_level_pressure(reading.raw_pressure_pa, self.elevation_meters)

        return DerivedSample(
            temperature_f=temperature_f,
            dew_point_f=dew_point_approx(temperature_f, reading.humidity_pct),
            recommended_max_indoor_humidity_pct=recommended_max_indoor_humidity(temperature_f),
            temperature_c=reading.temperature_c,
            humidity_pct=reading.humidity_pct,
            raw_pressure_pa=reading.raw_pressure_pa,
            pressure_pa=pressure_pa,
            pressure_mb=to_millibar(pressure_pa),
            pressure_inhg=to_inches_hg(pressure_pa),
            timestamp=timestamp,
        )

    def format_for_logging(self, sample: DerivedSample) -> List[str]:
        """Format a sample as human readable log lines.

        Args:
            sample: Derived sample

        Returns:
            One line each for temperature, humidity, pressure and the indoor
            humidity recommendation
        """
        return [
            f"temp: {sample.temperature_f:.1f} degF",
            f"humidity: {sample.humidity_pct:.1f}%; dew point: {sample.dew_point_f:.1f} degF",
            f"pressure (MSLP): {sample.pressure_mb:.1f} mB ({sample.pressure_inhg:.2f} inHg)",
            f"max. recommended indoor humidity: {sample.recommended_max_indoor_humidity_pct}%",
        ]

    def log_sample(self, sample: DerivedSample) -> None:
        for line in self.format_for_logging(sample):
            self.logger.info(line)
