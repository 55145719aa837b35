"""Data structures passed through the sampling pipeline."""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional, Union


@dataclass(frozen=True)
class RawReading:
    """One reading straight from the sensor."""

    temperature_c: float
    humidity_pct: float
    raw_pressure_pa: float


@dataclass(frozen=True)
class DerivedSample:
    """A sensor reading plus the metrics derived from it, ready to publish."""

    temperature_f: float
    dew_point_f: float
    recommended_max_indoor_humidity_pct: int
    temperature_c: float
    humidity_pct: float
    raw_pressure_pa: float
    pressure_pa: float
    pressure_mb: float
    pressure_inhg: float
    timestamp: datetime

    def as_fields(self) -> Dict[str, Union[int, float]]:
        """Return the sample as InfluxDB point fields."""
        return {
            "temperature_f": self.temperature_f,
            "dew_point_f": self.dew_point_f,
            "recommended_max_indoor_humidity": self.recommended_max_indoor_humidity_pct,
            "temperature_c": self.temperature_c,
            "humidity": self.humidity_pct,
            "raw_pressure_pa": self.raw_pressure_pa,
            "pressure_pa": self.pressure_pa,
            "pressure_mb": self.pressure_mb,
            "pressure_inHg": self.pressure_inhg,
        }


@dataclass(frozen=True)
class PublishOutcome:
    """Result of publishing one sample."""

    success: bool
    attempts: int
    error: Optional[str] = None
