"""Unit conversions and derived weather metrics."""

# Altitude at which the barometric formula's base term reaches zero.
MAX_ELEVATION_METERS = 44330.0
BAROMETRIC_EXPONENT = 5.255

PASCALS_PER_MILLIBAR = 100.0
INHG_PER_PASCAL = 0.0002953

# (lower bound in degF, recommended max indoor RH%), highest band first
INDOOR_HUMIDITY_BANDS = (
    (50.0, 50),
    (40.0, 45),
    (30.0, 40),
    (20.0, 35),
    (10.0, 30),
    (0.0, 25),
    (-10.0, 20),
)
COLDEST_INDOOR_HUMIDITY = 15


def to_fahrenheit(celsius: float) -> float:
    """Convert degrees Celsius to degrees Fahrenheit."""
    return celsius * 1.8 + 32.0


def to_millibar(pascals: float) -> float:
    """Convert a pressure in pascals to millibars."""
    return pascals / PASCALS_PER_MILLIBAR


def from_millibar(millibars: float) -> float:
    return millibars * PASCALS_PER_MILLIBAR


def to_inches_hg(pascals: float) -> float:
    """Convert a pressure in pascals to inches of mercury."""
    return pascals * INHG_PER_PASCAL


def from_inches_hg(inches: float) -> float:
    return inches / INHG_PER_PASCAL


def _altitude_factor(altitude_meters: float) -> float:
    return (1.0 - (altitude_meters / MAX_ELEVATION_METERS)) ** BAROMETRIC_EXPONENT


def sea_level_pressure(raw_pressure_pa: float, altitude_meters: float) -> float:
    """Adjust a station pressure reading to mean sea level pressure (MSLP).

    Uses the standard barometric formula, see
    https://www.weather.gov/bou/pressure_definitions

    Args:
        raw_pressure_pa: Pressure measured at the station, in pascals
        altitude_meters: Station elevation in meters

    Returns:
        Sea level pressure in pascals. The result is meaningless for
        altitudes at or above MAX_ELEVATION_METERS; configuration loading
        rejects those elevations.
    """
    return raw_pressure_pa / _altitude_factor(altitude_meters)


def station_pressure(sea_level_pa: float, altitude_meters: float) -> float:
    """Inverse of sea_level_pressure."""
    return sea_level_pa * _altitude_factor(altitude_meters)


def dew_point_approx(temp_f: float, humidity_pct: float) -> float:
    """Approximate the dew point in degrees Fahrenheit.

    This is the simple linear rule of thumb (roughly 0.36 degF per percent
    of relative humidity below saturation), not the Magnus formula. It is
    reasonably close at moderate temperatures and humidities above ~50%.
    """
    return temp_f - ((100.0 - humidity_pct) * (9.0 / 25.0))


def recommended_max_indoor_humidity(outdoor_temp_f: float) -> int:
    """Return the maximum recommended indoor RH% for an outdoor temperature.

    Colder outdoor temperatures call for drier indoor air to avoid
    condensation on windows and in walls. Each band includes its lower bound,
    so exactly 50 degF maps to 50, not 45.
    """
    for lower_bound, humidity in INDOOR_HUMIDITY_BANDS:
        if outdoor_temp_f >= lower_bound:
            return humidity
    return COLDEST_INDOOR_HUMIDITY
