"""
Raspberry Pi Weather Logger

Samples a BME280 temperature/humidity/pressure sensor on a fixed interval,
derives dew point, sea level pressure and an indoor humidity recommendation,
and writes each sample to an InfluxDB time-series database.
"""

__version__ = "1.0.0"
__author__ = "Weather Monitor Team"
