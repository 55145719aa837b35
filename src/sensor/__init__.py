"""Sensor hardware access."""

from .bme280_sensor import BME280Sensor, SensorError, SensorReadError

__all__ = ['BME280Sensor', 'SensorError', 'SensorReadError']
