"""Unit conversions, derived metrics and the sample data model."""

from .data_processor import DataProcessor
from .models import DerivedSample, PublishOutcome, RawReading

__all__ = ['DataProcessor', 'DerivedSample', 'PublishOutcome', 'RawReading']
