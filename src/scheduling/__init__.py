"""Periodic sampling loop."""

from .scheduler import SamplingScheduler, SchedulerState

__all__ = ['SamplingScheduler', 'SchedulerState']
