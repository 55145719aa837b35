"""Fixed-interval sampling loop: read sensor, derive metrics, publish."""

import time
import logging
import threading
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from ..config.settings import StationConfig
from ..processing.data_processor import DataProcessor
from ..processing.models import DerivedSample, PublishOutcome
from ..sensor.bme280_sensor import SensorReadError


class SchedulerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SamplingScheduler:
    """Runs one tick per sample interval until stopped or the sensor fails.

    Ticks never overlap. The first tick fires one interval after ``run()``
    starts; if a tick overruns, the deadlines it missed are skipped. The wait
    between ticks ends as soon as stop() is called.
    """

    def __init__(self, config: StationConfig, sensor, processor: DataProcessor, publisher,
                 sleep: Optional[Callable[[float], None]] = None,
                 clock: Callable[[], float] = time.monotonic,
                 now: Callable[[], datetime] = _utcnow) -> None:
        """Initialize the scheduler.

        Args:
            config: Station configuration
            sensor: Object with a ``read() -> RawReading`` method
            processor: Derives samples from readings
            publisher: Object with a ``publish(sample) -> PublishOutcome`` method
            sleep: Blocking wait, injectable for tests; defaults to a wait that
                   stop() interrupts
            clock: Monotonic clock used for tick deadlines
            now: Wall clock used to timestamp samples
        """
        self.config = config
        self.sensor = sensor
        self.processor = processor
        self.publisher = publisher
        self._stop_event = threading.Event()
        self._sleep = sleep or self._stop_event.wait
        self._clock = clock
        self._now = now
        self.state = SchedulerState.IDLE
        self.ticks = 0
        self.logger = logging.getLogger(__name__)

    def stop(self) -> None:
        """Ask the loop to exit before the next tick."""
        if self.state is SchedulerState.RUNNING:
            self.logger.info("Stopping sampling")
        self.state = SchedulerState.STOPPED
        self._stop_event.set()

    def run(self) -> None:
        """Tick forever.

        Returns only after stop() is called.

        Raises:
            SensorReadError: If the sensor cannot be read; this is fatal
        """
        if self.state is SchedulerState.STOPPED:
            self.logger.info("Scheduler was stopped before it started")
            return
        if self.state is not SchedulerState.IDLE:
            raise RuntimeError("Scheduler is already running")

        interval = self.config.sample_interval
        self.state = SchedulerState.RUNNING
        self.logger.info(f"Starting sampling with {interval:g}s interval")

        next_tick = self._clock() + interval
        try:
            while self.state is SchedulerState.RUNNING:
                wait = next_tick - self._clock()
                if wait > 0:
                    self._sleep(wait)
                if self.state is not SchedulerState.RUNNING:
                    break

                self.run_tick()

                next_tick += interval
                now = self._clock()
                if next_tick <= now:
                    missed = int((now - next_tick) // interval) + 1
                    self.logger.warning(f"Tick overran the sample interval; skipping {missed} tick(s)")
                    next_tick += missed * interval
        finally:
            self.state = SchedulerState.STOPPED

        self.logger.info(f"Sampling stopped after {self.ticks} tick(s)")

    def run_tick(self) -> PublishOutcome:
        """Read, derive and publish one sample.

        Returns:
            The publish outcome

        Raises:
            SensorReadError: If the sensor read fails
        """
        self.ticks += 1

        try:
            reading = self.sensor.read()
        except SensorReadError:
            raise
        except Exception as e:
            raise SensorReadError(f"failed to read from sensor: {e}") from e

        sample = self.processor.derive_sample(reading, self._now())
        if self.config.log_readings:
            self.processor.log_sample(sample)

        outcome = self.publisher.publish(sample)
        self._report(sample, outcome)
        return outcome

    def _report(self, sample: DerivedSample, outcome: PublishOutcome) -> None:
        if outcome.success:
            self.logger.debug(f"Published sample taken at {sample.timestamp.isoformat()}")
        else:
            self.logger.warning(
                f"Sample taken at {sample.timestamp.isoformat()} was dropped "
                f"after {outcome.attempts} attempts"
            )
