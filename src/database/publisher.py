"""Best-effort delivery of samples to InfluxDB with bounded retries."""

import time
import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Callable, Dict, Any

from ..config.settings import RetrySettings
from ..processing.models import DerivedSample, PublishOutcome


class ResilientPublisher:
    """Publishes each sample with at most ``policy.max_attempts`` writes.

    Any exception from the store counts as a failed attempt, and so does an
    attempt still running after ``policy.timeout_seconds``. When every
    attempt fails the sample is dropped: there is no queue and nothing is
    carried over to the next tick.
    """

    def __init__(self, store, measurement_name: str, sensor_name: str,
                 policy: RetrySettings = RetrySettings(),
                 sleep: Callable[[float], None] = time.sleep) -> None:
        """Initialize the publisher.

        Args:
            store: Object with a ``write_point(measurement, tags, fields, timestamp)``
                   method, normally an InfluxDBManager
            measurement_name: InfluxDB measurement to write
            sensor_name: Value of the ``sensor_name`` tag
            policy: Retry policy
            sleep: Used for delays between attempts
        """
        self.store = store
        self.measurement_name = measurement_name
        self.tags = {"sensor_name": sensor_name}
        self.policy = policy
        self._sleep = sleep
        self.logger = logging.getLogger(__name__)

    def publish(self, sample: DerivedSample) -> PublishOutcome:
        """Write the sample, retrying on failure.

        Returns:
            PublishOutcome describing success and the number of attempts made
        """
        fields = sample.as_fields()
        max_attempts = self.policy.max_attempts
        last_error = None

        for attempt in range(1, max_attempts + 1):
            delay = self.policy.delay_before(attempt)
            if delay > 0:
                self.logger.info(f"Retrying InfluxDB write in {delay:.1f} seconds...")
                self._sleep(delay)

            try:
                self._write_with_deadline(fields, sample)
            except Exception as e:
                last_error = f"{type(e).__name__}: {e}"
                self.logger.warning(f"InfluxDB write failed on attempt {attempt}/{max_attempts}: {last_error}")
                continue

            self.logger.debug(f"Wrote sample for {self.tags['sensor_name']} on attempt {attempt}")
            return PublishOutcome(success=True, attempts=attempt)

        self.logger.error(
            f"failed to write point to influx after {max_attempts} attempts; "
            f"dropping sample: {last_error}"
        )
        return PublishOutcome(success=False, attempts=max_attempts, error=last_error)

    def _write_with_deadline(self, fields: Dict[str, Any], sample: DerivedSample) -> None:
        """Run one write, giving up on it after ``policy.timeout_seconds``.

        An abandoned write keeps its worker thread until the client's own
        socket timeout ends it; its result is ignored.

        Raises:
            TimeoutError: If the write did not finish within the deadline
        """
        timeout = self.policy.timeout_seconds
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="influx-write")
        try:
            future = executor.submit(
                self.store.write_point, self.measurement_name, self.tags, fields, sample.timestamp
            )
            try:
                future.result(timeout=timeout)
            except FutureTimeoutError:
                # on 3.11+ this also catches a TimeoutError raised by the write itself
                if future.done():
                    raise
                raise TimeoutError(f"write did not finish within {timeout:g}s") from None
        finally:
            executor.shutdown(wait=False)
