"""Tests for the retrying publisher."""

import threading
import time

import pytest
from datetime import datetime, timezone
from unittest.mock import Mock

from src.config.settings import RetrySettings
from src.database.publisher import ResilientPublisher
from src.processing.data_processor import DataProcessor
from src.processing.models import RawReading


class TestResilientPublisher:
    """Test cases for ResilientPublisher."""

    @pytest.fixture
    def sample(self):
        reading = RawReading(temperature_c=20.0, humidity_pct=50.0, raw_pressure_pa=98500.0)
        return DataProcessor(259.08).derive_sample(reading, datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc))

    @pytest.fixture
    def store(self):
        return Mock()

    @pytest.fixture
    def sleep(self):
        return Mock()

    @pytest.fixture
    def publisher(self, store, sleep):
        return ResilientPublisher(store, 'pi_wx', 'porch', RetrySettings(), sleep=sleep)

    def test_publish_success_first_attempt(self, publisher, store, sample, sleep):
        outcome = publisher.publish(sample)

        assert outcome.success
        assert outcome.attempts == 1
        assert outcome.error is None
        store.write_point.assert_called_once_with(
            'pi_wx', {'sensor_name': 'porch'}, sample.as_fields(), sample.timestamp
        )
        sleep.assert_not_called()

    def test_publish_succeeds_on_third_attempt(self, publisher, store, sample):
        """Two failures then a success gives a successful outcome after 3 attempts."""
        store.write_point.side_effect = [ConnectionError("refused"), TimeoutError("timed out"), None]

        outcome = publisher.publish(sample)

        assert outcome.success
        assert outcome.attempts == 3
        assert store.write_point.call_count == 3

    def test_publish_gives_up_after_max_attempts(self, publisher, store, sample):
        store.write_point.side_effect = ConnectionError("refused")

        outcome = publisher.publish(sample)

        assert not outcome.success
        assert outcome.attempts == 3
        assert store.write_point.call_count == 3
        assert outcome.error == "ConnectionError: refused"

    def test_publish_respects_configured_attempts(self, store, sample):
        store.write_point.side_effect = RuntimeError("boom")
        publisher = ResilientPublisher(store, 'pi_wx', 'porch', RetrySettings(max_attempts=5), sleep=Mock())

        outcome = publisher.publish(sample)

        assert outcome.attempts == 5
        assert store.write_point.call_count == 5

    def test_default_policy_retries_immediately(self, publisher, store, sample, sleep):
        store.write_point.side_effect = ConnectionError("refused")

        publisher.publish(sample)

        sleep.assert_not_called()

    def test_backoff_delays(self, store, sample):
        store.write_point.side_effect = ConnectionError("refused")
        sleep = Mock()
        policy = RetrySettings(max_attempts=4, initial_delay=1.0, backoff_factor=2.0)
        publisher = ResilientPublisher(store, 'pi_wx', 'porch', policy, sleep=sleep)

        publisher.publish(sample)

        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0, 4.0]

    def test_failures_are_logged(self, publisher, store, sample, caplog):
        store.write_point.side_effect = ConnectionError("refused")

        publisher.publish(sample)

        warnings = [r for r in caplog.records if r.levelname == 'WARNING']
        errors = [r for r in caplog.records if r.levelname == 'ERROR']
        assert len(warnings) == 3
        assert len(errors) == 1
        assert "dropping sample" in errors[0].getMessage()

    def test_slow_write_counts_as_failed_attempt(self, store, sample):
        """A write still running at the deadline is abandoned and retried."""
        release = threading.Event()
        calls = []

        def write_point(*args):
            calls.append(args)
            if len(calls) < 3:
                release.wait(5.0)

        store.write_point.side_effect = write_point
        publisher = ResilientPublisher(store, 'pi_wx', 'porch',
                                       RetrySettings(max_attempts=3, timeout_seconds=0.1), sleep=Mock())

        try:
            started = time.monotonic()
            outcome = publisher.publish(sample)
            elapsed = time.monotonic() - started
        finally:
            release.set()

        assert outcome.success
        assert outcome.attempts == 3
        assert len(calls) == 3
        assert elapsed < 2.0

    def test_write_that_always_overruns_fails(self, store, sample):
        release = threading.Event()
        store.write_point.side_effect = lambda *args: release.wait(5.0)
        publisher = ResilientPublisher(store, 'pi_wx', 'porch',
                                       RetrySettings(max_attempts=2, timeout_seconds=0.1), sleep=Mock())

        try:
            started = time.monotonic()
            outcome = publisher.publish(sample)
            elapsed = time.monotonic() - started
        finally:
            release.set()

        assert not outcome.success
        assert outcome.attempts == 2
        assert store.write_point.call_count == 2
        assert outcome.error == "TimeoutError: write did not finish within 0.1s"
        assert elapsed < 2.0

    def test_timeout_raised_by_store_keeps_its_message(self, publisher, store, sample):
        store.write_point.side_effect = TimeoutError("read timed out")

        outcome = publisher.publish(sample)

        assert outcome.error == "TimeoutError: read timed out"
