"""Tests for the InfluxDB manager."""

import pytest
from datetime import datetime, timezone
from unittest.mock import Mock, patch

from influxdb_client import Point

from src.config.settings import InfluxDBSettings
from src.database.influxdb_client import InfluxDBManager, InfluxDBError


class TestInfluxDBManager:
    """Test cases for InfluxDBManager."""

    @pytest.fixture
    def settings(self):
        return InfluxDBSettings(
            url='http://localhost:8086',
            bucket='weather/autogen',
            username='wx',
            password='secret',
        )

    @pytest.fixture
    def client_class(self):
        with patch('src.database.influxdb_client.InfluxDBClient') as client_class:
            yield client_class

    @pytest.fixture
    def manager(self, settings, client_class):
        return InfluxDBManager(settings, timeout_seconds=5.0)

    def test_client_created_with_timeout_and_credentials(self, manager, client_class):
        client_class.assert_called_once_with(
            url='http://localhost:8086',
            token='wx:secret',
            org='-',
            timeout=5000,
        )
        client_class.return_value.write_api.assert_called_once()

    def test_client_creation_failure(self, settings, client_class):
        client_class.side_effect = ValueError("bad url")

        with pytest.raises(InfluxDBError, match="InfluxDB initialization failed"):
            InfluxDBManager(settings)

    def test_health(self, manager, client_class):
        client_class.return_value.health.return_value = Mock(status="pass", message="ready for queries and writes")

        assert manager.health() == ("pass", "ready for queries and writes")

    def test_write_point(self, manager, client_class):
        write_api = client_class.return_value.write_api.return_value
        timestamp = datetime(2024, 1, 15, 10, 30, 45, 123456, tzinfo=timezone.utc)

        manager.write_point(
            'pi_wx',
            {'sensor_name': 'porch'},
            {'temperature_f': 68.0, 'recommended_max_indoor_humidity': 50},
            timestamp,
        )

        write_api.write.assert_called_once()
        kwargs = write_api.write.call_args.kwargs
        assert kwargs['bucket'] == 'weather/autogen'
        assert kwargs['org'] == '-'
        assert isinstance(kwargs['record'], Point)

        line = kwargs['record'].to_line_protocol()
        assert line.startswith('pi_wx,sensor_name=porch ')
        assert 'temperature_f=68' in line
        assert 'recommended_max_indoor_humidity=50i' in line
        assert line.endswith(' 1705314645123456000')

    def test_write_point_propagates_errors(self, manager, client_class):
        client_class.return_value.write_api.return_value.write.side_effect = TimeoutError("timed out")

        with pytest.raises(TimeoutError):
            manager.write_point('pi_wx', {'sensor_name': 'porch'}, {'humidity': 40.0},
                                datetime.now(timezone.utc))

    def test_close(self, manager, client_class):
        with manager:
            pass

        client_class.return_value.close.assert_called_once()
