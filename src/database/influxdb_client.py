"""InfluxDB client for storing weather samples."""

import logging
from typing import Dict, Any, Optional, Tuple
from datetime import datetime

from influxdb_client import InfluxDBClient, Point, WritePrecision
from influxdb_client.client.write_api import SYNCHRONOUS

from ..config.settings import InfluxDBSettings


class InfluxDBError(Exception):
    """Raised when InfluxDB operations fail."""
    pass


class InfluxDBManager:
    """Manages the InfluxDB connection used to store weather samples.

    ``timeout_seconds`` is the client's socket timeout for health checks and
    writes. It does not cap a whole request; callers that need a wall-clock
    limit enforce it themselves.
    """

    def __init__(self, settings: InfluxDBSettings, timeout_seconds: float = 5.0) -> None:
        """Initialize InfluxDB manager.

        Args:
            settings: InfluxDB connection settings
            timeout_seconds: Socket timeout applied to each HTTP request
        """
        self.settings = settings
        self.timeout_seconds = timeout_seconds
        self.logger = logging.getLogger(__name__)
        self.client: Optional[InfluxDBClient] = None
        self.write_api = None

        self._initialize_client()

    def _initialize_client(self) -> None:
        """Create the InfluxDB client and a blocking write API."""
        try:
            self.client = InfluxDBClient(
                url=self.settings.url,
                token=self.settings.auth_token,
                org=self.settings.org,
                timeout=int(self.timeout_seconds * 1000),
            )
            self.write_api = self.client.write_api(write_options=SYNCHRONOUS)
        except Exception as e:
            self.logger.error(f"Failed to initialize InfluxDB client: {e}")
            raise InfluxDBError(f"InfluxDB initialization failed: {e}") from e

        self.logger.debug(f"InfluxDB client created for {self.settings.url}")

    def health(self) -> Tuple[str, Optional[str]]:
        """Query the server health endpoint.

        Returns:
            Tuple of (status, message); status is "pass" for a healthy server
        """
        if not self.client:
            raise InfluxDBError("InfluxDB client not initialized")

        health = self.client.health()
        return str(health.status), health.message

    def write_point(self, measurement: str, tags: Dict[str, str],
                    fields: Dict[str, Any], timestamp: datetime) -> None:
        """Write a single point.

        Args:
            measurement: Measurement name
            tags: Tag set for the point
            fields: Numeric field values
            timestamp: Point timestamp

        Raises:
            InfluxDBError: If the write API is not initialized
            Exception: Whatever the client raises for transport, timeout or
                       API errors
        """
        if not self.write_api:
            raise InfluxDBError("InfluxDB write API not initialized")

        point = self._create_point(measurement, tags, fields, timestamp)
        self.write_api.write(
            bucket=self.settings.bucket,
            org=self.settings.org,
            record=point
        )
        self.logger.debug(f"Wrote {measurement} point to bucket {self.settings.bucket}")

    def _create_point(self, measurement: str, tags: Dict[str, str],
                      fields: Dict[str, Any], timestamp: datetime) -> Point:
        """Create an InfluxDB Point.

        Integer fields stay integers; other numbers are written as floats.
        """
        point = Point(measurement).time(timestamp, WritePrecision.NS)

        for tag_name, value in tags.items():
            point.tag(tag_name, value)

        for field_name, value in fields.items():
            if isinstance(value, int) and not isinstance(value, bool):
                point.field(field_name, value)
            else:
                point.field(field_name, float(value))

        return point

    def close(self) -> None:
        """Close InfluxDB client connection."""
        try:
            if self.client:
                self.client.close()
                self.logger.info("InfluxDB connection closed")
        except Exception as e:
            self.logger.error(f"Error closing InfluxDB connection: {e}")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
