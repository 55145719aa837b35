"""One-time store reachability check run before sampling starts."""

import logging


class HealthCheckError(Exception):
    """Raised when the store is unreachable or reports itself unhealthy."""

    def __init__(self, message: str, status: str = None, detail: str = None) -> None:
        super().__init__(message)
        self.status = status
        self.detail = detail


class StartupGate:
    """Refuses to let sampling start against an unhealthy store."""

    def __init__(self, store) -> None:
        """
        Args:
            store: Object with a ``health() -> (status, message)`` method whose
                   requests are bounded by the store's own timeout
        """
        self.store = store
        self.logger = logging.getLogger(__name__)

    def check_ready(self) -> None:
        """Run the health check once.

        Raises:
            HealthCheckError: Unless the store reports status "pass"
        """
        try:
            status, message = self.store.health()
        except Exception as e:
            raise HealthCheckError(f"failed to check InfluxDB health: {e}") from e

        if status != "pass":
            raise HealthCheckError(
                f"InfluxDB did not pass health check: status {status}; message '{message}'",
                status=status,
                detail=message,
            )

        self.logger.info("InfluxDB connection established successfully")
