"""Metrics collection for the transport layer."""

from collections import Counter
from dataclasses import dataclass, field
from threading import Lock

from winnipeg_transit.transport.errors import TransitErrorClass


# Module-level singleton state
_metrics_instance: "DispatchMetrics | None" = None
_metrics_lock: Lock = Lock()


@dataclass
class DispatchMetrics:
    """Thread-safe metrics for API round-trips.

    Tracks responses by status code, failures by error class, and total
    dispatch time. Use get_instance() for singleton access.
    """

    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    responses_by_status: Counter[int] = field(default_factory=Counter)
    failures_by_class: Counter[str] = field(default_factory=Counter)
    duration_ms_total: float = 0.0
    request_count: int = 0

    @classmethod
    def get_instance(cls) -> "DispatchMetrics":
        """Get the singleton instance (thread-safe).

        Returns:
            The shared DispatchMetrics instance.
        """
        global _metrics_instance  # noqa: PLW0603
        if _metrics_instance is None:
            with _metrics_lock:
                if _metrics_instance is None:
                    _metrics_instance = cls()
        return _metrics_instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance (for testing)."""
        global _metrics_instance  # noqa: PLW0603
        with _metrics_lock:
            _metrics_instance = None

    def record_response(self, status_code: int, duration_ms: float) -> None:
        """Record a completed round-trip.

        Args:
            status_code: HTTP status code.
            duration_ms: Time spent waiting for the response headers.
        """
        with self._lock:
            self.responses_by_status[status_code] += 1
            self.duration_ms_total += duration_ms
            self.request_count += 1

    def record_failure(self, error_class: TransitErrorClass) -> None:
        """Record a failed request.

        Args:
            error_class: Classification of the failure.
        """
        with self._lock:
            self.failures_by_class[error_class.value] += 1

    def get_failures_total(self, error_class: TransitErrorClass | None = None) -> int:
        """Get failure count, optionally for a single error class."""
        with self._lock:
            if error_class is None:
                return sum(self.failures_by_class.values())
            return self.failures_by_class[error_class.value]

    @property
    def avg_duration_ms(self) -> float:
        """Average round-trip duration in milliseconds."""
        with self._lock:
            if self.request_count == 0:
                return 0.0
            return self.duration_ms_total / self.request_count

    def to_dict(self) -> dict[str, int | float | dict[str, int] | dict[int, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        with self._lock:
            return {
                "responses_by_status": dict(self.responses_by_status),
                "failures_by_class": dict(self.failures_by_class),
                "duration_ms_total": self.duration_ms_total,
                "request_count": self.request_count,
            }
