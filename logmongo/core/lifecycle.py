"""
Request lifecycle timing.

Stamps a (monotonic, wall-clock) pair when a request arrives and again
when the response starts sending headers.
"""

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional


def utc_now() -> datetime:
    """Current wall-clock time, timezone-aware UTC."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TimingMark:
    """One captured instant."""
    
    # time.perf_counter_ns() reading, only meaningful as a difference
    monotonic_ns: int
    wall: datetime


class LifecycleTracker:
    """
    Captures timing marks on request and response views.
    
    The clocks are injectable so elapsed times can be pinned in tests.
    """
    
    def __init__(
        self,
        clock: Callable[[], int] = time.perf_counter_ns,
        wall_clock: Callable[[], datetime] = utc_now,
    ):
        self.clock = clock
        self.wall_clock = wall_clock
    
    def capture(self) -> TimingMark:
        return TimingMark(monotonic_ns=self.clock(), wall=self.wall_clock())
    
    def start_request(self, request) -> TimingMark:
        """
        Stamp request arrival and cache the remote address.
        
        Args:
            request: RequestView being tracked
        
        Returns:
            The captured mark
        """
        request.remote_address = request.client_address()
        request.started = self.capture()
        return request.started
    
    def mark_response(self, response) -> bool:
        """
        Stamp the response start, once.
        
        Args:
            response: ResponseView being tracked
        
        Returns:
            True if this call stamped, False if it was already stamped
        """
        if response.started is not None:
            return False
        response.started = self.capture()
        return True


def response_time_ms(
    request,
    response,
    digits: int = 3,
) -> Optional[float]:
    """
    Milliseconds between request start and response start.
    
    Args:
        request: RequestView with ``started``
        response: ResponseView with ``started``
        digits: Decimal digits to round to
    
    Returns:
        Elapsed milliseconds, or None if either mark is missing
    """
    if request.started is None or response.started is None:
        return None
    
    elapsed_ns = response.started.monotonic_ns - request.started.monotonic_ns
    return round(elapsed_ns / 1e6, digits)
