import threading
import time
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from recharge_hub.errors import GatewayError


def error_payload(status_code: int, error: str, message: str, transaction_id: Optional[str] = None) -> dict:
    return {
        "success": False,
        "error": error,
        "message": message,
        "statusCode": status_code,
        "transactionId": transaction_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def error_body(exc: GatewayError) -> dict:
    return error_payload(exc.status_code, exc.error, exc.message, exc.transaction_id)


def exceeds_size_limit(content_length: Optional[str], max_bytes: int) -> bool:
    if not content_length:
        return False
    try:
        return int(content_length) > max_bytes
    except ValueError:
        return True


class SlidingWindowRateLimiter:
    """
    Per-caller request counter over a sliding window.

    Admission is the only state shared across requests, so the check-and-record
    step is serialized. Callers whose hits have all expired are evicted once
    per window.
    """

    def __init__(self, max_requests: int, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self._hits: Dict[str, List[float]] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def _live(self, hits: List[float], now: float) -> List[float]:
        return [t for t in hits if now - t < self.window_seconds]

    def _sweep(self, now: float):
        for key in list(self._hits):
            if not self._live(self._hits[key], now):
                del self._hits[key]
        self._last_sweep = now

    def allow(self, key: str) -> bool:
        now = self.clock()
        with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(now)
            hits = self._live(self._hits.get(key, []), now)
            if len(hits) >= self.max_requests:
                self._hits[key] = hits
                return False
            hits.append(now)
            self._hits[key] = hits
            return True
