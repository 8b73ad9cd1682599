from datetime import datetime, timedelta
from threading import Lock

from src.adapters.clock import SystemClock
from src.ports.clock import ClockPort
from src.rules.models import RateLimitRules, RateLimitWindow


class RateLimiter:
    """Sliding-window request limiter keyed by client (usually the IP)."""

    def __init__(
        self,
        rules: RateLimitRules,
        time_port: ClockPort | None = None,
    ):
        self.rules = rules
        self._time = time_port if time_port is not None else SystemClock()
        self._history: dict[str, list[datetime]] = {}
        self._lock = Lock()

    def _cleanup(self, key: str, window: int) -> None:
        cutoff = self._time.now_utc() - timedelta(seconds=window)
        if key in self._history:
            self._history[key] = [t for t in self._history[key] if t > cutoff]
            if not self._history[key]:
                del self._history[key]

    def allow_request(self, key: str, window: int, limit: int) -> bool:
        """
        Check if request is allowed.
        If allowed, records the attempt and returns True.
        If denied, returns False.
        """
        if limit <= 0:
            return False

        with self._lock:
            self._cleanup(key, window)
            if len(self._history.get(key, [])) >= limit:
                return False
            self._history.setdefault(key, []).append(self._time.now_utc())
            return True

    def _check(self, scope: str, key: str, cfg: RateLimitWindow) -> bool:
        return self.allow_request(f"{scope}:{key}", cfg.window_seconds, cfg.max_requests)

    def check_auth(self, ip: str) -> bool:
        return self._check("auth", ip, self.rules.auth)

    def check_api(self, ip: str) -> bool:
        return self._check("api", ip, self.rules.api)

    def reset(self) -> None:
        with self._lock:
            self._history.clear()
