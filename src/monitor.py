import logging
import re
import threading
import time
from datetime import datetime, timedelta

logger = logging.getLogger("users_app")

_NUMERIC_SEGMENT = re.compile(r"/\d+(?=/|$)")


class AppMonitor:
    """
    Central record of backend API usage and application errors.
    Singleton so the API client and the page services share one instance.
    """
    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        with cls._lock:
            if cls._instance is None:
                cls._instance = super(AppMonitor, cls).__new__(cls)
                cls._instance._initialized = False
            return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._lock = threading.Lock()
        self.MAX_API_CALL_LOG_ENTRIES = 2000
        self.MAX_ERROR_LOG_ENTRIES = 100
        self.reset()
        self._initialized = True

    def reset(self):
        """Drops all recorded calls and errors."""
        with self._lock:
            self.api_stats = {}  # endpoint -> count
            self.api_calls_log = []  # {timestamp, endpoint, method, status_code, duration_ms}
            self.error_logs = []  # {timestamp, module, message, details}
            self.total_api_calls = 0
            self.start_time = datetime.now()

    def log_api_call(self, endpoint, method=None, status_code=None, duration_ms=None):
        """Records an API call with timestamp, endpoint path, and optional timing metadata."""
        clean_endpoint = _NUMERIC_SEGMENT.sub("/{id}", endpoint.split("?")[0])
        with self._lock:
            self.api_stats[clean_endpoint] = self.api_stats.get(clean_endpoint, 0) + 1
            self.total_api_calls += 1
            now_dt = datetime.now()
            self.api_calls_log.append({
                "timestamp": now_dt.isoformat(timespec="seconds"),
                "timestamp_dt": now_dt,
                "endpoint": clean_endpoint,
                "method": method,
                "status_code": status_code,
                "duration_ms": duration_ms,
            })
            if len(self.api_calls_log) > self.MAX_API_CALL_LOG_ENTRIES:
                self.api_calls_log = self.api_calls_log[-self.MAX_API_CALL_LOG_ENTRIES:]
        logger.debug("%s %s -> %s (%sms)", method, clean_endpoint, status_code, duration_ms)

    def log_error(self, module, message, details=None):
        """Records an application error."""
        with self._lock:
            self.error_logs.append({
                "timestamp": datetime.now(),
                "module": module,
                "message": message,
                "details": str(details) if details else "",
            })
            if len(self.error_logs) > self.MAX_ERROR_LOG_ENTRIES:
                self.error_logs.pop(0)
        if details:
            logger.warning("[%s] %s: %s", module, message, details)
        else:
            logger.warning("[%s] %s", module, message)

    def get_stats(self):
        """Returns current API statistics."""
        with self._lock:
            return {
                "total_calls": self.total_api_calls,
                "endpoint_stats": self.api_stats.copy(),
                "uptime_seconds": (datetime.now() - self.start_time).total_seconds(),
                "error_count": len(self.error_logs),
            }

    def get_rate_per_minute(self, minutes=1):
        """Returns average API calls per minute over the last N minutes."""
        if minutes <= 0:
            return 0
        with self._lock:
            cutoff = datetime.now() - timedelta(minutes=minutes)
            count = sum(1 for entry in self.api_calls_log if entry["timestamp_dt"] > cutoff)
            return count / minutes

    def get_errors(self, limit=50):
        """Returns recent error logs, newest first."""
        with self._lock:
            return sorted(self.error_logs, key=lambda x: x["timestamp"], reverse=True)[:limit]


def elapsed_ms(start):
    return int((time.monotonic() - start) * 1000)


# Global instance for easy access
monitor = AppMonitor()
