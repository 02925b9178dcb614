import time

import requests

from src.config import AppConfig
from src.monitor import elapsed_ms, monitor

USERS_PATH = "/api/users"

# Shared session for connection pooling across Streamlit sessions
_session = requests.Session()
_session.headers.update({"Content-Type": "application/json"})


class UsersAPIError(Exception):
    """Raised for any failed call to the users backend (HTTP status, transport or payload)."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class UsersAPI:
    def __init__(self, config=None):
        config = config or AppConfig.from_env()
        self.api_host = config.api_base_url.rstrip("/")
        self.timeout = config.api_timeout
        self.page_limit = config.page_limit
        self.headers = {"Content-Type": "application/json"}

    def _get(self, path, params=None):
        start = time.monotonic()
        try:
            response = _session.get(f"{self.api_host}{path}", headers=self.headers, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            monitor.log_api_call(path, method="GET", status_code=None, duration_ms=elapsed_ms(start))
            monitor.log_error("API_GET", f"System Error on {path}", str(e))
            raise UsersAPIError(f"GET {path} failed: {e}") from e

        monitor.log_api_call(path, method="GET", status_code=response.status_code, duration_ms=elapsed_ms(start))
        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            monitor.log_error("API_GET", f"HTTP {response.status_code} on {path}", _truncate(response.text))
            raise UsersAPIError(f"GET {path} returned HTTP {response.status_code}", response.status_code) from e
        try:
            return response.json()
        except ValueError as e:
            monitor.log_error("API_GET", f"Invalid JSON on {path}", str(e))
            raise UsersAPIError(f"GET {path} returned invalid JSON", response.status_code) from e

    def _post(self, path, data):
        start = time.monotonic()
        try:
            response = _session.post(f"{self.api_host}{path}", headers=self.headers, json=data, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            monitor.log_api_call(path, method="POST", status_code=None, duration_ms=elapsed_ms(start))
            monitor.log_error("API_POST", f"System Error on {path}", str(e))
            raise UsersAPIError(f"POST {path} failed: {e}") from e

        monitor.log_api_call(path, method="POST", status_code=response.status_code, duration_ms=elapsed_ms(start))
        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            monitor.log_error("API_POST", f"HTTP {response.status_code} on {path}", _truncate(response.text))
            raise UsersAPIError(f"POST {path} returned HTTP {response.status_code}", response.status_code) from e
        if response.status_code == 204 or not response.content:
            return {"status": response.status_code}
        try:
            return response.json()
        except ValueError:
            # Body is unused by callers; a 2xx with a non-JSON body still counts as created.
            return {"status": response.status_code}

    def list_users(self, page, limit=None):
        """
        Fetches one page of users.
        Returns the decoded payload: {"users": [...], "meta": {"page": int, "totalPages": int}}.
        """
        limit = limit or self.page_limit
        payload = self._get(USERS_PATH, params={"page": page, "limit": limit})
        if not isinstance(payload, dict):
            monitor.log_error("API_GET", f"Unexpected payload type on {USERS_PATH}", type(payload).__name__)
            raise UsersAPIError(f"GET {USERS_PATH} returned an unexpected payload")
        users = payload.get("users")
        meta = payload.get("meta")
        if not isinstance(users, list) or not _is_valid_meta(meta):
            monitor.log_error("API_GET", f"Malformed users payload on {USERS_PATH}", str(payload)[:500])
            raise UsersAPIError(f"GET {USERS_PATH} returned a malformed payload")
        return payload

    def create_user(self, user_data):
        """Posts a new user; the response body is returned as-is."""
        return self._post(USERS_PATH, user_data)


def _is_valid_meta(meta):
    if not isinstance(meta, dict):
        return False
    for key in ("page", "totalPages"):
        value = meta.get(key)
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            return False
    return True


def _truncate(text, limit=2000):
    if text and len(text) > limit:
        return text[:limit] + "...(truncated)"
    return text
