import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from src.api import UsersAPIError

logger = logging.getLogger("users_app")

# Error values are lang keys; the page renders them through get_text.
ERROR_FETCH = "fetch_failed"
ERROR_CREATE = "create_failed"

FORM_FIELDS = ("name", "surname", "email", "nickname", "password")
REQUIRED_FIELDS = ("name", "surname", "email", "password")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+$")


@dataclass(frozen=True)
class PaginationMeta:
    page: int
    total_pages: int

    @classmethod
    def from_payload(cls, meta: Dict[str, Any]) -> "PaginationMeta":
        return cls(page=int(meta["page"]), total_pages=int(meta["totalPages"]))


@dataclass
class UsersPageState:
    """Client-local state of the users page for one browser session."""

    current_page: int = 1
    loading: bool = False
    error: Optional[str] = None
    users: List[Dict[str, Any]] = field(default_factory=list)
    meta: Optional[PaginationMeta] = None
    # Page of the most recent fetch; differs from current_page right after navigation.
    requested_page: Optional[int] = None
    pending_submission: Optional[Dict[str, str]] = None

    @property
    def needs_fetch(self) -> bool:
        return self.requested_page != self.current_page

    def previous_disabled(self) -> bool:
        return self.current_page == 1

    def next_disabled(self) -> bool:
        return self.meta is None or self.current_page == self.meta.total_pages

    def go_previous(self) -> None:
        self.current_page = max(self.current_page - 1, 1)

    def go_next(self) -> None:
        if self.meta is None:
            return
        self.current_page = min(self.current_page + 1, self.meta.total_pages)


def fetch_users(state: UsersPageState, api, page: int, limit: Optional[int] = None) -> bool:
    """
    Loads one page of users into the state.

    On failure the previous list and meta are kept and the fetch error is set.
    A response for a page that is no longer current is discarded.
    Returns True when the state was updated with fresh data.
    """
    state.loading = True
    state.error = None
    state.requested_page = page
    try:
        payload = api.list_users(page, limit)
    except UsersAPIError as e:
        if page != state.current_page:
            logger.info("Ignoring failed fetch for stale page %s: %s", page, e)
            return False
        state.error = ERROR_FETCH
        return False
    finally:
        state.loading = False

    if page != state.current_page:
        logger.info("Discarding stale users response for page %s (current page %s)", page, state.current_page)
        return False
    state.users = list(payload["users"])
    state.meta = PaginationMeta.from_payload(payload["meta"])
    return True


def submit_user(state: UsersPageState, api, form: Dict[str, str], limit: Optional[int] = None) -> bool:
    """Creates a user from the form values and refreshes the current page on success."""
    state.loading = True
    state.error = None
    try:
        api.create_user(form)
    except UsersAPIError:
        state.error = ERROR_CREATE
        return False
    finally:
        state.loading = False
    fetch_users(state, api, state.current_page, limit)
    return True


def build_user_payload(values: Dict[str, Any]) -> Dict[str, str]:
    """Picks the form fields in their wire order; blank fields are sent as empty strings.

    The email is trimmed like a browser email input does; other fields are sent verbatim.
    """
    payload = {name: "" if values.get(name) is None else str(values.get(name)) for name in FORM_FIELDS}
    payload["email"] = payload["email"].strip()
    return payload


def validate_user_form(values: Dict[str, Any]) -> Optional[str]:
    """Returns a lang key describing the first problem, or None when the form can be sent."""
    for name in REQUIRED_FIELDS:
        if not values.get(name):
            return "required_fields"
    if not EMAIL_PATTERN.match(str(values.get("email")).strip()):
        return "invalid_email"
    return None
