from typing import Any, Dict, Mapping

from src.config import DEFAULT_PAGE_LIMIT
from src.lang import get_text


REQUIRED_CONTEXT_KEYS = (
    "st",
    "get_text",
    "lang",
    "api",
)


def build_page_context(st_module, lang: str, api, page: str, page_limit: int = DEFAULT_PAGE_LIMIT) -> Dict[str, Any]:
    """Assemble the mapping handed from `app.py` to the router and page services."""
    return {
        "st": st_module,
        "get_text": get_text,
        "lang": lang,
        "api": api,
        "page": page,
        "page_limit": page_limit,
    }


def bind_context(module_globals: Dict[str, Any], context: Mapping[str, Any]) -> None:
    """Copy the app context into a service module's globals.

    Service modules stay import-safe (no Streamlit or API objects at import
    time); `app.py` builds the context on every rerun and the service binds it
    before rendering.
    """
    if not isinstance(context, Mapping):
        raise TypeError("context must be a mapping")

    missing = [key for key in REQUIRED_CONTEXT_KEYS if key not in context]
    if missing:
        raise KeyError(f"missing context keys: {', '.join(missing)}")

    module_globals.update(dict(context))
    module_globals.setdefault("page_limit", DEFAULT_PAGE_LIMIT)
