from typing import Any, Mapping

from src.app.pages import render_users_page


def render_page(context: Mapping[str, Any]) -> None:
    """Render the page selected in the sidebar."""
    page = context.get("page")
    get_text = context.get("get_text")
    lang = context.get("lang")

    if not callable(get_text):
        raise TypeError("context['get_text'] must be callable")

    if page == get_text(lang, "menu_users"):
        render_users_page(dict(context))
        return

    raise ValueError(f"unknown page: {page!r}")
