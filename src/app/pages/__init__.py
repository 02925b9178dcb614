from .users import render_users_page

__all__ = [
    "render_users_page",
]
