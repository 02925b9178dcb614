from .router import render_page

__all__ = [
    "render_page",
]
