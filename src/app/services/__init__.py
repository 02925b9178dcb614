from .users_service import render_users_service

__all__ = [
    "render_users_service",
]
