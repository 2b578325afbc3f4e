from .app import build_session, create_app

__all__ = ["build_session", "create_app"]
