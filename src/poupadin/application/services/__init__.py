"""Application services."""

from poupadin.application.services.session_manager import SessionManager

__all__ = ["SessionManager"]
