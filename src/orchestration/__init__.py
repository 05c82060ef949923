# src/orchestration/__init__.py
"""Session wiring and the runtime entry point."""

from .session import SessionOrchestrator, make_session_id

__all__ = ["SessionOrchestrator", "make_session_id"]
