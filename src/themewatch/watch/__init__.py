"""
Watch session: state store, source watcher and orchestrator.

Public API:
    - WatchSession: Setup → watch → teardown orchestration
    - SessionState, SessionView, WatchPhase: Session state store
    - ChangeWatcher, events_from_changes: watchfiles integration
"""

from .state import SessionState, SessionView, WatchPhase, InvalidTransition
from .watcher import ChangeWatcher, events_from_changes
from .session import WatchSession

__all__ = [
    "SessionState",
    "SessionView",
    "WatchPhase",
    "InvalidTransition",
    "ChangeWatcher",
    "events_from_changes",
    "WatchSession",
]
