"""Session-scoped state shared by the watch session components.

One SessionState exists per watch session. Only the orchestrator holds the
writable object; every other component receives ``state.view()``, a
read-only live mapping.
"""

from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional

# Keys
APP_SERVER_PATH_PLUGIN = 'appServerPathPlugin'
ACTIVE_BUNDLE_DIR = 'activeBundleDir'
CHANGED_FILE = 'changedFile'
WATCHING = 'watching'
PHASE = 'phase'

# Value of activeBundleDir while a session is live
ACTIVE_BUNDLE_WATCHING = 'watching'


class WatchPhase(Enum):
    """Watch-session state machine.

    IDLE → CLEANING → SETUP → WATCHING ⇄ DEPLOYING → ... → TEARDOWN → IDLE
    """
    IDLE = 'idle'
    CLEANING = 'cleaning'
    SETUP = 'setup'
    WATCHING = 'watching'
    DEPLOYING = 'deploying'
    TEARDOWN = 'teardown'


ALLOWED_TRANSITIONS = {
    WatchPhase.IDLE: {WatchPhase.CLEANING, WatchPhase.TEARDOWN},
    WatchPhase.CLEANING: {WatchPhase.SETUP, WatchPhase.TEARDOWN},
    WatchPhase.SETUP: {WatchPhase.WATCHING, WatchPhase.TEARDOWN},
    WatchPhase.WATCHING: {WatchPhase.DEPLOYING, WatchPhase.TEARDOWN},
    WatchPhase.DEPLOYING: {WatchPhase.WATCHING},
    WatchPhase.TEARDOWN: {WatchPhase.IDLE},
}


class InvalidTransition(RuntimeError):
    """Raised when the orchestrator attempts a transition the machine forbids."""

    def __init__(self, current: WatchPhase, target: WatchPhase):
        super().__init__(f"Cannot move from {current.value} to {target.value}")
        self.current = current
        self.target = target


class SessionView(Mapping[str, Any]):
    """Read-only, live view of a SessionState."""

    def __init__(self, state: 'SessionState'):
        self._state = state

    def __getitem__(self, key: str) -> Any:
        return self._state._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._state._values)

    def __len__(self) -> int:
        return len(self._state._values)

    def snapshot(self) -> Mapping[str, Any]:
        return MappingProxyType(dict(self._state._values))


class SessionState(Mapping[str, Any]):
    """Single shared mutable record of session-scoped values.

    Reads go through the Mapping interface; writes through set(), update()
    and transition(). Every write builds a new dict and swaps it in with a
    single assignment, so a reader on another thread sees either the whole
    transition or none of it.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        values: Dict[str, Any] = {PHASE: WatchPhase.IDLE, WATCHING: False}
        if initial:
            values.update(initial)
        self._values = values
        self._view = SessionView(self)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    @property
    def phase(self) -> WatchPhase:
        return self._values[PHASE]

    def view(self) -> SessionView:
        """Return a read-only, live view for non-orchestrator components."""
        return self._view

    def set(self, key: str, value: Optional[Any] = None) -> None:
        """Set key to value; None removes it (mirrors ConfigStore.set)."""
        self.update({key: value})

    def update(self, values: Dict[str, Any]) -> None:
        """Apply several values as one change. None values remove keys."""
        staged = dict(self._values)
        for key, value in values.items():
            if value is None:
                staged.pop(key, None)
            else:
                staged[key] = value
        self._values = staged

    def transition(self, target: WatchPhase, **values: Any) -> None:
        """Move to target phase, applying values in the same step.

        Raises:
            InvalidTransition: If target is not reachable from the current phase
        """
        if target not in ALLOWED_TRANSITIONS[self.phase]:
            raise InvalidTransition(self.phase, target)
        self.update({**values, PHASE: target})
