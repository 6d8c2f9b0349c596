"""Source tree watcher: turns watchfiles change batches into ChangeEvents."""
import logging
import threading
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Set, Tuple, Union

from watchfiles import Change, watch

from themewatch.pipeline.tasks import ChangeEvent

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 300


def events_from_changes(
    changes: Iterable[Tuple[Change, str]],
    source_root: Union[str, Path]
) -> List[ChangeEvent]:
    """Convert a watchfiles batch into ChangeEvents relative to source_root.

    Paths outside the source root are dropped. Each path appears once, in
    sorted order, whatever kinds of change it saw.
    """
    root = Path(source_root).resolve()
    seen: Set[str] = set()
    events = []
    for _change, raw_path in changes:
        path = Path(raw_path).resolve()
        try:
            relative = path.relative_to(root)
        except ValueError:
            continue
        key = relative.as_posix()
        if key in seen or key == '.':
            continue
        seen.add(key)
        events.append(ChangeEvent.from_path(relative))
    return sorted(events, key=lambda e: e.path)


class ChangeWatcher:
    """Watches the source tree and reports each changed file.

    Args:
        source_root: Directory to watch recursively
        on_change: Called with each ChangeEvent, on the watching thread
        debounce_ms: Quiet period before a batch of changes is delivered
        stop_event: Set it to end run()
    """

    def __init__(
        self,
        source_root: Union[str, Path],
        on_change: Callable[[ChangeEvent], object],
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        stop_event: Optional[threading.Event] = None
    ):
        self.source_root = Path(source_root)
        self.on_change = on_change
        self.debounce_ms = debounce_ms
        self.stop_event = stop_event or threading.Event()

    def stop(self) -> None:
        self.stop_event.set()

    def run(self) -> None:
        """Block, delivering changes until stop() is called."""
        logger.info("Watching %s", self.source_root)
        for changes in watch(
            self.source_root,
            debounce=self.debounce_ms,
            stop_event=self.stop_event
        ):
            for event in events_from_changes(changes, self.source_root):
                self.on_change(event)
