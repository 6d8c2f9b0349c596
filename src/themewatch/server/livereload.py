"""Live reload: reload counter, server-sent event stream and browser client.

The orchestrator calls ``ReloadBroadcaster.notify()`` after a successful
deploy. Each connected browser holds an EventSource on the events route and
reloads when the counter advances.
"""

import asyncio
import threading
from typing import AsyncIterator, Awaitable, Callable

from themewatch.server.bundler import LIVERELOAD_EVENTS_PATH

POLL_INTERVAL = 0.25
KEEPALIVE_INTERVAL = 15.0

CLIENT_SCRIPT = """\
(function () {
  var script = document.currentScript;
  var origin = '';
  if (script && script.src.indexOf('?') !== -1) {
    origin = script.src.split('?')[1].replace(/\\/$/, '');
  }
  var source = new EventSource(origin + '%s');
  source.onmessage = function (event) {
    if (event.data === 'reload') {
      window.location.reload();
    }
  };
})();
""" % LIVERELOAD_EVENTS_PATH


class ReloadBroadcaster:
    """Thread-safe, monotonically increasing reload counter.

    close() ends every open event stream so the server can shut down while
    browsers are still connected.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._version = 0
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def open(self) -> None:
        self._closed.clear()

    def close(self) -> None:
        self._closed.set()

    @property
    def version(self) -> int:
        return self._version

    def notify(self) -> int:
        """Signal connected browsers to reload. Returns the new version."""
        with self._lock:
            self._version += 1
            return self._version


async def event_stream(
    broadcaster: ReloadBroadcaster,
    is_disconnected: Callable[[], Awaitable[bool]],
    poll_interval: float = POLL_INTERVAL,
    keepalive_interval: float = KEEPALIVE_INTERVAL
) -> AsyncIterator[str]:
    """Yield SSE frames: one ``data: reload`` per counter advance.

    Only reloads signalled after the stream opened are delivered. The
    stream ends when the client disconnects or the broadcaster is closed.
    """
    seen = broadcaster.version
    idle = 0.0
    yield "retry: 1000\n\n"

    while not broadcaster.closed and not await is_disconnected():
        current = broadcaster.version
        if current != seen:
            seen = current
            idle = 0.0
            yield "data: reload\n\n"
        elif idle >= keepalive_interval:
            idle = 0.0
            yield ": keepalive\n\n"
        await asyncio.sleep(poll_interval)
        idle += poll_interval
