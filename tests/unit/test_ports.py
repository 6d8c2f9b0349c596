"""Unit tests for dev server port allocation."""

import socket
import threading

import pytest

from themewatch.exceptions import PortAllocationFailure
from themewatch.server import ports
from themewatch.server.ports import allocate_port, release_port


@pytest.fixture(autouse=True)
def clean_reservations():
    yield
    with ports._reserved_lock:
        ports._reserved.clear()


class TestAllocatePort:
    """Test allocate_port() and release_port()."""

    def test_returns_port_at_or_above_base(self):
        port = allocate_port(base_port=9080)

        assert 9080 <= port < 9080 + ports.MAX_CANDIDATES

    def test_skips_port_in_use(self):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as busy:
            busy.bind((ports.LOOPBACK_HOST, 0))
            busy.listen(1)
            taken = busy.getsockname()[1]

            port = allocate_port(base_port=taken, max_candidates=50)

        assert port != taken

    def test_never_returns_same_port_twice(self):
        first = allocate_port(base_port=9080)
        second = allocate_port(base_port=9080)

        assert first != second

    def test_release_makes_port_available_again(self):
        first = allocate_port(base_port=9080)
        release_port(first)

        assert allocate_port(base_port=first, max_candidates=1) == first

    def test_concurrent_allocations_are_distinct(self):
        results = []
        lock = threading.Lock()

        def grab():
            port = allocate_port(base_port=9080)
            with lock:
                results.append(port)

        threads = [threading.Thread(target=grab) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(5)

        assert len(results) == 10
        assert len(set(results)) == 10

    def test_exhausted_range_raises(self):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as busy:
            busy.bind((ports.LOOPBACK_HOST, 0))
            busy.listen(1)
            taken = busy.getsockname()[1]

            with pytest.raises(PortAllocationFailure, match='No free port'):
                allocate_port(base_port=taken, max_candidates=1)
