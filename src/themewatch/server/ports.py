"""Free local port discovery for the dev proxy server."""
import socket
import threading
from typing import Set

from themewatch.exceptions import PortAllocationFailure

BASE_PORT = 9080
MAX_CANDIDATES = 100
LOOPBACK_HOST = '127.0.0.1'

# Ports already handed out by this process, never handed out twice
_reserved: Set[int] = set()
_reserved_lock = threading.Lock()


def _is_free(port: int, host: str) -> bool:
    """Check whether host:port can currently be bound."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


def allocate_port(
    base_port: int = BASE_PORT,
    max_candidates: int = MAX_CANDIDATES,
    host: str = LOOPBACK_HOST
) -> int:
    """Find and reserve a free TCP port, probing upward from base_port.

    Args:
        base_port: First candidate port
        max_candidates: How many consecutive ports to try
        host: Interface to bind when checking

    Returns:
        Port number, reserved for this process until release_port()

    Raises:
        PortAllocationFailure: If no port in the range is free
    """
    with _reserved_lock:
        for port in range(base_port, base_port + max_candidates):
            if port > 65535:
                break
            if port in _reserved:
                continue
            if _is_free(port, host):
                _reserved.add(port)
                return port

    raise PortAllocationFailure(
        f"No free port found on {host} in range "
        f"{base_port}-{base_port + max_candidates - 1}\n\n"
        f"Troubleshooting:\n"
        f"  # See what is listening:\n"
        f"  lsof -iTCP -sTCP:LISTEN -n -P | grep {base_port // 10}"
    )


def release_port(port: int) -> None:
    """Return a port to the pool once its server has stopped."""
    with _reserved_lock:
        _reserved.discard(port)
