"""
DevProxyServer - live-reload + reverse-proxy server for a watch session.

Startup:
    1. allocate a free local port (from 9080 upward)
    2. load bundler.yaml
    3-5. specialize it (sass include paths, postcss loader, live-reload entry)
    6. build the proxy application (landing page at /webpack-dev-server/)
    7. bind 127.0.0.1:<port> and serve from a background thread

Any failure in these steps is fatal to session startup.
"""

import logging
import socket
import threading
import time
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import uvicorn

from themewatch.core.protocols import ConfigLoader
from themewatch.exceptions import ConfigLoadFailure, PortAllocationFailure
from themewatch.server.bundler import build_dev_config, load_bundler_config
from themewatch.server.livereload import ReloadBroadcaster
from themewatch.server.ports import LOOPBACK_HOST, allocate_port, release_port
from themewatch.server.proxy import LANDING_PATH, ProxyConfig, create_app

logger = logging.getLogger(__name__)

STARTUP_TIMEOUT = 10.0
GRACEFUL_SHUTDOWN_TIMEOUT = 1


def bind_socket(port: int, host: str = LOOPBACK_HOST) -> socket.socket:
    """Bind a listening-ready TCP socket, blocking.

    Raises:
        PortAllocationFailure: If the port cannot be bound
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError as e:
        sock.close()
        raise PortAllocationFailure(f"Could not bind {host}:{port}: {e}") from e
    sock.set_inheritable(True)
    return sock


class DevProxyServer:
    """
    Runs the dev proxy for one watch session.

    Args:
        project_dir: Theme project root (holds bundler.yaml)
        target_url: Real application server URL
        config_loader: YAML loading abstraction
        broadcaster: Reload counter the orchestrator notifies after deploys
        sass_options: Project sassOptions setting
        postcss_options: Project postCSSOptions setting
        base_port: First port to try
    """

    def __init__(
        self,
        project_dir: Union[str, Path],
        target_url: Optional[str],
        config_loader: ConfigLoader,
        broadcaster: ReloadBroadcaster,
        sass_options: Optional[Mapping[str, Any]] = None,
        postcss_options: Optional[Mapping[str, Any]] = None,
        base_port: Optional[int] = None
    ):
        self.project_dir = Path(project_dir)
        self.target_url = target_url
        self.config_loader = config_loader
        self.broadcaster = broadcaster
        self.sass_options = sass_options
        self.postcss_options = postcss_options
        self.base_port = base_port
        self.proxy_config: Optional[ProxyConfig] = None
        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None
        self._socket: Optional[socket.socket] = None

    @property
    def port(self) -> Optional[int]:
        return self.proxy_config.port if self.proxy_config else None

    @property
    def landing_url(self) -> Optional[str]:
        if self.port is None:
            return None
        return f"http://{LOOPBACK_HOST}:{self.port}{LANDING_PATH}"

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def build_proxy_config(self, port: int) -> ProxyConfig:
        """Steps 2-6: load and specialize the bundler configuration.

        Raises:
            ConfigLoadFailure: No target URL, or bundler.yaml missing/invalid
        """
        if not self.target_url:
            raise ConfigLoadFailure(
                "No application server URL configured\n"
                "Set 'url' in themewatch.yaml or pass --url http://localhost:8080"
            )

        base = load_bundler_config(self.project_dir, self.config_loader)
        dev_config = build_dev_config(
            base,
            port,
            sass_options=self.sass_options,
            postcss_options=self.postcss_options
        )
        return ProxyConfig(
            target_url=self.target_url,
            port=port,
            bundler_config=dev_config,
            project_dir=self.project_dir
        )

    def start(self) -> ProxyConfig:
        """Run the startup sequence and begin serving in the background.

        Returns:
            The ProxyConfig the server is running with

        Raises:
            PortAllocationFailure: No free port, bind failure or server did not start
            ConfigLoadFailure: Missing URL or invalid bundler configuration
        """
        if self.base_port is None:
            port = allocate_port()
        else:
            port = allocate_port(base_port=self.base_port)

        self.broadcaster.open()
        try:
            self.proxy_config = self.build_proxy_config(port)
            app = create_app(self.proxy_config, self.broadcaster)
            self._socket = bind_socket(port)

            config = uvicorn.Config(
                app,
                host=LOOPBACK_HOST,
                port=port,
                log_level='warning',
                lifespan='on',
                timeout_graceful_shutdown=GRACEFUL_SHUTDOWN_TIMEOUT
            )
            self._server = uvicorn.Server(config)
            self._thread = threading.Thread(
                target=self._server.run,
                kwargs={'sockets': [self._socket]},
                name='themewatch-dev-server',
                daemon=True
            )
            self._thread.start()
            self._wait_started()
        except BaseException:
            self._close()
            self.proxy_config = None
            release_port(port)
            raise

        logger.info("Dev proxy listening on %s", self.landing_url)
        return self.proxy_config

    def _wait_started(self) -> None:
        deadline = time.monotonic() + STARTUP_TIMEOUT
        while not self._server.started:
            if not self._thread.is_alive() or time.monotonic() > deadline:
                raise PortAllocationFailure(
                    f"Dev server did not start on {LOOPBACK_HOST}:{self.port}"
                )
            time.sleep(0.05)

    def _close(self) -> None:
        # Open event streams keep their connections alive until this is set
        self.broadcaster.close()
        if self._server is not None:
            self._server.should_exit = True
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=STARTUP_TIMEOUT)
        if self._socket is not None:
            self._socket.close()
        self._server = None
        self._thread = None
        self._socket = None

    def stop(self) -> None:
        """Stop serving and release the port. Safe to call more than once."""
        port = self.port
        self._close()
        if port is not None:
            release_port(port)
        self.proxy_config = None
