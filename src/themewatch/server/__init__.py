"""
Dev proxy server.

Serves locally built assets and live-reload notifications on
127.0.0.1:<port> and proxies everything else to the application server.

Public API:
    - DevProxyServer: Startup sequence + background serving
    - ProxyConfig, create_app: The ASGI application
    - BundlerConfig, load_bundler_config, build_dev_config: Bundler config
    - ReloadBroadcaster: Reload counter
    - allocate_port, release_port: Port allocation
"""

from .bundler import BundlerConfig, Loader, build_dev_config, load_bundler_config, parse_bundler_config
from .dev_server import DevProxyServer
from .livereload import ReloadBroadcaster
from .ports import allocate_port, release_port
from .proxy import LANDING_PATH, ProxyConfig, create_app

__all__ = [
    "BundlerConfig",
    "Loader",
    "build_dev_config",
    "load_bundler_config",
    "parse_bundler_config",
    "DevProxyServer",
    "ReloadBroadcaster",
    "allocate_port",
    "release_port",
    "LANDING_PATH",
    "ProxyConfig",
    "create_app",
]
