"""Integration tests for DevProxyServer with a real uvicorn server.

The application server URL points at a closed port, so proxied requests
come back as 502 while the dev server's own routes still answer.
"""

import shutil
import tempfile
import threading
import time
from pathlib import Path

import httpx
import pytest

from themewatch.core import YamlConfigLoader
from themewatch.exceptions import ConfigLoadFailure
from themewatch.server import ports
from themewatch.server.bundler import BUNDLER_CONFIG_FILE
from themewatch.server.dev_server import DevProxyServer
from themewatch.server.livereload import ReloadBroadcaster

BUNDLER_YAML = """\
entry:
  - js/main.js
module:
  rules:
    - use:
        - css-loader
        - loader: sass-loader
devServer:
  publicPath: /o/my-theme/
  contentBase: .web_bundle_build
"""


class TestDevProxyServer:
    """Start, serve and stop the dev proxy."""

    def setup_method(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        (self.temp_dir / BUNDLER_CONFIG_FILE).write_text(BUNDLER_YAML)
        css = self.temp_dir / '.web_bundle_build' / 'css'
        css.mkdir(parents=True)
        (css / 'main.css').write_text('body { margin: 0 }')
        self.server = None

    def teardown_method(self):
        if self.server is not None:
            self.server.stop()
        shutil.rmtree(self.temp_dir)

    def make_server(self, url='http://127.0.0.1:1'):
        self.server = DevProxyServer(
            self.temp_dir,
            url,
            YamlConfigLoader(),
            ReloadBroadcaster(),
            sass_options={'includePaths': ['node_modules']},
            postcss_options={'enabled': True, 'plugins': ['autoprefixer']},
            base_port=ports.BASE_PORT
        )
        return self.server

    def test_start_serves_landing_page_and_assets(self):
        server = self.make_server()

        config = server.start()

        assert server.running
        assert config.port >= ports.BASE_PORT
        assert config.bundler_config.loader_names() == ('css-loader', 'sass-loader', 'postcss-loader')
        assert server.landing_url == f'http://127.0.0.1:{config.port}/webpack-dev-server/'

        landing = httpx.get(server.landing_url, timeout=5)
        assert landing.status_code == 200
        assert f'/__livereload__/client.js?http://localhost:{config.port}' in landing.text

        asset = httpx.get(f'http://127.0.0.1:{config.port}/o/my-theme/css/main.css', timeout=5)
        assert asset.text == 'body { margin: 0 }'

        proxied = httpx.get(f'http://127.0.0.1:{config.port}/web/guest/home', timeout=5)
        assert proxied.status_code == 502

    def test_stop_releases_port(self):
        server = self.make_server()
        port = server.start().port

        server.stop()

        assert not server.running
        assert server.port is None
        assert port not in ports._reserved

    def test_stop_with_connected_browser_is_prompt(self):
        server = self.make_server()
        port = server.start().port
        opened = threading.Event()

        def listen():
            try:
                with httpx.stream('GET', f'http://127.0.0.1:{port}/__livereload__/events', timeout=15) as response:
                    for _chunk in response.iter_text():
                        opened.set()
            except httpx.HTTPError:
                pass

        listener = threading.Thread(target=listen, daemon=True)
        listener.start()
        assert opened.wait(5)

        started = time.monotonic()
        server.stop()
        elapsed = time.monotonic() - started

        assert elapsed < 5
        assert not server.running
        listener.join(5)
        assert not listener.is_alive()

    def test_missing_url_fails_and_releases_port(self):
        server = self.make_server(url=None)

        with pytest.raises(ConfigLoadFailure, match='--url'):
            server.start()

        assert server.port is None
        assert not server.running

    def test_missing_bundler_config_fails(self):
        (self.temp_dir / BUNDLER_CONFIG_FILE).unlink()
        server = self.make_server()

        with pytest.raises(ConfigLoadFailure, match='not found'):
            server.start()
