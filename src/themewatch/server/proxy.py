"""
Dev proxy ASGI application.

Serves the dev-server's own routes (landing page, live-reload client and
event stream, locally built assets under ``devServer.publicPath``) and
forwards every other request to the real application server.

Request handlers only read the ProxyConfig built at startup and the reload
counter; they never touch pipeline or session state.
"""

from __future__ import annotations

import html
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import httpx
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import FileResponse, HTMLResponse, PlainTextResponse, Response, StreamingResponse
from starlette.routing import Route

from themewatch.deploy.base import EXPLODED_BUILD_DIR_NAME
from themewatch.server.bundler import (
    BundlerConfig,
    LIVERELOAD_CLIENT_PATH,
    LIVERELOAD_EVENTS_PATH,
    livereload_client_entry,
)
from themewatch.server.livereload import CLIENT_SCRIPT, ReloadBroadcaster, event_stream

logger = logging.getLogger(__name__)

LANDING_PATH = '/webpack-dev-server/'

ALL_METHODS = ['GET', 'HEAD', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS']

# Headers that describe a single hop and must not be forwarded
HOP_BY_HOP_HEADERS = frozenset({
    'connection',
    'keep-alive',
    'proxy-authenticate',
    'proxy-authorization',
    'te',
    'trailers',
    'transfer-encoding',
    'upgrade',
})

# httpx hands back decoded bodies, so framing headers are recomputed
STRIPPED_RESPONSE_HEADERS = HOP_BY_HOP_HEADERS | {'content-encoding', 'content-length'}


@dataclass(frozen=True)
class ProxyConfig:
    """Everything the proxy needs, fixed at server start.

    Attributes:
        target_url: Real application server (e.g. "http://localhost:8080")
        port: Local port the dev server listens on
        bundler_config: Dev-specialized bundler configuration
        project_dir: Base for resolving devServer.contentBase
    """
    target_url: str
    port: int
    bundler_config: BundlerConfig
    project_dir: Optional[Path] = None

    @property
    def public_path(self) -> Optional[str]:
        public_path = self.bundler_config.dev_server.get('publicPath')
        if not public_path:
            return None
        return '/' + str(public_path).strip('/') + '/'

    @property
    def content_base(self) -> Path:
        content_base = self.bundler_config.dev_server.get('contentBase') or EXPLODED_BUILD_DIR_NAME
        path = Path(content_base)
        if not path.is_absolute() and self.project_dir is not None:
            path = self.project_dir / path
        return path

    @property
    def inject_client(self) -> bool:
        return bool(self.bundler_config.dev_server.get('inject', True))


def resolve_dev_asset(config: ProxyConfig, path: str) -> Optional[Path]:
    """Map a request path to a locally built file, if it is one.

    Returns None for paths outside publicPath, missing files and anything
    that would escape contentBase.
    """
    public_path = config.public_path
    content_base = config.content_base
    if public_path is None or not path.startswith(public_path):
        return None

    relative = path[len(public_path):]
    if not relative:
        return None

    base = content_base.resolve()
    candidate = (base / relative).resolve()
    if base != candidate and base not in candidate.parents:
        return None
    if not candidate.is_file():
        return None
    return candidate


def inject_client_script(body: str, port: int) -> str:
    """Insert the live-reload client before the last </body> tag."""
    tag = f'<script src="{livereload_client_entry(port)}"></script>'
    index = body.lower().rfind('</body>')
    if index == -1:
        return body + tag
    return body[:index] + tag + body[index:]


def _entry_src(config: ProxyConfig, entry: str) -> str:
    if entry.startswith(('/', 'http://', 'https://')):
        return entry
    if entry.startswith('./'):
        entry = entry[2:]
    return (config.public_path or '/') + entry


def render_landing_page(config: ProxyConfig) -> str:
    """Landing page listing the entry points, with the live-reload client loaded."""
    items = []
    scripts = []
    for entry in config.bundler_config.entry:
        src = html.escape(_entry_src(config, entry), quote=True)
        items.append(f'<li><a href="{src}">{html.escape(entry)}</a></li>')
        if entry.endswith('.js') or entry.startswith(LIVERELOAD_CLIENT_PATH):
            scripts.append(f'<script src="{src}"></script>')

    target = html.escape(config.target_url, quote=True)
    return (
        "<!DOCTYPE html>\n"
        "<html>\n<head><meta charset=\"utf-8\"><title>themewatch dev server</title></head>\n"
        "<body>\n"
        f"<h1>themewatch dev server on port {config.port}</h1>\n"
        f"<p>Proxying to <a href=\"/\">{target}</a></p>\n"
        "<h2>Entry points</h2>\n"
        f"<ul>\n{''.join(items)}\n</ul>\n"
        f"{''.join(scripts)}\n"
        "</body>\n</html>\n"
    )


async def landing_page(request: Request) -> Response:
    return HTMLResponse(render_landing_page(request.app.state.proxy_config))


async def livereload_client(request: Request) -> Response:
    return Response(
        CLIENT_SCRIPT,
        media_type='application/javascript',
        headers={'Cache-Control': 'no-cache'}
    )


async def livereload_events(request: Request) -> Response:
    broadcaster: ReloadBroadcaster = request.app.state.broadcaster
    return StreamingResponse(
        event_stream(broadcaster, request.is_disconnected),
        media_type='text/event-stream',
        headers={
            'Cache-Control': 'no-cache',
            'Access-Control-Allow-Origin': '*',
        }
    )


async def proxy_request(request: Request) -> Response:
    """Serve a dev asset if one matches, otherwise forward to the target."""
    config: ProxyConfig = request.app.state.proxy_config

    asset = resolve_dev_asset(config, request.url.path)
    if asset is not None and request.method in ('GET', 'HEAD'):
        return FileResponse(asset, headers={'Cache-Control': 'no-cache'})

    client: httpx.AsyncClient = request.app.state.http_client
    target = request.url.path
    if request.url.query:
        target += '?' + request.url.query

    headers = [
        (name, value) for name, value in request.headers.raw
        if name.decode('latin-1').lower() not in HOP_BY_HOP_HEADERS | {'host', 'accept-encoding'}
    ]

    upstream_request = client.build_request(
        request.method,
        target,
        headers=headers,
        content=await request.body()
    )

    try:
        upstream = await client.send(upstream_request)
    except httpx.HTTPError as e:
        logger.warning("Proxy to %s failed: %s", config.target_url, e)
        return PlainTextResponse(
            f"Bad gateway: could not reach {config.target_url}\n{e}\n",
            status_code=502
        )

    content = upstream.content
    content_type = upstream.headers.get('content-type', '')
    if config.inject_client and content_type.startswith('text/html'):
        encoding = upstream.encoding or 'utf-8'
        content = inject_client_script(content.decode(encoding, errors='replace'), config.port).encode(encoding)

    response = Response(content, status_code=upstream.status_code)
    for name, value in upstream.headers.multi_items():
        if name.lower() not in STRIPPED_RESPONSE_HEADERS:
            response.headers.append(name, value)
    return response


def create_app(
    config: ProxyConfig,
    broadcaster: ReloadBroadcaster,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> Starlette:
    """Build the dev proxy application.

    Args:
        config: Proxy configuration built at server start
        broadcaster: Reload counter shared with the orchestrator
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    @asynccontextmanager
    async def lifespan(app: Starlette):
        async with httpx.AsyncClient(
            base_url=config.target_url,
            transport=transport,
            follow_redirects=False,
            timeout=httpx.Timeout(60.0)
        ) as client:
            app.state.http_client = client
            yield

    routes = [
        Route(LANDING_PATH, landing_page),
        Route(LIVERELOAD_CLIENT_PATH, livereload_client),
        Route(LIVERELOAD_EVENTS_PATH, livereload_events),
        Route('/{path:path}', proxy_request, methods=ALL_METHODS),
    ]

    app = Starlette(routes=routes, lifespan=lifespan)
    app.state.proxy_config = config
    app.state.broadcaster = broadcaster
    return app
