"""Bundler configuration loading and dev-server specialization.

The project's bundler configuration lives in ``bundler.yaml`` and mirrors the
webpack layout the theme tooling expects::

    entry:
      - js/main.js
    module:
      rules:
        - test: "\\.scss$"
          use:
            - loader: css-loader
            - loader: sass-loader
              options: {}
    devServer:
      publicPath: /o/my-theme/
      contentBase: .web_bundle_build

Only the first rule's ``use`` list is treated as the stylesheet loader chain.
``build_dev_config`` never mutates its input; it returns a new frozen value.
"""
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple, Union

from themewatch.core.protocols import ConfigLoader
from themewatch.exceptions import ConfigLoadFailure

BUNDLER_CONFIG_FILE = 'bundler.yaml'

SASS_LOADER = 'sass-loader'
POSTCSS_LOADER = 'postcss-loader'

LIVERELOAD_CLIENT_PATH = '/__livereload__/client.js'
LIVERELOAD_EVENTS_PATH = '/__livereload__/events'


def _freeze(value: Any) -> Any:
    """Recursively convert dicts to read-only mappings and lists to tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    """Inverse of _freeze, for editing a copy."""
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


@dataclass(frozen=True)
class Loader:
    """One entry of the stylesheet loader chain."""
    name: str
    options: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True)
class BundlerConfig:
    """Immutable bundler configuration.

    Attributes:
        entry: Ordered entry points
        style_loaders: Ordered stylesheet loader chain
        dev_server: Dev-server options (publicPath, contentBase, inject, ...)
    """
    entry: Tuple[str, ...]
    style_loaders: Tuple[Loader, ...]
    dev_server: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def loader_names(self) -> Tuple[str, ...]:
        return tuple(loader.name for loader in self.style_loaders)


def parse_bundler_config(data: Any, source: str = BUNDLER_CONFIG_FILE) -> BundlerConfig:
    """Validate a parsed bundler document and freeze it.

    Raises:
        ConfigLoadFailure: If the document does not have the expected shape
    """
    if not isinstance(data, Mapping):
        raise ConfigLoadFailure(f"{source}: expected a mapping at the top level")

    entry = data.get('entry', [])
    if isinstance(entry, str):
        entry = [entry]
    if not isinstance(entry, list) or not all(isinstance(e, str) for e in entry):
        raise ConfigLoadFailure(f"{source}: 'entry' must be a list of strings")

    module = data.get('module') or {}
    rules = module.get('rules') if isinstance(module, Mapping) else None
    if not isinstance(rules, list) or not rules or not isinstance(rules[0], Mapping):
        raise ConfigLoadFailure(
            f"{source}: 'module.rules' must be a non-empty list whose first "
            f"rule is the stylesheet rule"
        )

    uses = rules[0].get('use')
    if not isinstance(uses, list):
        raise ConfigLoadFailure(f"{source}: 'module.rules[0].use' must be a list of loaders")

    loaders = []
    for use in uses:
        if isinstance(use, str):
            loaders.append(Loader(name=use))
        elif isinstance(use, Mapping) and isinstance(use.get('loader'), str):
            options = use.get('options') or {}
            if not isinstance(options, Mapping):
                raise ConfigLoadFailure(f"{source}: options of '{use['loader']}' must be a mapping")
            loaders.append(Loader(name=use['loader'], options=_freeze(options)))
        else:
            raise ConfigLoadFailure(f"{source}: invalid loader descriptor {use!r}")

    dev_server = data.get('devServer') or {}
    if not isinstance(dev_server, Mapping):
        raise ConfigLoadFailure(f"{source}: 'devServer' must be a mapping")

    return BundlerConfig(
        entry=tuple(entry),
        style_loaders=tuple(loaders),
        dev_server=_freeze(dev_server)
    )


def load_bundler_config(project_dir: Union[str, Path], loader: ConfigLoader) -> BundlerConfig:
    """Load bundler.yaml from the project directory.

    Raises:
        ConfigLoadFailure: If the file is missing, unparsable or invalid
    """
    path = Path(project_dir) / BUNDLER_CONFIG_FILE
    if not path.exists():
        raise ConfigLoadFailure(
            f"Bundler configuration not found: {path}\n"
            f"Create it with at least:\n"
            f"  entry: []\n"
            f"  module:\n"
            f"    rules:\n"
            f"      - use: [css-loader, sass-loader]"
        )
    try:
        data = loader.load_yaml(path)
    except Exception as e:
        raise ConfigLoadFailure(f"Could not parse {path}: {e}") from e
    return parse_bundler_config(data, source=str(path))


def livereload_client_entry(port: int) -> str:
    """Entry point that loads the live-reload client pointed at this server."""
    return f"{LIVERELOAD_CLIENT_PATH}?http://localhost:{port}"


def build_dev_config(
    base: BundlerConfig,
    port: int,
    sass_options: Optional[Mapping[str, Any]] = None,
    postcss_options: Optional[Mapping[str, Any]] = None
) -> BundlerConfig:
    """Specialize a bundler configuration for the dev proxy server.

    Steps, in order:
        1. sass_options['includePaths'] is set on every sass-loader entry
        2. if postcss_options['enabled'], a postcss-loader carrying the
           configured plugins is appended to the end of the chain
        3. the live-reload client is appended to the entry points

    Args:
        base: Configuration as loaded from bundler.yaml (left untouched)
        port: Port the dev proxy server listens on
        sass_options: The project's sassOptions setting
        postcss_options: The project's postCSSOptions setting

    Returns:
        New BundlerConfig
    """
    loaders = list(base.style_loaders)

    if sass_options:
        include_paths = sass_options.get('includePaths')
        loaders = [
            replace(loader, options=_freeze({**_thaw(loader.options), 'includePaths': include_paths}))
            if loader.name == SASS_LOADER else loader
            for loader in loaders
        ]

    if postcss_options and postcss_options.get('enabled'):
        loaders.append(Loader(
            name=POSTCSS_LOADER,
            options=_freeze({
                'ident': 'postcss',
                'plugins': list(postcss_options.get('plugins') or []),
            })
        ))

    return BundlerConfig(
        entry=base.entry + (livereload_client_entry(port),),
        style_loaders=tuple(loaders),
        dev_server=base.dev_server
    )
