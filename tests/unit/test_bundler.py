"""Unit tests for bundler configuration loading and dev specialization."""

import pytest

from themewatch.core.implementations import YamlConfigLoader
from themewatch.exceptions import ConfigLoadFailure
from themewatch.server.bundler import (
    BUNDLER_CONFIG_FILE,
    Loader,
    build_dev_config,
    livereload_client_entry,
    load_bundler_config,
    parse_bundler_config,
)

BASE = {
    'entry': ['js/main.js'],
    'module': {
        'rules': [
            {
                'test': r'\.scss$',
                'use': [
                    'style-loader',
                    {'loader': 'css-loader'},
                    {'loader': 'sass-loader', 'options': {'sourceMap': True}},
                ],
            },
        ],
    },
    'devServer': {'publicPath': '/o/my-theme/'},
}


class TestParseBundlerConfig:
    """Test parse_bundler_config() validation."""

    def test_parses_loader_chain(self):
        config = parse_bundler_config(BASE)

        assert config.entry == ('js/main.js',)
        assert config.loader_names() == ('style-loader', 'css-loader', 'sass-loader')
        assert config.style_loaders[2].options['sourceMap'] is True
        assert config.dev_server['publicPath'] == '/o/my-theme/'

    def test_single_string_entry(self):
        config = parse_bundler_config({**BASE, 'entry': 'js/main.js'})

        assert config.entry == ('js/main.js',)

    def test_result_is_frozen(self):
        config = parse_bundler_config(BASE)

        with pytest.raises(TypeError):
            config.style_loaders[2].options['sourceMap'] = False

    @pytest.mark.parametrize('data', [
        [],
        {'entry': [1], 'module': BASE['module']},
        {'entry': []},
        {'entry': [], 'module': {'rules': []}},
        {'entry': [], 'module': {'rules': [{'use': 'sass-loader'}]}},
        {'entry': [], 'module': {'rules': [{'use': [{'options': {}}]}]}},
        {'entry': [], 'module': {'rules': [{'use': ['a']}]}, 'devServer': 'x'},
    ])
    def test_invalid_shapes_raise(self, data):
        with pytest.raises(ConfigLoadFailure):
            parse_bundler_config(data)


class TestLoadBundlerConfig:
    """Test load_bundler_config() file handling."""

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ConfigLoadFailure, match='not found'):
            load_bundler_config(tmp_path, YamlConfigLoader())

    def test_loads_yaml(self, tmp_path):
        (tmp_path / BUNDLER_CONFIG_FILE).write_text(
            "entry: [js/main.js]\n"
            "module:\n"
            "  rules:\n"
            "    - use: [css-loader, sass-loader]\n"
        )

        config = load_bundler_config(tmp_path, YamlConfigLoader())

        assert config.loader_names() == ('css-loader', 'sass-loader')


class TestBuildDevConfig:
    """Test build_dev_config() specialization."""

    def setup_method(self):
        self.base = parse_bundler_config(BASE)

    def test_sass_include_paths_and_postcss_appended(self):
        config = build_dev_config(
            self.base,
            9080,
            sass_options={'includePaths': ['node_modules']},
            postcss_options={'enabled': True, 'plugins': ['autoprefixer']},
        )

        sass = config.style_loaders[2]
        assert sass.name == 'sass-loader'
        assert list(sass.options['includePaths']) == ['node_modules']
        assert sass.options['sourceMap'] is True

        assert config.style_loaders[-1].name == 'postcss-loader'
        assert config.style_loaders[-1].options['ident'] == 'postcss'
        assert list(config.style_loaders[-1].options['plugins']) == ['autoprefixer']
        assert len(config.style_loaders) == len(self.base.style_loaders) + 1

    def test_postcss_disabled_leaves_chain_length(self):
        config = build_dev_config(self.base, 9080, postcss_options={'enabled': False})

        assert config.loader_names() == self.base.loader_names()

    def test_no_options_only_adds_livereload_entry(self):
        config = build_dev_config(self.base, 9081)

        assert config.style_loaders == self.base.style_loaders
        assert config.entry == ('js/main.js', '/__livereload__/client.js?http://localhost:9081')

    def test_base_is_not_mutated(self):
        build_dev_config(
            self.base, 9080,
            sass_options={'includePaths': ['x']},
            postcss_options={'enabled': True},
        )

        assert self.base.entry == ('js/main.js',)
        assert 'includePaths' not in self.base.style_loaders[2].options
        assert self.base.loader_names() == ('style-loader', 'css-loader', 'sass-loader')

    def test_only_sass_loader_gets_include_paths(self):
        config = build_dev_config(self.base, 9080, sass_options={'includePaths': ['x']})

        assert config.style_loaders[1] == Loader(name='css-loader')

    def test_livereload_entry(self):
        assert livereload_client_entry(9080) == '/__livereload__/client.js?http://localhost:9080'
