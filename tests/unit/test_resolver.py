"""Unit tests for pipeline resolution.

The resolver is a pure function, so these tests need no doubles at all.
"""

import pytest

from themewatch.pipeline.resolver import (
    resolve_change_pipeline,
    resolve_setup_pipeline,
    resolve_teardown_pipeline,
)
from themewatch.pipeline.tasks import ChangeEvent, DeploymentStrategy, Task

ALL_STRATEGIES = list(DeploymentStrategy)


def ids(pipeline):
    return [task.value for task in pipeline]


class TestChangePipeline:
    """Test resolve_change_pipeline() subtree table."""

    @pytest.mark.parametrize('strategy', ALL_STRATEGIES)
    def test_web_inf(self, strategy):
        event = ChangeEvent.from_path('WEB-INF/liferay-plugin-package.properties')

        assert ids(resolve_change_pipeline(event, strategy)) == [
            'build-clean', 'build-src', 'build-web-inf', 'reinstall', 'deploy-folder',
        ]

    @pytest.mark.parametrize('strategy', ALL_STRATEGIES)
    def test_templates(self, strategy):
        event = ChangeEvent.from_path('templates/portal_normal.ftl')

        assert ids(resolve_change_pipeline(event, strategy)) == [
            'build-src', 'build-themelet-src', 'build-themelet-js-inject',
            'reinstall', 'deploy-folder',
        ]

    @pytest.mark.parametrize('strategy', ALL_STRATEGIES)
    def test_css_non_scss_file(self, strategy):
        event = ChangeEvent.from_path('css/main.css')

        assert ids(resolve_change_pipeline(event, strategy)) == [
            'build-clean', 'build-base', 'build-src', 'build-themelet-src',
            'build-themelet-css-inject', 'rename-css-dir', 'compile-css',
            'move-compiled-css', 'remove-old-css-dir', 'reinstall', 'deploy-css-files',
        ]

    @pytest.mark.parametrize('path', ['js/app.js', 'images/logo.png', 'README.md', 'WEB-INF.txt'])
    def test_other_subtrees_deploy_single_file(self, path):
        event = ChangeEvent.from_path(path)

        pipeline = resolve_change_pipeline(event, DeploymentStrategy.LOCAL_APP_SERVER)

        assert pipeline == (Task.REINSTALL, Task.DEPLOY_FILE)

    @pytest.mark.parametrize('path', [
        'css/main.scss',
        'css/partials/_custom.scss',
        'templates/odd.scss',
        'WEB-INF/odd.scss',
        'js/odd.scss',
        'top.scss',
    ])
    @pytest.mark.parametrize('strategy', ALL_STRATEGIES)
    def test_stylesheet_sources_are_suppressed(self, path, strategy):
        event = ChangeEvent.from_path(path)

        assert resolve_change_pipeline(event, strategy) is None

    def test_subtree_match_is_exact(self):
        """Only the first path segment counts, case-sensitively."""
        event = ChangeEvent.from_path('Templates/portal_normal.ftl')

        assert resolve_change_pipeline(event, DeploymentStrategy.NONE) == (
            Task.REINSTALL, Task.DEPLOY_FILE
        )


class TestSetupPipeline:
    """Test resolve_setup_pipeline()."""

    def test_local_app_server(self):
        assert ids(resolve_setup_pipeline(DeploymentStrategy.LOCAL_APP_SERVER)) == [
            'build', 'clean-local-bundle', 'osgi-clean', 'materialize-local-bundle',
        ]

    def test_docker_container(self):
        assert ids(resolve_setup_pipeline(DeploymentStrategy.DOCKER_CONTAINER)) == [
            'build', 'clean-local-bundle', 'clean-remote-bundle', 'osgi-clean',
            'materialize-local-bundle', 'copy-to-remote',
        ]

    def test_docker_extends_local(self):
        """Docker inserts clean-remote-bundle after clean-local-bundle and ends with copy-to-remote."""
        local = list(resolve_setup_pipeline(DeploymentStrategy.LOCAL_APP_SERVER))
        docker = list(resolve_setup_pipeline(DeploymentStrategy.DOCKER_CONTAINER))

        assert docker[docker.index(Task.CLEAN_LOCAL_BUNDLE) + 1] == Task.CLEAN_REMOTE_BUNDLE
        assert docker[-1] == Task.COPY_TO_REMOTE
        assert [t for t in docker if t not in (Task.CLEAN_REMOTE_BUNDLE, Task.COPY_TO_REMOTE)] == local

    def test_unknown_strategy_is_empty(self):
        assert resolve_setup_pipeline(DeploymentStrategy.NONE) == ()
        assert resolve_setup_pipeline(DeploymentStrategy.parse('Kubernetes')) == ()


class TestTeardownPipeline:
    """Test resolve_teardown_pipeline()."""

    @pytest.mark.parametrize('strategy', ALL_STRATEGIES)
    def test_always_starts_with_local_clean(self, strategy):
        assert resolve_teardown_pipeline(strategy)[0] == Task.CLEAN_LOCAL_BUNDLE

    @pytest.mark.parametrize('strategy', ALL_STRATEGIES)
    def test_remote_clean_only_for_docker(self, strategy):
        pipeline = resolve_teardown_pipeline(strategy)

        expected = strategy is DeploymentStrategy.DOCKER_CONTAINER
        assert (Task.CLEAN_REMOTE_BUNDLE in pipeline) is expected

    def test_local_app_server(self):
        assert resolve_teardown_pipeline(DeploymentStrategy.LOCAL_APP_SERVER) == (Task.CLEAN_LOCAL_BUNDLE,)


class TestTypes:
    """Test ChangeEvent and DeploymentStrategy helpers."""

    def test_change_event_relative_to_source_root(self, tmp_path):
        event = ChangeEvent.from_path(tmp_path / 'src' / 'css' / 'main.scss', tmp_path / 'src')

        assert event.path == 'css/main.scss'
        assert event.extension == '.scss'
        assert event.subtree == 'css'

    def test_change_event_without_extension(self):
        event = ChangeEvent.from_path('WEB-INF/Makefile')

        assert event.extension == ''

    def test_strategy_parse(self):
        assert DeploymentStrategy.parse('LocalAppServer') is DeploymentStrategy.LOCAL_APP_SERVER
        assert DeploymentStrategy.parse('DockerContainer') is DeploymentStrategy.DOCKER_CONTAINER
        assert DeploymentStrategy.parse(None) is DeploymentStrategy.NONE
        assert DeploymentStrategy.parse('localappserver') is DeploymentStrategy.NONE

    def test_orchestrator_tasks_are_not_collaborators(self):
        assert not Task.COPY_TO_REMOTE.is_collaborator
        assert Task.REINSTALL.is_collaborator
