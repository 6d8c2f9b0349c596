"""
Unit tests for deployment backends.

DockerBackend is exercised through a mocked ProcessExecutor, so no docker
daemon is needed; LocalBackend runs against a temporary directory.
"""

import pytest
from unittest.mock import Mock, MagicMock, call

from themewatch.core.implementations import RealFileSystemService
from themewatch.core.protocols import FileSystemService, ProcessExecutor
from themewatch.deploy import (
    DeploymentBackend,
    DockerBackend,
    EXPLODED_BUILD_DIR_NAME,
    LocalBackend,
    backends_for_strategy,
)
from themewatch.exceptions import ExecutionError
from themewatch.pipeline.tasks import DeploymentStrategy


def ok_process():
    process = Mock(spec=ProcessExecutor)
    process.run.return_value = MagicMock(returncode=0, stdout='', stderr='')
    return process


class TestLocalBackend:
    """Test LocalBackend clean/copy."""

    def test_clean_removes_bundle_dir(self, tmp_path):
        bundle = tmp_path / EXPLODED_BUILD_DIR_NAME
        (bundle / 'css').mkdir(parents=True)
        (bundle / 'css' / 'main.css').write_text('body {}')

        LocalBackend(bundle, RealFileSystemService()).clean()

        assert not bundle.exists()

    def test_clean_missing_dir_is_fine(self, tmp_path):
        fs = Mock(spec=FileSystemService)
        fs.exists.return_value = False

        LocalBackend(tmp_path / 'missing', fs).clean()

        fs.rmtree.assert_not_called()

    def test_copy_is_noop(self, tmp_path):
        fs = Mock(spec=FileSystemService)

        LocalBackend(tmp_path, fs).copy(tmp_path, '/anywhere')

        assert fs.mock_calls == []

    def test_satisfies_protocol(self, tmp_path):
        assert isinstance(LocalBackend(tmp_path, Mock()), DeploymentBackend)


class TestDockerBackend:
    """Test DockerBackend command construction and failures."""

    def test_remote_base_path(self):
        backend = DockerBackend('c1', 'my-theme', ok_process())

        assert backend.remote_base_path == '/tmp/my-theme/.web_bundle_build'

    def test_clean_runs_rm_in_container(self):
        process = ok_process()
        backend = DockerBackend('c1', 'my-theme', process)

        backend.clean()

        process.run.assert_called_once_with(
            ['docker', 'exec', 'c1', 'rm', '-rf', '/tmp/my-theme/.web_bundle_build']
        )

    def test_copy_creates_dir_then_streams_contents(self, tmp_path):
        process = ok_process()
        backend = DockerBackend('c1', 'my-theme', process)
        local = tmp_path / EXPLODED_BUILD_DIR_NAME

        backend.copy(local, backend.remote_base_path)

        assert process.run.call_args_list == [
            call(['docker', 'exec', 'c1', 'mkdir', '-p', '/tmp/my-theme/.web_bundle_build']),
            call(['docker', 'cp', f'{local.as_posix()}/.', 'c1:/tmp/my-theme/.web_bundle_build']),
        ]

    def test_nonzero_exit_raises_execution_error(self):
        process = Mock(spec=ProcessExecutor)
        process.run.return_value = MagicMock(
            returncode=1, stdout='', stderr='Error: No such container: c1'
        )
        backend = DockerBackend('c1', 'my-theme', process)

        with pytest.raises(ExecutionError) as excinfo:
            backend.clean()

        assert excinfo.value.returncode == 1
        assert 'No such container' in excinfo.value.stderr
        assert 'No such container' in str(excinfo.value)

    def test_copy_stops_when_mkdir_fails(self, tmp_path):
        process = Mock(spec=ProcessExecutor)
        process.run.return_value = MagicMock(returncode=126, stdout='', stderr='permission denied')
        backend = DockerBackend('c1', 'my-theme', process)

        with pytest.raises(ExecutionError):
            backend.copy(tmp_path, backend.remote_base_path)

        assert process.run.call_count == 1

    @pytest.mark.parametrize('container, plugin', [('', 'my-theme'), ('c1', ''), (None, 'x')])
    def test_requires_container_and_plugin_name(self, container, plugin):
        with pytest.raises(ValueError):
            DockerBackend(container, plugin, ok_process())


class TestBackendsForStrategy:
    """Test strategy → backends factory."""

    def test_local_strategy_has_no_remote(self, tmp_path):
        backends = backends_for_strategy(
            DeploymentStrategy.LOCAL_APP_SERVER, tmp_path / EXPLODED_BUILD_DIR_NAME,
            Mock(), ok_process()
        )

        assert isinstance(backends.local, LocalBackend)
        assert backends.remote is None

    def test_docker_strategy_builds_remote(self, tmp_path):
        backends = backends_for_strategy(
            DeploymentStrategy.DOCKER_CONTAINER, tmp_path / EXPLODED_BUILD_DIR_NAME,
            Mock(), ok_process(), container_name='c1', plugin_name='my-theme'
        )

        assert isinstance(backends.remote, DockerBackend)
        assert backends.remote.remote_base_path == '/tmp/my-theme/.web_bundle_build'

    def test_docker_strategy_without_names_fails(self, tmp_path):
        with pytest.raises(ValueError):
            backends_for_strategy(
                DeploymentStrategy.DOCKER_CONTAINER, tmp_path, Mock(), ok_process()
            )
