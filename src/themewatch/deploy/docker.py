"""
DockerBackend - Deploy the exploded bundle into a running container.

Targets: Liferay (or any app server) running in a local Docker container
Strategy: docker exec rm/mkdir → docker cp of the local bundle directory
"""

import posixpath
from pathlib import Path
from typing import List, Optional, Union

from themewatch.core.protocols import Logger, ProcessExecutor
from themewatch.exceptions import ExecutionError
from .base import EXPLODED_BUILD_DIR_NAME


class DockerBackend:
    """
    Keeps a copy of the exploded bundle under /tmp inside a container.

    Remote layout:
        /tmp/<plugin_name>/<bundle_dir_name>/

    Requirements: docker CLI on PATH, container already running
    """

    def __init__(
        self,
        container_name: str,
        plugin_name: str,
        process_executor: ProcessExecutor,
        bundle_dir_name: str = EXPLODED_BUILD_DIR_NAME,
        logger: Optional[Logger] = None,
        docker_binary: str = 'docker'
    ):
        """
        Initialize Docker backend.

        Args:
            container_name: Name or id of the running container (e.g. "liferay")
            plugin_name: Theme plugin name, used to namespace the remote path
            process_executor: Subprocess execution abstraction
            bundle_dir_name: Exploded bundle directory name
            logger: Optional logging abstraction
            docker_binary: docker executable to invoke

        Raises:
            ValueError: If container_name or plugin_name is empty
        """
        if not container_name:
            raise ValueError(
                "DockerContainer deployment requires 'dockerContainerName'\n"
                "Set it in themewatch.yaml, e.g.:\n"
                "  dockerContainerName: liferay"
            )
        if not plugin_name:
            raise ValueError(
                "DockerContainer deployment requires 'pluginName'\n"
                "Set it in themewatch.yaml, e.g.:\n"
                "  pluginName: my-theme"
            )

        self.container_name = container_name
        self.plugin_name = plugin_name
        self.process = process_executor
        self.log = logger
        self.docker = docker_binary
        self.remote_base_path = posixpath.join('/tmp', plugin_name, bundle_dir_name)

    def _exec_cmd(self, command: List[str]) -> List[str]:
        """Build `docker exec` argv for a command inside the container."""
        return [self.docker, 'exec', self.container_name, *command]

    def _run(self, cmd: List[str]) -> None:
        """Run a docker command, raising ExecutionError on non-zero exit."""
        if self.log:
            self.log.debug(' '.join(cmd))
        result = self.process.run(cmd)
        if result.returncode != 0:
            raise ExecutionError(cmd, result.returncode, result.stderr)

    def exec(self, command: List[str]) -> None:
        """Execute a command inside the container."""
        self._run(self._exec_cmd(command))

    def clean(self) -> None:
        """Recursively remove the remote bundle directory inside the container."""
        self.exec(['rm', '-rf', self.remote_base_path])

    def copy(self, source_dir: Union[str, Path], dest_path: Optional[str] = None) -> None:
        """
        Stream the local bundle directory into the container.

        Steps:
            1. docker exec <container> mkdir -p <remote>
            2. docker cp <local>/. <container>:<remote>

        Args:
            source_dir: Local exploded bundle directory
            dest_path: Remote destination (default: remote_base_path)

        Raises:
            ExecutionError: If either docker command fails
        """
        remote = dest_path or self.remote_base_path
        self.exec(['mkdir', '-p', remote])
        # Trailing "/." copies the directory's contents rather than nesting it
        local = f"{Path(source_dir).as_posix().rstrip('/')}/."
        self._run([self.docker, 'cp', local, f"{self.container_name}:{remote}"])
