"""
Backend factory - map a deployment strategy to its backends.

    LocalAppServer   → LocalBackend only
    DockerContainer  → LocalBackend + DockerBackend
    anything else    → LocalBackend only (nothing is ever deployed remotely)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from themewatch.core.protocols import FileSystemService, Logger, ProcessExecutor
from themewatch.pipeline.tasks import DeploymentStrategy
from .base import EXPLODED_BUILD_DIR_NAME, DeploymentBackend
from .local import LocalBackend


@dataclass(frozen=True)
class Backends:
    """Backends used by one watch session.

    Attributes:
        local: Backend owning the local exploded bundle directory
        remote: Container backend, only for the DockerContainer strategy
    """
    local: DeploymentBackend
    remote: Optional[DeploymentBackend] = None


def backends_for_strategy(
    strategy: DeploymentStrategy,
    bundle_dir: Union[str, Path],
    filesystem: FileSystemService,
    process_executor: ProcessExecutor,
    container_name: Optional[str] = None,
    plugin_name: Optional[str] = None,
    logger: Optional[Logger] = None
) -> Backends:
    """
    Build the backends for a strategy.

    Raises:
        ValueError: DockerContainer without container name or plugin name
    """
    # Lazy import keeps docker out of the local-only path
    from .docker import DockerBackend

    local = LocalBackend(bundle_dir, filesystem, logger=logger)

    if strategy is DeploymentStrategy.DOCKER_CONTAINER:
        remote = DockerBackend(
            container_name or '',
            plugin_name or '',
            process_executor,
            bundle_dir_name=Path(bundle_dir).name or EXPLODED_BUILD_DIR_NAME,
            logger=logger
        )
        return Backends(local=local, remote=remote)

    return Backends(local=local)
