"""
DeploymentBackend Protocol - interface for where the exploded bundle lives.

Each backend knows how to clean its copy of the exploded bundle directory and
how to receive a freshly materialized one. Supports a local application
server directory and a remote Docker container.
"""

from typing import Protocol, Union, runtime_checkable
from pathlib import Path

# Name of the exploded (unpacked) bundle directory, locally and remotely
EXPLODED_BUILD_DIR_NAME = '.web_bundle_build'


@runtime_checkable
class DeploymentBackend(Protocol):
    """
    Interface for deployment backends.

    @runtime_checkable enables isinstance() checks:
        backend = DockerBackend(...)
        assert isinstance(backend, DeploymentBackend)

    Implementations:
        - LocalBackend: exploded bundle inside the project directory
        - DockerBackend: exploded bundle under /tmp inside a container
    """

    def clean(self) -> None:
        """
        Remove this backend's exploded bundle directory.

        Raises:
            ExecutionError: If an external command exits non-zero

        Postconditions:
            - The bundle directory no longer exists (missing is not an error)
        """
        ...

    def copy(self, source_dir: Union[str, Path], dest_path: str) -> None:
        """
        Make the contents of source_dir available at dest_path.

        Args:
            source_dir: Local, already materialized bundle directory
            dest_path: Destination path as seen by this backend

        Raises:
            ExecutionError: If an external command exits non-zero
        """
        ...
