"""
Deployment backends.

Provides protocol-based clean/copy backends for the exploded bundle:
    - LocalBackend: bundle directory inside the project (app server reads it)
    - DockerBackend: docker exec + docker cp into a running container

Public API:
    - DeploymentBackend: Protocol interface
    - backends_for_strategy, Backends: Strategy → backends
    - EXPLODED_BUILD_DIR_NAME: Bundle directory name
"""

from .base import DeploymentBackend, EXPLODED_BUILD_DIR_NAME
from .factory import Backends, backends_for_strategy
from .local import LocalBackend
from .docker import DockerBackend

__all__ = [
    # Protocol and constants
    "DeploymentBackend",
    "EXPLODED_BUILD_DIR_NAME",

    # Factory
    "Backends",
    "backends_for_strategy",

    # Implementations
    "LocalBackend",
    "DockerBackend",
]
