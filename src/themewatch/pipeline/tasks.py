"""
Task, strategy and change-event types shared by the resolver and executor.
"""

import posixpath
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath
from typing import Optional, Tuple, Union

# Stylesheet sources are compiled by a separate watch, never by a pipeline
STYLESHEET_SOURCE_EXTENSION = '.scss'


class DeploymentStrategy(Enum):
    """Where built artifacts are installed. Fixed for the session lifetime."""

    NONE = None
    LOCAL_APP_SERVER = 'LocalAppServer'
    DOCKER_CONTAINER = 'DockerContainer'

    @classmethod
    def parse(cls, value: Optional[str]) -> 'DeploymentStrategy':
        """Map a configured value to a strategy; unknown values map to NONE."""
        for strategy in cls:
            if strategy.value is not None and strategy.value == value:
                return strategy
        return cls.NONE


class Task(Enum):
    """Every named unit of work a pipeline can contain.

    Collaborator tasks are provided by the host build system; the
    orchestrator-owned tasks operate on the exploded bundle directory
    through the deployment backends.
    """

    # Collaborator tasks
    BUILD = 'build'
    BUILD_CLEAN = 'build-clean'
    BUILD_SRC = 'build-src'
    BUILD_WEB_INF = 'build-web-inf'
    BUILD_BASE = 'build-base'
    BUILD_THEMELET_SRC = 'build-themelet-src'
    BUILD_THEMELET_JS_INJECT = 'build-themelet-js-inject'
    BUILD_THEMELET_CSS_INJECT = 'build-themelet-css-inject'
    RENAME_CSS_DIR = 'rename-css-dir'
    COMPILE_CSS = 'compile-css'
    MOVE_COMPILED_CSS = 'move-compiled-css'
    REMOVE_OLD_CSS_DIR = 'remove-old-css-dir'
    OSGI_CLEAN = 'osgi-clean'
    REINSTALL = 'reinstall'
    DEPLOY_FOLDER = 'deploy-folder'
    DEPLOY_FILE = 'deploy-file'
    DEPLOY_CSS_FILES = 'deploy-css-files'

    # Orchestrator-owned tasks
    CLEAN_LOCAL_BUNDLE = 'clean-local-bundle'
    CLEAN_REMOTE_BUNDLE = 'clean-remote-bundle'
    MATERIALIZE_LOCAL_BUNDLE = 'materialize-local-bundle'
    COPY_TO_REMOTE = 'copy-to-remote'

    @property
    def is_collaborator(self) -> bool:
        return self not in ORCHESTRATOR_TASKS


ORCHESTRATOR_TASKS = frozenset({
    Task.CLEAN_LOCAL_BUNDLE,
    Task.CLEAN_REMOTE_BUNDLE,
    Task.MATERIALIZE_LOCAL_BUNDLE,
    Task.COPY_TO_REMOTE,
})

Pipeline = Tuple[Task, ...]


@dataclass(frozen=True)
class ChangeEvent:
    """A single changed file, relative to the source root.

    Attributes:
        path: POSIX-style path relative to the source root (e.g. "css/main.scss")
        extension: File extension including the dot (e.g. ".scss"), or ""
    """
    path: str
    extension: str

    @classmethod
    def from_path(cls, path: Union[str, PurePath], source_root: Union[str, PurePath, None] = None) -> 'ChangeEvent':
        """Build an event from an absolute or source-relative path."""
        pure = PurePath(path)
        if source_root is not None and pure.is_absolute():
            pure = pure.relative_to(PurePath(source_root))
        relative = pure.as_posix()
        return cls(path=relative, extension=posixpath.splitext(relative)[1])

    @property
    def subtree(self) -> str:
        """First path segment, e.g. "css" for "css/main.scss"."""
        return self.path.split('/', 1)[0]
