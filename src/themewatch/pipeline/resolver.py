"""Pipeline resolution: (changed path, deployment strategy) -> ordered tasks.

Pure functions, no side effects. The tables below are the whole policy.
"""
from typing import Dict, Optional

from themewatch.pipeline.tasks import (
    ChangeEvent,
    DeploymentStrategy,
    Pipeline,
    STYLESHEET_SOURCE_EXTENSION,
    Task,
)

CHANGE_PIPELINES: Dict[str, Pipeline] = {
    'WEB-INF': (
        Task.BUILD_CLEAN,
        Task.BUILD_SRC,
        Task.BUILD_WEB_INF,
        Task.REINSTALL,
        Task.DEPLOY_FOLDER,
    ),
    'templates': (
        Task.BUILD_SRC,
        Task.BUILD_THEMELET_SRC,
        Task.BUILD_THEMELET_JS_INJECT,
        Task.REINSTALL,
        Task.DEPLOY_FOLDER,
    ),
    'css': (
        Task.BUILD_CLEAN,
        Task.BUILD_BASE,
        Task.BUILD_SRC,
        Task.BUILD_THEMELET_SRC,
        Task.BUILD_THEMELET_CSS_INJECT,
        Task.RENAME_CSS_DIR,
        Task.COMPILE_CSS,
        Task.MOVE_COMPILED_CSS,
        Task.REMOVE_OLD_CSS_DIR,
        Task.REINSTALL,
        Task.DEPLOY_CSS_FILES,
    ),
}

DEFAULT_CHANGE_PIPELINE: Pipeline = (Task.REINSTALL, Task.DEPLOY_FILE)

SETUP_PIPELINES: Dict[DeploymentStrategy, Pipeline] = {
    DeploymentStrategy.LOCAL_APP_SERVER: (
        Task.BUILD,
        Task.CLEAN_LOCAL_BUNDLE,
        Task.OSGI_CLEAN,
        Task.MATERIALIZE_LOCAL_BUNDLE,
    ),
    DeploymentStrategy.DOCKER_CONTAINER: (
        Task.BUILD,
        Task.CLEAN_LOCAL_BUNDLE,
        Task.CLEAN_REMOTE_BUNDLE,
        Task.OSGI_CLEAN,
        Task.MATERIALIZE_LOCAL_BUNDLE,
        Task.COPY_TO_REMOTE,
    ),
}


def resolve_change_pipeline(event: ChangeEvent, strategy: DeploymentStrategy) -> Optional[Pipeline]:
    """Return the pipeline for a changed file, or None if it is suppressed.

    Stylesheet sources never produce a pipeline; they are compiled by a
    separate watch.

    Args:
        event: Change relative to the source root
        strategy: Configured deployment strategy

    Returns:
        Ordered tuple of tasks, or None for suppressed changes
    """
    if event.extension == STYLESHEET_SOURCE_EXTENSION:
        return None
    return CHANGE_PIPELINES.get(event.subtree, DEFAULT_CHANGE_PIPELINE)


def resolve_setup_pipeline(strategy: DeploymentStrategy) -> Pipeline:
    """Return the pre-watch setup pipeline; empty for unknown strategies."""
    return SETUP_PIPELINES.get(strategy, ())


def resolve_teardown_pipeline(strategy: DeploymentStrategy) -> Pipeline:
    """Return the teardown pipeline. Always starts with clean-local-bundle."""
    if strategy is DeploymentStrategy.DOCKER_CONTAINER:
        return (Task.CLEAN_LOCAL_BUNDLE, Task.CLEAN_REMOTE_BUNDLE)
    return (Task.CLEAN_LOCAL_BUNDLE,)
