"""
Build/deploy pipelines.

Public API:
    - Task, DeploymentStrategy, ChangeEvent: Shared types
    - resolve_change_pipeline, resolve_setup_pipeline, resolve_teardown_pipeline
    - TaskRegistry, TaskExecutor, PipelineResult, SerialTrigger
"""

from .tasks import (
    ChangeEvent,
    DeploymentStrategy,
    Pipeline,
    STYLESHEET_SOURCE_EXTENSION,
    Task,
)
from .resolver import (
    resolve_change_pipeline,
    resolve_setup_pipeline,
    resolve_teardown_pipeline,
)
from .executor import PipelineResult, SerialTrigger, TaskExecutor, TaskRegistry

__all__ = [
    # Types
    "ChangeEvent",
    "DeploymentStrategy",
    "Pipeline",
    "STYLESHEET_SOURCE_EXTENSION",
    "Task",

    # Resolver
    "resolve_change_pipeline",
    "resolve_setup_pipeline",
    "resolve_teardown_pipeline",

    # Executor
    "PipelineResult",
    "SerialTrigger",
    "TaskExecutor",
    "TaskRegistry",
]
