"""Collaborator task handlers built from the `tasks:` section of themewatch.yaml.

Example:
    tasks:
      build: npx gulp build
      reinstall: npx gulp deploy
      deploy-file: npx gulp deploy:file --file "$THEMEWATCH_CHANGED_FILE"

Tasks with no configured command succeed without doing anything. Commands
run with the session values from the config store in their environment:

    THEMEWATCH_CHANGED_FILE   changedFile, relative to pathSrc
    THEMEWATCH_BUNDLE_DIR     appServerPathPlugin, the exploded bundle directory
    THEMEWATCH_SOURCE_DIR     absolute pathSrc
"""
import os
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Union

from themewatch.core.protocols import Logger, ProcessExecutor
from themewatch.exceptions import ConfigLoadFailure, ExecutionError
from themewatch.pipeline.executor import TaskRegistry
from themewatch.pipeline.tasks import Task
from themewatch.utils.config import ConfigStore
from themewatch.watch.state import APP_SERVER_PATH_PLUGIN, CHANGED_FILE

# Environment variable -> config store key
SESSION_ENV_KEYS = {
    'THEMEWATCH_CHANGED_FILE': CHANGED_FILE,
    'THEMEWATCH_BUNDLE_DIR': APP_SERVER_PATH_PLUGIN,
}


def task_environment(config: Optional[ConfigStore], project_dir: Path) -> Dict[str, str]:
    """Inherited environment plus the current session values.

    Unset session values are removed so nothing stale leaks in from the
    parent environment.
    """
    env = dict(os.environ)
    for name, key in SESSION_ENV_KEYS.items():
        value = config.get(key) if config is not None else None
        if value is None:
            env.pop(name, None)
        else:
            env[name] = str(value)

    source = config.get('pathSrc') if config is not None else 'src'
    env['THEMEWATCH_SOURCE_DIR'] = str(project_dir / source)
    return env


def _command_handler(
    task: Task,
    command: Optional[str],
    process_executor: ProcessExecutor,
    project_dir: Path,
    logger: Logger,
    config: Optional[ConfigStore]
) -> Callable[[], None]:
    def handler() -> None:
        if not command:
            logger.debug(f"No command configured for '{task.value}', skipping")
            return

        logger.info(f"[{task.value}] {command}")
        result = process_executor.run(
            command,
            cwd=str(project_dir),
            shell=True,
            env=task_environment(config, project_dir)
        )
        if result.stdout:
            logger.debug(result.stdout.rstrip())
        if result.returncode != 0:
            raise ExecutionError(command, result.returncode, result.stderr)

    return handler


def shell_task_registry(
    tasks: Optional[Mapping[str, Any]],
    process_executor: ProcessExecutor,
    project_dir: Union[str, Path],
    logger: Logger,
    config: Optional[ConfigStore] = None
) -> TaskRegistry:
    """Build a registry with a handler for every collaborator task.

    Args:
        tasks: Mapping of task identifier to shell command
        process_executor: Subprocess execution abstraction
        project_dir: Working directory for the commands
        logger: Logging abstraction
        config: Store the session values are read from at run time

    Raises:
        ConfigLoadFailure: If tasks is not a mapping of strings
    """
    tasks = tasks or {}
    if not isinstance(tasks, Mapping):
        raise ConfigLoadFailure("'tasks' in themewatch.yaml must map task names to commands")

    known = {task.value for task in Task if task.is_collaborator}
    for name, command in tasks.items():
        if name not in known:
            logger.warning(f"Ignoring unknown task '{name}' in themewatch.yaml")
        elif not isinstance(command, str):
            raise ConfigLoadFailure(f"Command for task '{name}' must be a string")

    handlers: Dict[Task, Callable[[], None]] = {
        task: _command_handler(
            task, tasks.get(task.value), process_executor, Path(project_dir), logger, config
        )
        for task in Task
        if task.is_collaborator
    }
    return TaskRegistry(handlers)
