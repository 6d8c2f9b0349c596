"""
Watch session exceptions.

Custom exceptions for build/deploy failures with actionable error messages.
Startup failures (port, config) are fatal; pipeline failures are not.
"""

from typing import List, Optional, Union


class ThemeWatchError(Exception):
    """Base class for all themewatch errors."""
    pass


class ExecutionError(ThemeWatchError):
    """
    Raised when an external process exits non-zero.

    Examples:
        - docker exec rm -rf failed inside the container
        - docker cp could not stream the bundle directory
        - a configured task command failed

    Attributes:
        command: Command that was run (argv list or shell string)
        returncode: Process exit status
        stderr: Captured error output
    """

    def __init__(self, command: Union[List[str], str], returncode: int, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr or ""
        shown = command if isinstance(command, str) else ' '.join(command)
        message = f"Command failed with exit status {returncode}: {shown}"
        if self.stderr.strip():
            message += f"\n{self.stderr.strip()[-1000:]}"
        super().__init__(message)


class PipelineStepFailure(ThemeWatchError):
    """
    Raised (or returned) when a pipeline task reports failure.

    The remaining tasks of the pipeline are skipped. During a watch session
    this is logged and the session goes back to watching.
    """

    def __init__(self, task, cause: Optional[BaseException] = None):
        self.task = task
        self.cause = cause
        task_id = getattr(task, 'value', task)
        if cause is not None:
            message = f"Task '{task_id}' failed: {cause}"
        else:
            message = f"Task '{task_id}' reported failure"
        super().__init__(message)


class PortAllocationFailure(ThemeWatchError):
    """Raised when no free local port can be found or bound at startup."""
    pass


class ConfigLoadFailure(ThemeWatchError):
    """
    Raised when a configuration file is missing or structurally invalid.

    Covers both the bundler configuration (bundler.yaml) and the project
    configuration store (themewatch.yaml).
    """
    pass
