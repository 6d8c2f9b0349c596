"""Protocol definitions for dependency injection.

This module defines Protocol-based abstractions for the external dependencies
of the watch session (console output, subprocesses, filesystem, YAML files).
Protocols use structural typing, so any class implementing these methods
satisfies the Protocol without explicit inheritance.

Tests pass ``Mock(spec=Protocol)`` doubles instead of the production
implementations in ``themewatch.core.implementations``.
"""

from typing import Protocol, Dict, Any, Optional, List, Union
from pathlib import Path


class Logger(Protocol):
    """Abstraction for logging operations.

    Replaces direct print() statements throughout the codebase.
    """

    def info(self, message: str) -> None:
        """Log informational message."""
        ...

    def warning(self, message: str) -> None:
        """Log warning message."""
        ...

    def error(self, message: str) -> None:
        """Log error message."""
        ...

    def debug(self, message: str) -> None:
        """Log debug message."""
        ...


class ProcessResult(Protocol):
    """Result of a completed process (mirrors subprocess.CompletedProcess)."""

    returncode: int
    stdout: str
    stderr: str


class ProcessExecutor(Protocol):
    """Abstraction for blocking process execution.

    Wraps subprocess.run so docker and task commands can be tested without
    spawning real processes.
    """

    def run(
        self,
        cmd: Union[List[str], str],
        cwd: Optional[str] = None,
        shell: bool = False,
        env: Optional[Dict[str, str]] = None,
    ) -> ProcessResult:
        """Run command to completion, capturing output as text.

        env replaces the inherited environment when given.
        """
        ...


class FileSystemService(Protocol):
    """Abstraction for the filesystem operations the bundle tasks need."""

    def exists(self, path: Union[str, Path]) -> bool:
        """Check if path exists."""
        ...

    def is_dir(self, path: Union[str, Path]) -> bool:
        """Check if path is a directory."""
        ...

    def rmtree(self, path: Union[str, Path]) -> None:
        """Recursively remove directory tree."""
        ...

    def copytree(self, src: Union[str, Path], dst: Union[str, Path]) -> None:
        """Copy directory tree, merging into an existing destination."""
        ...


class ConfigLoader(Protocol):
    """Abstraction for configuration file loading.

    Wraps YAML loading to enable testing with in-memory configurations.
    """

    def load_yaml(self, path: Union[str, Path]) -> Any:
        """Load YAML file and return the parsed document."""
        ...
