"""Core dependency injection infrastructure for themewatch.

Protocol-based abstractions for every external dependency of the watch
session (console, subprocess, filesystem, YAML), plus their production
implementations.

Design:
- Protocol-based abstractions (typing.Protocol) for structural typing
- Production implementations for real-world use
- Easy mocking for unit tests
"""

from themewatch.core.protocols import (
    Logger,
    ProcessExecutor,
    ProcessResult,
    FileSystemService,
    ConfigLoader,
)

from themewatch.core.implementations import (
    ConsoleLogger,
    SubprocessExecutor,
    RealFileSystemService,
    YamlConfigLoader,
)

__all__ = [
    # Protocols
    "Logger",
    "ProcessExecutor",
    "ProcessResult",
    "FileSystemService",
    "ConfigLoader",
    # Implementations
    "ConsoleLogger",
    "SubprocessExecutor",
    "RealFileSystemService",
    "YamlConfigLoader",
]
