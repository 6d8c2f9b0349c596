"""Production implementations of dependency injection protocols.

This module provides real implementations that wrap actual external
dependencies (console, subprocess, filesystem, YAML). For testing, use mocks
or test doubles instead of these implementations.
"""

import shutil
import subprocess
import sys
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List, Union


class ConsoleLogger:
    """Production logger that prints to console (stdout/stderr)."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def info(self, message: str) -> None:
        """Print info message to stdout."""
        print(message)

    def warning(self, message: str) -> None:
        """Print warning message to stdout."""
        print(f"Warning: {message}")

    def error(self, message: str) -> None:
        """Print error message to stderr."""
        print(f"Error: {message}", file=sys.stderr)

    def debug(self, message: str) -> None:
        """Print debug message to stdout (only in verbose mode)."""
        if self.verbose:
            print(f"Debug: {message}")


class SubprocessExecutor:
    """Production process executor using real subprocess.run."""

    def run(
        self,
        cmd: Union[List[str], str],
        cwd: Optional[str] = None,
        shell: bool = False,
        env: Optional[Dict[str, str]] = None,
    ) -> subprocess.CompletedProcess:
        """Run command and capture its output as text."""
        return subprocess.run(
            cmd,
            cwd=cwd,
            shell=shell,
            env=env,
            capture_output=True,
            text=True,
            check=False
        )


class RealFileSystemService:
    """Production filesystem service using real pathlib and shutil operations."""

    def exists(self, path: Union[str, Path]) -> bool:
        """Check if path exists."""
        return Path(path).exists()

    def is_dir(self, path: Union[str, Path]) -> bool:
        """Check if path is a directory."""
        return Path(path).is_dir()

    def rmtree(self, path: Union[str, Path]) -> None:
        """Recursively remove directory tree."""
        shutil.rmtree(path)

    def copytree(self, src: Union[str, Path], dst: Union[str, Path]) -> None:
        """Copy directory tree into dst, creating or merging it."""
        shutil.copytree(src, dst, dirs_exist_ok=True)


class YamlConfigLoader:
    """Production config loader using real YAML parser."""

    def load_yaml(self, path: Union[str, Path]) -> Any:
        """Load YAML file and return parsed document."""
        with open(path, 'r') as f:
            return yaml.safe_load(f)
