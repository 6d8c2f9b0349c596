"""
LocalBackend - exploded bundle served straight from the project directory.

The application server points at the local bundle directory, so build tasks
already materialize artifacts in place and copying is a no-op.
"""

from pathlib import Path
from typing import Optional, Union

from themewatch.core.protocols import FileSystemService, Logger


class LocalBackend:
    """Local filesystem backend.

    Args:
        bundle_dir: Absolute path of the local exploded bundle directory
        filesystem: Filesystem operations abstraction
        logger: Optional logging abstraction
    """

    def __init__(
        self,
        bundle_dir: Union[str, Path],
        filesystem: FileSystemService,
        logger: Optional[Logger] = None
    ):
        self.bundle_dir = Path(bundle_dir)
        self.fs = filesystem
        self.log = logger

    def clean(self) -> None:
        """Recursively remove the local exploded bundle directory."""
        if not self.fs.exists(self.bundle_dir):
            return
        self.fs.rmtree(self.bundle_dir)
        if self.log:
            self.log.debug(f"Removed {self.bundle_dir}")

    def copy(self, source_dir: Union[str, Path], dest_path: str) -> None:
        """No-op: artifacts are already in place."""
        return None
