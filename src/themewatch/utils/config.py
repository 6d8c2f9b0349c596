"""Project configuration store backed by themewatch.yaml"""
from pathlib import Path
from typing import Any, Dict, Optional, Union

from themewatch.core.protocols import ConfigLoader
from themewatch.exceptions import ConfigLoadFailure

CONFIG_FILE_NAME = 'themewatch.yaml'

DEFAULTS: Dict[str, Any] = {
    'pathSrc': 'src',
    'pathBuild': 'build',
}


class ConfigStore:
    """Project settings loaded from themewatch.yaml, with get/set access.

    Known keys: url, appServerPath, deploymentStrategy, dockerContainerName,
    pluginName, sassOptions, postCSSOptions, pathSrc, pathBuild, tasks.

    During a watch session the orchestrator also sets appServerPathPlugin,
    activeBundleDir and changedFile here so task handlers can read them.
    set() only changes the in-memory values; the file is never rewritten.

    Args:
        path: Path to the YAML file (need not exist yet)
        loader: YAML loading abstraction
    """

    def __init__(self, path: Union[str, Path], loader: ConfigLoader):
        self.path = Path(path)
        self.loader = loader
        self._values: Dict[str, Any] = {}

    @classmethod
    def load(cls, project_dir: Union[str, Path], loader: ConfigLoader) -> 'ConfigStore':
        """Load themewatch.yaml from project_dir.

        A missing file yields an empty store.

        Raises:
            ConfigLoadFailure: If the file is unreadable or not a mapping
        """
        store = cls(Path(project_dir) / CONFIG_FILE_NAME, loader)
        if not store.path.exists():
            return store

        try:
            data = loader.load_yaml(store.path)
        except Exception as e:
            raise ConfigLoadFailure(f"Could not read {store.path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigLoadFailure(
                f"{store.path} must contain a mapping at the top level, "
                f"got {type(data).__name__}"
            )
        store._values = dict(data)
        return store

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._values:
            return self._values[key]
        if default is None:
            return DEFAULTS.get(key)
        return default

    def set(self, key: str, value: Optional[Any] = None) -> None:
        """Set key to value; a value of None removes the key."""
        if value is None:
            self._values.pop(key, None)
        else:
            self._values[key] = value
