"""Watch session orchestration with dependency injection.

WatchSession is the single writer of SessionState. It runs the setup
pipeline, starts the dev proxy, turns change events into serialized
pipelines and finally tears everything down.

    IDLE → CLEANING → SETUP → WATCHING ⇄ DEPLOYING → ... → TEARDOWN → IDLE
"""

import threading
from pathlib import Path
from typing import Any, Optional, Union

from themewatch.core.protocols import ConfigLoader, FileSystemService, Logger, ProcessExecutor
from themewatch.deploy import EXPLODED_BUILD_DIR_NAME, Backends, backends_for_strategy
from themewatch.pipeline.executor import PipelineResult, SerialTrigger, TaskExecutor, TaskRegistry
from themewatch.pipeline.resolver import (
    resolve_change_pipeline,
    resolve_setup_pipeline,
    resolve_teardown_pipeline,
)
from themewatch.pipeline.tasks import ChangeEvent, DeploymentStrategy, Task
from themewatch.server.dev_server import DevProxyServer
from themewatch.server.livereload import ReloadBroadcaster
from themewatch.utils.config import ConfigStore
from themewatch.watch.state import (
    ACTIVE_BUNDLE_DIR,
    ACTIVE_BUNDLE_WATCHING,
    APP_SERVER_PATH_PLUGIN,
    CHANGED_FILE,
    WATCHING,
    SessionState,
    SessionView,
    WatchPhase,
)
from themewatch.watch.watcher import ChangeWatcher

# Session values task handlers read back through the config store
CONFIG_MIRRORED_KEYS = (APP_SERVER_PATH_PLUGIN, ACTIVE_BUNDLE_DIR, CHANGED_FILE)


class WatchSession:
    """Orchestrates one watch session.

    Args:
        project_dir: Theme project root
        config: Project configuration store
        registry: Handlers for the collaborator tasks
        filesystem: Filesystem operations abstraction
        process_executor: Subprocess execution abstraction
        config_loader: YAML loading abstraction
        logger: Logging abstraction
        url: Overrides the configured application server URL
        dev_server: Prebuilt dev proxy server (built from config if omitted)
        broadcaster: Reload counter shared with the dev proxy

    Raises:
        ValueError: DockerContainer strategy without container or plugin name
    """

    def __init__(
        self,
        project_dir: Union[str, Path],
        config: ConfigStore,
        registry: TaskRegistry,
        filesystem: FileSystemService,
        process_executor: ProcessExecutor,
        config_loader: ConfigLoader,
        logger: Logger,
        url: Optional[str] = None,
        dev_server: Optional[DevProxyServer] = None,
        broadcaster: Optional[ReloadBroadcaster] = None
    ):
        self.project_dir = Path(project_dir)
        self.config = config
        self.fs = filesystem
        self.process = process_executor
        self.config_loader = config_loader
        self.log = logger

        self.url = url or config.get('url')
        self.strategy = DeploymentStrategy.parse(config.get('deploymentStrategy'))
        self.bundle_dir = self.project_dir / EXPLODED_BUILD_DIR_NAME
        self.source_root = self.project_dir / config.get('pathSrc')
        self.build_dir = self.project_dir / config.get('pathBuild')

        self.backends: Backends = backends_for_strategy(
            self.strategy,
            self.bundle_dir,
            filesystem,
            process_executor,
            container_name=config.get('dockerContainerName'),
            plugin_name=config.get('pluginName'),
            logger=logger
        )

        self.broadcaster = broadcaster or ReloadBroadcaster()
        self.dev_server = dev_server

        registry.update({
            Task.CLEAN_LOCAL_BUNDLE: self._clean_local_bundle,
            Task.CLEAN_REMOTE_BUNDLE: self._clean_remote_bundle,
            Task.MATERIALIZE_LOCAL_BUNDLE: self._materialize_local_bundle,
            Task.COPY_TO_REMOTE: self._copy_to_remote,
        })
        self.executor = TaskExecutor(registry, logger)
        self.trigger: SerialTrigger[ChangeEvent] = SerialTrigger(self._deploy)

        self._state = SessionState()
        self.last_result: Optional[PipelineResult] = None
        self._watcher: Optional[ChangeWatcher] = None

    @property
    def state(self) -> SessionView:
        """Read-only view of the session state."""
        return self._state.view()

    @property
    def phase(self) -> WatchPhase:
        return self._state.phase

    def _transition(self, phase: WatchPhase, **values: Any) -> None:
        """Move the session to phase; shared keys are mirrored into the config store."""
        self._state.transition(phase, **values)
        for key in CONFIG_MIRRORED_KEYS:
            if key in values:
                self.config.set(key, values[key])

    # Orchestrator-owned tasks

    def _clean_local_bundle(self) -> None:
        self.backends.local.clean()

    def _clean_remote_bundle(self) -> None:
        if self.backends.remote is None:
            raise RuntimeError("No remote backend for this deployment strategy")
        self.backends.remote.clean()

    def _materialize_local_bundle(self) -> None:
        """Copy the build output into the exploded bundle directory."""
        if not self.fs.is_dir(self.build_dir):
            raise FileNotFoundError(
                f"Build output not found at {self.build_dir}\n"
                f"Check that the 'build' task writes to pathBuild ({self.config.get('pathBuild')})"
            )
        self.fs.copytree(self.build_dir, self.bundle_dir)

    def _copy_to_remote(self) -> None:
        remote = self.backends.remote
        if remote is None:
            raise RuntimeError("No remote backend for this deployment strategy")
        remote.copy(self.bundle_dir, remote.remote_base_path)

    # Lifecycle

    def _make_dev_server(self) -> DevProxyServer:
        return DevProxyServer(
            self.project_dir,
            self.url,
            self.config_loader,
            self.broadcaster,
            sass_options=self.config.get('sassOptions'),
            postcss_options=self.config.get('postCSSOptions')
        )

    def start(self) -> None:
        """Run the setup pipeline and start the dev proxy.

        Raises:
            PipelineStepFailure: A setup task failed
            PortAllocationFailure: No port could be found or bound
            ConfigLoadFailure: Bundler configuration or URL missing/invalid
        """
        self._transition(
            WatchPhase.CLEANING,
            **{WATCHING: True, APP_SERVER_PATH_PLUGIN: str(self.bundle_dir)}
        )

        setup = resolve_setup_pipeline(self.strategy)
        if not setup:
            self.log.warning(
                f"Unknown deployment strategy {self.config.get('deploymentStrategy')!r}; "
                f"skipping setup"
            )
        self.log.info(f"Setting up watch ({len(setup)} task(s))...")
        self.executor.run_or_raise(setup)

        self._transition(WatchPhase.SETUP)
        if self.dev_server is None:
            self.dev_server = self._make_dev_server()
        self.dev_server.start()

        self._transition(
            WatchPhase.WATCHING,
            **{ACTIVE_BUNDLE_DIR: ACTIVE_BUNDLE_WATCHING, CHANGED_FILE: None}
        )
        if self.dev_server.landing_url:
            self.log.info(f"Dev server: {self.dev_server.landing_url}")

    def on_change(self, event: ChangeEvent) -> bool:
        """Entry point for change notifications from any thread.

        Returns:
            True if the change ran on this call, False if it was parked
            behind an in-flight pipeline or ignored
        """
        if self.phase not in (WatchPhase.WATCHING, WatchPhase.DEPLOYING):
            self.log.debug(f"Ignoring change to {event.path} while {self.phase.value}")
            return False
        return self.trigger.trigger(event)

    def _deploy(self, event: ChangeEvent) -> Optional[PipelineResult]:
        pipeline = resolve_change_pipeline(event, self.strategy)
        if pipeline is None:
            self.log.debug(f"{event.path}: stylesheet source, left to the stylesheet watch")
            return None

        self.log.info(f"Changed: {event.path}")
        self._transition(WatchPhase.DEPLOYING, **{CHANGED_FILE: event.path})
        try:
            result = self.executor.run(pipeline)
        finally:
            self._transition(WatchPhase.WATCHING, **{CHANGED_FILE: None})

        self.last_result = result
        if result.success:
            self.broadcaster.notify()
            self.log.info(f"✓ Deployed {event.path}")
        else:
            self.log.error(str(result.failure))
        return result

    def run(self, stop_event: Optional[threading.Event] = None) -> None:
        """Start the session and block watching the source tree."""
        self.start()
        self._watcher = ChangeWatcher(self.source_root, self.on_change, stop_event=stop_event)
        self._watcher.run()

    def stop(self) -> None:
        """Stop the watch loop; teardown() still has to be called."""
        if self._watcher is not None:
            self._watcher.stop()

    def teardown(self) -> PipelineResult:
        """Stop the dev proxy, run the teardown pipeline and return to IDLE."""
        self.stop()
        self._transition(WatchPhase.TEARDOWN, **{ACTIVE_BUNDLE_DIR: None})

        if self.dev_server is not None:
            self.dev_server.stop()

        result = self.executor.run(resolve_teardown_pipeline(self.strategy))
        self._transition(WatchPhase.IDLE, **{WATCHING: False, CHANGED_FILE: None})

        if not result.success:
            self.log.error(f"Teardown incomplete: {result.failure}")
        return result
