"""Watch command - build, deploy and live-reload on every source change"""
import logging
from pathlib import Path

from themewatch.core import (
    ConsoleLogger,
    RealFileSystemService,
    SubprocessExecutor,
    YamlConfigLoader,
)
from themewatch.exceptions import ThemeWatchError
from themewatch.utils.config import ConfigStore
from themewatch.utils.task_commands import shell_task_registry
from themewatch.watch.session import WatchSession


def setup_parser(parser):
    """Setup argument parser for watch command"""
    parser.add_argument(
        '--url',
        help='Application server URL to proxy to (overrides themewatch.yaml)'
    )
    parser.add_argument(
        '--project-dir',
        default='.',
        help='Theme project directory (default: current directory)'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Show verbose output'
    )


def build_session(args, logger) -> WatchSession:
    """Wire a WatchSession from command-line arguments and themewatch.yaml.

    Raises:
        ConfigLoadFailure: themewatch.yaml is invalid
        ValueError: Docker strategy without container/plugin name
    """
    project_dir = Path(args.project_dir).resolve()
    loader = YamlConfigLoader()
    process = SubprocessExecutor()
    config = ConfigStore.load(project_dir, loader)

    registry = shell_task_registry(config.get('tasks'), process, project_dir, logger, config=config)

    return WatchSession(
        project_dir,
        config,
        registry,
        filesystem=RealFileSystemService(),
        process_executor=process,
        config_loader=loader,
        logger=logger,
        url=getattr(args, 'url', None)
    )


def execute(args):
    """Execute watch command"""
    logger = ConsoleLogger(verbose=args.verbose)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(message)s'
    )

    try:
        session = build_session(args, logger)
    except (ThemeWatchError, ValueError) as e:
        logger.error(str(e))
        return 1

    exit_code = 0
    try:
        session.run()
    except KeyboardInterrupt:
        logger.info("\nStopping watch...")
    except ThemeWatchError as e:
        # Startup failures (setup pipeline, port, config) end the session
        logger.error(str(e))
        exit_code = 1
    finally:
        result = session.teardown()
        if not result.success:
            exit_code = 1

    return exit_code
