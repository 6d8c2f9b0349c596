"""Plan command - show which tasks a change (or setup/teardown) would run"""
from pathlib import Path

from themewatch.core import YamlConfigLoader
from themewatch.exceptions import ConfigLoadFailure
from themewatch.pipeline import (
    ChangeEvent,
    DeploymentStrategy,
    resolve_change_pipeline,
    resolve_setup_pipeline,
    resolve_teardown_pipeline,
)
from themewatch.utils.config import ConfigStore


def setup_parser(parser):
    """Setup argument parser for plan command"""
    parser.add_argument(
        'paths',
        nargs='*',
        help='Changed paths, relative to the source directory (e.g. css/main.css)'
    )
    parser.add_argument(
        '--strategy',
        choices=[s.value for s in DeploymentStrategy if s.value],
        help='Deployment strategy (default: from themewatch.yaml)'
    )
    parser.add_argument(
        '--project-dir',
        default='.',
        help='Theme project directory (default: current directory)'
    )


def format_pipeline(pipeline) -> str:
    if pipeline is None:
        return "(suppressed: compiled by the stylesheet watch)"
    if not pipeline:
        return "(nothing)"
    return ' → '.join(task.value for task in pipeline)


def execute(args):
    """Execute plan command"""
    strategy_value = args.strategy
    if strategy_value is None:
        try:
            config = ConfigStore.load(Path(args.project_dir), YamlConfigLoader())
        except ConfigLoadFailure as e:
            print(f"Error: {e}")
            return 1
        strategy_value = config.get('deploymentStrategy')

    strategy = DeploymentStrategy.parse(strategy_value)
    print(f"Deployment strategy: {strategy.value or 'none'}")
    print()
    print(f"  setup:    {format_pipeline(resolve_setup_pipeline(strategy))}")
    print(f"  teardown: {format_pipeline(resolve_teardown_pipeline(strategy))}")

    if args.paths:
        print()
    for path in args.paths:
        event = ChangeEvent.from_path(path)
        print(f"  {event.path}: {format_pipeline(resolve_change_pipeline(event, strategy))}")

    return 0
