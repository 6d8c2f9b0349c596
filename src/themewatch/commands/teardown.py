"""Teardown command - remove exploded bundles left by a watch session"""
from themewatch.commands.watch import build_session
from themewatch.core import ConsoleLogger
from themewatch.exceptions import ThemeWatchError


def setup_parser(parser):
    """Setup argument parser for teardown command"""
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


def execute(args):
    """Execute teardown command"""
    logger = ConsoleLogger(verbose=args.verbose)

    try:
        session = build_session(args, logger)
    except (ThemeWatchError, ValueError) as e:
        logger.error(str(e))
        return 1

    result = session.teardown()
    if not result.success:
        return 1

    logger.info("Cleaned:")
    for task in result.completed:
        logger.info(f"  ✓ {task.value}")
    return 0
