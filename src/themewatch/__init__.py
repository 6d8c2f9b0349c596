"""
themewatch - incremental build-and-deploy watcher for theme projects

Rebuilds and redeploys the changed part of a theme on every source change,
to a local application server or a Docker container, behind a live-reload
dev proxy.
"""
import argparse
import sys

__version__ = "1.0.0"


def main():
    """Main CLI entry point"""
    from themewatch.commands import plan, teardown, watch

    parser = argparse.ArgumentParser(
        prog='themewatch',
        description='themewatch: incremental theme build, deploy and live reload',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  themewatch watch                          # Watch src/, deploy changes, start dev proxy
  themewatch watch --url http://localhost:8080
  themewatch plan css/main.css js/app.js    # Show the tasks a change would run
  themewatch teardown                       # Remove exploded bundles
        '''
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    # Watch command
    watch_parser = subparsers.add_parser('watch', help='Watch, deploy and live reload')
    watch.setup_parser(watch_parser)

    # Plan command
    plan_parser = subparsers.add_parser('plan', help='Show resolved pipelines')
    plan.setup_parser(plan_parser)

    # Teardown command
    teardown_parser = subparsers.add_parser('teardown', help='Clean exploded bundles')
    teardown.setup_parser(teardown_parser)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Dispatch to command handler
    try:
        if args.command == 'watch':
            sys.exit(watch.execute(args))
        elif args.command == 'plan':
            sys.exit(plan.execute(args))
        elif args.command == 'teardown':
            sys.exit(teardown.execute(args))
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    main()
