# interolog/cli/main.py
import argparse
import logging
import sys
from importlib import import_module
from typing import List, Optional

from interolog.config import ConfigManager
from interolog.core.logging_config import LoggingManager
from interolog.error_handlers import cli_error_handler
from . import get_command_groups


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='interolog',
                                     description='Interolog mapping of protein-protein interactions')

    parser.add_argument('--config', type=str, help='Path to configuration file')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='Increase verbosity (can be used multiple times)')
    parser.add_argument('--log-file', type=str,
                        help='Log to file in addition to stderr')
    parser.add_argument('--json', action='store_true',
                        help='Output results as JSON')

    subparsers = parser.add_subparsers(dest='group', help='Command group')
    for group, description in get_command_groups().items():
        group_parser = subparsers.add_parser(group, help=description)
        import_module(f"interolog.cli.{group}").setup_parser(group_parser)

    return parser


@cli_error_handler
def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config_manager = ConfigManager(args.config)

    # 0=WARNING, 1=INFO, 2=DEBUG
    log_level = max(logging.DEBUG, logging.WARNING - args.verbose * 10)
    config = dict(config_manager.config)
    config['logging'] = {**config.get('logging', {}), 'level': logging.getLevelName(log_level)}
    logger = LoggingManager.configure(
        verbose=(log_level <= logging.DEBUG),
        log_file=args.log_file,
        component="interolog",
        config=config
    )

    if not args.group or not getattr(args, 'command', None):
        parser.print_help()
        return 0

    logger.debug(f"Running {args.group} {args.command}")
    module = import_module(f"interolog.cli.{args.group}")
    return module.run_command(args, config_manager)


if __name__ == "__main__":
    sys.exit(main())
