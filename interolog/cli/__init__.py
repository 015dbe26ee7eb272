"""
Command-line interface for interolog.

Commands are organized in groups; each group module defines a COMMANDS
dictionary plus setup_parser() and run_command() functions.
"""

import logging
from importlib import import_module
from typing import Dict, List

__all__ = ['get_command_groups', 'get_commands']

COMMAND_GROUPS = {
    'mitab': 'Inspect and filter PSI-MITAB interaction evidence',
}

logger = logging.getLogger("interolog.cli")


def get_command_groups() -> Dict[str, str]:
    """Return all available command groups and their descriptions"""
    return COMMAND_GROUPS


def get_commands(group: str) -> List[str]:
    """Return all commands available in a specific group"""
    try:
        module = import_module(f"interolog.cli.{group}")
    except ImportError as e:
        logger.error(f"Failed to import command group '{group}': {e}")
        return []

    if hasattr(module, 'COMMANDS'):
        return list(module.COMMANDS)
    logger.warning(f"Command group '{group}' does not define a COMMANDS dictionary")
    return []
