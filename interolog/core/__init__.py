"""Shared infrastructure for interolog (logging setup)"""

from .logging_config import LoggingManager

__all__ = ['LoggingManager']
