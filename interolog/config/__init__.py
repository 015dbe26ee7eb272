#!/usr/bin/env python3
"""
interolog configuration module
"""
from .manager import ConfigManager
from .schema import ConfigSchema
from .defaults import DEFAULT_CONFIG

__all__ = ['ConfigManager', 'ConfigSchema', 'DEFAULT_CONFIG']
