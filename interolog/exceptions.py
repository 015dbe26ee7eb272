#!/usr/bin/env python3
"""
Exception hierarchy for interolog.
All custom exceptions should inherit from InterologError.
"""
from typing import Dict, Any, Optional


class InterologError(Exception):
    """Base exception for all interolog errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize with error message and optional details

        Args:
            message: Error message
            details: Optional details dictionary with context
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(InterologError):
    """Error related to configuration issues"""
    pass


class ValidationError(InterologError):
    """Invalid options or data passed to a model"""
    pass


class ParseError(InterologError):
    """Base class for input parsing errors"""
    pass


class MitabParseError(ParseError):
    """A PSI-MITAB line could not be split into its columns"""
    pass


class FileOperationError(InterologError):
    """Error during file operations"""
    pass
