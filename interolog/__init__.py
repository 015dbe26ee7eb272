#!/usr/bin/env python3
"""
interolog - interolog mapping of protein-protein interactions

Fuses PSI-MITAB interaction evidence with PSI-BLAST homology hits into
filterable candidate interaction links.
"""

__version__ = '0.1.0'
__license__ = 'MIT'

from .exceptions import InterologError
from .error_handlers import format_error
from .models import HomologySupportSet, TrimOptions, MitabRecord
from .services import InteractionStore

__all__ = [
    'InterologError', 'format_error',
    'HomologySupportSet', 'TrimOptions', 'MitabRecord',
    'InteractionStore',
]
