#!/usr/bin/env python3
"""
interolog models: homology support of candidate links and MITAB evidence records.
"""

from .homology import (
    HomologySupportRecord, EvidenceWrapper, HomologySupportRow,
    HomologySupportSet, TrimOptions, TaxonMatchMode, check_thresholds
)
from .mitab import MitabRecord, MitabField, parse_field

__all__ = [
    'HomologySupportRecord', 'EvidenceWrapper', 'HomologySupportRow',
    'HomologySupportSet', 'TrimOptions', 'TaxonMatchMode', 'check_thresholds',
    'MitabRecord', 'MitabField', 'parse_field',
]
