#!/usr/bin/env python3
"""
Default configuration values for interolog
"""

DEFAULT_CONFIG = {
    'homology': {
        'trim': {
            'similarity_min': 0.0,
            'identity_min': 0.0,
            'coverage_min': 0.0,
            'evalue_max': 1.0,
            'detection_methods': None,
            'taxons': None,
            'taxon_mode': 'every',
            'compact': False,
            'explain': False,
            'dedupe': False,
        },
    },
    'mitab': {
        'keep_raw': False,
        'skip_comments': True,
    },
    'logging': {
        'level': 'INFO',
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    },
}
