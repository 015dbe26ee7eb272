#!/usr/bin/env python3
"""
Configuration schema definition for validation
"""
from typing import Dict, Any, List


class ConfigSchema:
    """Configuration schema for validation"""

    NUMBER = (int, float)

    SCHEMA = {
        'homology': {
            'trim': {'type': dict, 'required': True},
        },
        'mitab': {
            'keep_raw': {'type': bool, 'required': False},
            'skip_comments': {'type': bool, 'required': False},
        },
        'logging': {
            'level': {'type': str, 'required': False},
            'format': {'type': str, 'required': False},
            'log_dir': {'type': str, 'required': False},
        },
    }

    TRIM_SCHEMA = {
        'similarity_min': NUMBER,
        'identity_min': NUMBER,
        'coverage_min': NUMBER,
        'evalue_max': NUMBER,
        'taxon_mode': str,
        'compact': bool,
        'explain': bool,
        'dedupe': bool,
    }

    TAXON_MODES = ('every', 'some')

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> List[str]:
        """Validate configuration against schema

        Args:
            config: Configuration to validate

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        for section, fields in cls.SCHEMA.items():
            if any(props.get('required', False) for props in fields.values()):
                if section not in config:
                    errors.append(f"Missing required configuration section: {section}")
                    continue

            if section not in config:
                continue

            section_config = config[section]
            if not isinstance(section_config, dict):
                errors.append(f"Configuration section {section} must be a mapping")
                continue

            for field, props in fields.items():
                if props.get('required', False) and field not in section_config:
                    errors.append(f"Missing required configuration field: {section}.{field}")
                elif field in section_config and not isinstance(section_config[field], props['type']):
                    errors.append(
                        f"Invalid type for {section}.{field}: expected {props['type'].__name__}, "
                        f"got {type(section_config[field]).__name__}"
                    )

        trim = config.get('homology', {}).get('trim')
        if isinstance(trim, dict):
            errors.extend(cls._validate_trim(trim))

        return errors

    @classmethod
    def _validate_trim(cls, trim: Dict[str, Any]) -> List[str]:
        errors = []
        for field, expected in cls.TRIM_SCHEMA.items():
            value = trim.get(field)
            if value is None:
                continue
            # bool is an int subclass, thresholds must not be booleans
            if expected is cls.NUMBER and isinstance(value, bool) or not isinstance(value, expected):
                errors.append(f"Invalid type for homology.trim.{field}: got {type(value).__name__}")

        mode = trim.get('taxon_mode')
        if isinstance(mode, str) and mode.lower() not in cls.TAXON_MODES:
            errors.append(f"Invalid homology.trim.taxon_mode: {mode} (expected one of {', '.join(cls.TAXON_MODES)})")

        for field in ('detection_methods', 'taxons'):
            value = trim.get(field)
            if value is None:
                continue
            # a single value (one env override) stands for a one-element list
            if isinstance(value, bool) or not isinstance(value, (list, tuple, set, str, int)):
                errors.append(f"homology.trim.{field} must be a list or a single value")

        return errors
