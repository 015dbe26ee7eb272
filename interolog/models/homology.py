#!/usr/bin/env python3
"""
Homology support of a candidate interaction link.

A candidate link between two query proteins is supported by pairs of
homology hits: for each row, one PSI-BLAST hit of the "low" query and one
of the "high" query, whose templates are known to interact. The MITAB
evidence backing the template interaction is attached to the row.

Rows are filtered in place with ``HomologySupportSet.trim``: records are
flagged valid/invalid and may optionally be removed for good.
"""

import json
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set, Tuple, Union

import numpy as np

from interolog.exceptions import ValidationError

# Layout of a homology field vector (PSI-BLAST tabular hit)
TEMPLATE = 0
REFERENCE_LENGTH = 1
QUERY_START = 2
QUERY_END = 3
TEMPLATE_START = 4
TEMPLATE_END = 5
ALIGNMENT_LENGTH = 6
SIMILAR_COUNT = 7
IDENTICAL_COUNT = 8
EVALUE = 9

HVector = List[str]
TrimReason = Dict[str, Union[bool, str]]

logger = logging.getLogger("interolog.homology")


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _to_int(value: Any) -> float:
    """Integer part of a numeric field, nan when unparsable"""
    number = _to_float(value)
    if not math.isfinite(number):
        return math.nan
    return float(math.trunc(number))


def _field(data: HVector, index: int) -> Any:
    return data[index] if 0 <= index < len(data) else None


def _percent(numerator: float, denominator: float) -> float:
    with np.errstate(divide='ignore', invalid='ignore'):
        return float(np.float64(100.0) * np.float64(numerator) / np.float64(denominator))


def _as_set(values: Any) -> Set[Any]:
    # A single env or YAML value arrives as a scalar, not a list
    if isinstance(values, (str, int, float)):
        return {values}
    return set(values)


class TaxonMatchMode(Enum):
    """How the taxon ids of an evidence record are matched against a taxon set"""
    EVERY = "every"     # all taxon ids must belong to the set
    SOME = "some"       # at least one taxon id must belong to the set

    def matches(self, taxids: Iterable[str], taxons: Set[str]) -> bool:
        if self is TaxonMatchMode.EVERY:
            return all(taxid in taxons for taxid in taxids)
        return any(taxid in taxons for taxid in taxids)


@dataclass
class HomologySupportRecord:
    """One homology hit of a query protein"""
    data: HVector
    valid: bool = True

    @property
    def length(self) -> float:
        """Length of the aligned query segment"""
        return _to_int(_field(self.data, QUERY_END)) - _to_int(_field(self.data, QUERY_START)) + 1

    @property
    def template(self) -> Optional[str]:
        """Identifier (accession number) of the homolog"""
        return _field(self.data, TEMPLATE)

    @property
    def sim_pct(self) -> float:
        """Sequence similarity percentage"""
        return _percent(_to_float(_field(self.data, SIMILAR_COUNT)), self.length)

    @property
    def id_pct(self) -> float:
        """Sequence identity percentage"""
        return _percent(_to_float(_field(self.data, IDENTICAL_COUNT)), self.length)

    @property
    def cv_pct(self) -> float:
        """Coverage percentage of the reference length"""
        return _percent(self.length, _to_int(_field(self.data, REFERENCE_LENGTH)))

    @property
    def evalue(self) -> float:
        """E-value computed by PSI-BLAST"""
        return _to_float(_field(self.data, EVALUE))

    def to_dict(self) -> Dict[str, Any]:
        return {'data': list(self.data), 'valid': self.valid}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HomologySupportRecord':
        return cls(data=list(data['data']), valid=bool(data.get('valid', True)))


@dataclass
class EvidenceWrapper:
    """Interaction evidence attached to a homology row, with its validity"""
    data: Any
    valid: bool = True


@dataclass
class HomologySupportRow:
    """Both homology hits of a row and the evidence supporting them"""
    low: HomologySupportRecord
    high: HomologySupportRecord
    evidence: List[EvidenceWrapper] = field(default_factory=list)


@dataclass
class TrimOptions:
    """Filters applied by HomologySupportSet.trim

    Percentages are expressed from 0 to 100. Records below a ``*_min``
    threshold, or above ``evalue_max``, are invalidated.
    ``detection_methods`` and ``taxons`` restrict the supporting evidence.
    """
    similarity_min: float = 0.0
    identity_min: float = 0.0
    coverage_min: float = 0.0
    evalue_max: float = 1.0
    detection_methods: Optional[Set[str]] = None
    taxons: Optional[Set[str]] = None
    taxon_mode: TaxonMatchMode = TaxonMatchMode.EVERY
    compact: bool = False
    explain: bool = False
    dedupe: bool = False

    def __post_init__(self):
        if isinstance(self.taxon_mode, str):
            self.taxon_mode = TaxonMatchMode(self.taxon_mode.lower())
        if self.detection_methods is not None:
            self.detection_methods = _as_set(self.detection_methods)
        if self.taxons is not None:
            self.taxons = {str(taxon) for taxon in _as_set(self.taxons)}

    @property
    def filters_evidence(self) -> bool:
        return self.detection_methods is not None or self.taxons is not None

    def validate(self) -> None:
        """Check threshold ranges

        Raises:
            ValidationError: If a threshold is out of range
        """
        errors = []
        for name in ('similarity_min', 'identity_min', 'coverage_min'):
            value = getattr(self, name)
            if not 0.0 <= value <= 100.0:
                errors.append(f"{name} must be between 0 and 100")

        if self.evalue_max < 0:
            errors.append("evalue_max must be positive")

        if errors:
            raise ValidationError(f"Invalid trim options: {'; '.join(errors)}",
                                  {"errors": errors})

    def to_dict(self) -> Dict[str, Any]:
        return {
            'similarity_min': self.similarity_min,
            'identity_min': self.identity_min,
            'coverage_min': self.coverage_min,
            'evalue_max': self.evalue_max,
            'detection_methods': sorted(self.detection_methods) if self.detection_methods is not None else None,
            'taxons': sorted(self.taxons) if self.taxons is not None else None,
            'taxon_mode': self.taxon_mode.value,
            'compact': self.compact,
            'explain': self.explain,
            'dedupe': self.dedupe,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TrimOptions':
        """Create from a dictionary, ignoring unknown keys"""
        known = {name: value for name, value in data.items() if name in cls.__dataclass_fields__}
        return cls(**known)

    @classmethod
    def from_config(cls, config_manager, **overrides) -> 'TrimOptions':
        """Trim options from the ``homology.trim`` configuration section"""
        data = config_manager.get_trim_config()
        data.update(overrides)
        return cls.from_dict(data)


def check_thresholds(record: HomologySupportRecord, options: TrimOptions) -> TrimReason:
    """Evaluate the alignment thresholds of one record

    A non-finite value fails every threshold it is compared with.

    Returns:
        Dictionary criterion -> False when passing, or a description of the failure
    """
    reason: TrimReason = {
        'identity': False,
        'e_value': False,
        'similarity': False,
        'coverage': False,
    }

    sim_pct, id_pct, cv_pct, evalue = record.sim_pct, record.id_pct, record.cv_pct, record.evalue

    if not sim_pct >= options.similarity_min:
        reason['similarity'] = f"{sim_pct}, expected higher than {options.similarity_min}"
    if not id_pct >= options.identity_min:
        reason['identity'] = f"{id_pct}, expected higher than {options.identity_min}"
    if not cv_pct >= options.coverage_min:
        reason['coverage'] = f"{cv_pct}, expected higher than {options.coverage_min}"
    if not evalue <= options.evalue_max:
        reason['e_value'] = f"{evalue}, expected lower than {options.evalue_max}"

    return reason


class HomologySupportSet:
    """Homology data of one candidate link

    Rows are appended with ``add``; ``low``, ``high`` and ``evidence_groups``
    are index-aligned views over them. Mutating the set while iterating over
    it is not supported.
    """

    def __init__(self):
        self.rows: List[HomologySupportRow] = []
        # If not visible, the link is hidden from representations
        self.visible = True

    @property
    def low(self) -> List[HomologySupportRecord]:
        """Homology hits of the query with the lowest identifier"""
        return [row.low for row in self.rows]

    @property
    def high(self) -> List[HomologySupportRecord]:
        """Homology hits of the query with the highest identifier"""
        return [row.high for row in self.rows]

    @property
    def evidence_groups(self) -> List[List[EvidenceWrapper]]:
        return [row.evidence for row in self.rows]

    def add(self, low: HVector, high: HVector, evidence: Optional[Iterable[Any]] = None) -> HomologySupportRow:
        """Add a new homology support row"""
        row = HomologySupportRow(
            low=HomologySupportRecord(list(low)),
            high=HomologySupportRecord(list(high)),
            evidence=[EvidenceWrapper(record) for record in (evidence or [])]
        )
        self.rows.append(row)
        return row

    def add_evidence(self, index: int, *records: Any) -> None:
        """Attach interaction evidence to the row at index"""
        self.rows[index].evidence.extend(EvidenceWrapper(record) for record in records)

    def remove(self) -> None:
        """Clear this instance and hide it"""
        self.rows = []
        self.visible = False

    @property
    def length(self) -> int:
        """Number of valid homologies"""
        return sum(1 for row in self.rows if row.low.valid)

    @property
    def depth(self) -> int:
        return self.length

    @property
    def is_empty(self) -> bool:
        return self.length == 0

    @property
    def templates(self) -> Tuple[List[str], List[str]]:
        """Valid templates (accession numbers of the homologs) of both sides"""
        return (
            [row.low.template for row in self.rows if row.low.valid],
            [row.high.template for row in self.rows if row.high.valid]
        )

    @property
    def full_templates(self) -> Tuple[List[str], List[str]]:
        return (
            [row.low.template for row in self.rows],
            [row.high.template for row in self.rows]
        )

    def trim(self, options: Optional[TrimOptions] = None, **overrides) -> List[Tuple[TrimReason, TrimReason]]:
        """Apply filters to the homology support and its interaction evidence

        After a trim, check whether the set is still supported with ``is_empty``.

        Args:
            options: Filters to apply; keyword arguments override its fields
                (``trim(similarity_min=70, compact=True)``)

        Returns:
            With ``explain``, one (low_reason, high_reason) tuple per row,
            otherwise an empty list
        """
        if options is None:
            options = TrimOptions(**overrides)
        elif overrides:
            options = TrimOptions.from_dict({**options.to_dict(), **overrides})

        self.visible = True
        reasons = []
        to_remove: Set[int] = set()
        seen_keys: Set[Tuple[Tuple[str, ...], Tuple[str, ...]]] = set()

        for index, row in enumerate(self.rows):
            low_reason = check_thresholds(row.low, options)
            high_reason = check_thresholds(row.high, options)
            row.low.valid = not any(low_reason.values())
            row.high.valid = not any(high_reason.values())

            if options.explain:
                reasons.append((low_reason, high_reason))

            if not options.filters_evidence:
                # Evidence filters are not cumulative between calls
                for wrapper in row.evidence:
                    wrapper.valid = True
            elif row.low.valid and row.high.valid:
                self._filter_evidence(row, options)
                row.low.valid = row.high.valid = any(wrapper.valid for wrapper in row.evidence)

            if not row.low.valid or not row.high.valid:
                row.low.valid = row.high.valid = False
                for wrapper in row.evidence:
                    wrapper.valid = False
                to_remove.add(index)

            if options.dedupe:
                key = (tuple(row.low.data), tuple(row.high.data))
                if key in seen_keys:
                    to_remove.add(index)
                else:
                    seen_keys.add(key)

        if options.compact and to_remove:
            self.rows = [row for index, row in enumerate(self.rows) if index not in to_remove]
            logger.debug(f"Removed {len(to_remove)} homology rows, {len(self.rows)} left")

        return reasons

    @staticmethod
    def _filter_evidence(row: HomologySupportRow, options: TrimOptions) -> None:
        for wrapper in row.evidence:
            valid = True
            if options.detection_methods is not None:
                valid = wrapper.data.interaction_detection_method in options.detection_methods
            if valid and options.taxons is not None:
                valid = options.taxon_mode.matches(wrapper.data.taxid, options.taxons)
            wrapper.valid = valid

    def __iter__(self) -> Iterator[Tuple[HomologySupportRecord, HomologySupportRecord]]:
        """Iterate through the homology support"""
        for row in self.rows:
            yield row.low, row.high

    def full_iterator(self, visible_only: bool = False) -> Iterator[Tuple[HomologySupportRecord, HomologySupportRecord, List[Any]]]:
        """Iterate through the homology support and the interaction evidence

        Args:
            visible_only: Skip invalid rows and invalid evidence
        """
        for row in self.rows:
            if visible_only:
                if row.low.valid and row.high.valid:
                    yield row.low, row.high, [wrapper.data for wrapper in row.evidence if wrapper.valid]
            else:
                yield row.low, row.high, [wrapper.data for wrapper in row.evidence]

    def to_snapshot(self) -> Dict[str, Any]:
        """Serializable view of the valid rows and their valid evidence"""
        low, evidence_groups = [], []
        for row in self.rows:
            if row.low.valid:
                low.append(row.low.to_dict())
                evidence_groups.append([
                    _display_form(wrapper.data) for wrapper in row.evidence if wrapper.valid
                ])

        return {
            'low': low,
            'high': [row.high.to_dict() for row in self.rows if row.high.valid],
            'evidence_groups': evidence_groups,
            'visible': self.visible,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_snapshot())

    @classmethod
    def from_snapshot(cls, snapshot: Dict[str, Any]) -> 'HomologySupportSet':
        """Rebuild a set from ``to_snapshot`` output

        Only homology rows and visibility are restored; evidence groups
        come back empty.

        ``low`` and ``high`` are paired by position. The snapshot lists the
        valid records of each side independently, so when a row had only
        one side valid the two lists shift against each other and later
        rows come back mis-paired. ``trim`` always flags both sides of a
        row together; only flags set by hand can disagree. A length
        mismatch is logged and the extra records are dropped.
        """
        support = cls()
        lows = [HomologySupportRecord.from_dict(item) for item in snapshot.get('low', [])]
        highs = [HomologySupportRecord.from_dict(item) for item in snapshot.get('high', [])]

        if len(lows) != len(highs):
            logger.warning(f"Snapshot has {len(lows)} low and {len(highs)} high records, "
                           f"keeping the first {min(len(lows), len(highs))} rows")

        support.rows = [HomologySupportRow(low=low, high=high) for low, high in zip(lows, highs)]
        support.visible = bool(snapshot.get('visible', True))
        return support

    @classmethod
    def from_json(cls, text: str) -> 'HomologySupportSet':
        return cls.from_snapshot(json.loads(text))


def _display_form(record: Any) -> Any:
    if hasattr(record, 'to_display_form'):
        return record.to_display_form()
    return record
