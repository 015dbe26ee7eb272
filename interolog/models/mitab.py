#!/usr/bin/env python3
"""
PSI-MITAB interaction evidence records.

A MITAB line is a tab separated row of at least 15 columns (MITAB 2.5).
Later revisions (2.6, 2.7) append more columns which are kept verbatim.
Each column holds zero or more ``database:value(annotation)`` items joined
by pipes, ``-`` standing for an empty column, e.g.::

    uniprotkb:P04637    uniprotkb:Q00987    ...    psi-mi:"MI:0018"(two hybrid)
"""

import json
import re
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from interolog.exceptions import MitabParseError

MITAB_COLUMNS = (
    'ids_a',
    'ids_b',
    'alt_ids_a',
    'alt_ids_b',
    'aliases_a',
    'aliases_b',
    'detection_methods',
    'first_authors',
    'publications',
    'taxids_a',
    'taxids_b',
    'interaction_types',
    'source_databases',
    'interaction_ids',
    'confidences',
)

MIN_COLUMNS = len(MITAB_COLUMNS)
EMPTY_VALUE = '-'

_FIELD_RE = re.compile(r'^(?P<database>[^:"]+):(?P<value>"[^"]*"|[^(]*)(?:\((?P<annotation>.*)\))?$')
_ISOFORM_RE = re.compile(r'-(?:\d+|PRO_\d+)$')


class MitabField(NamedTuple):
    """One ``database:value(annotation)`` item of a MITAB column"""
    database: str
    value: str
    annotation: Optional[str] = None


def split_items(text: str) -> List[str]:
    """Split a column on pipes that are not inside double quotes"""
    items = []
    current = []
    in_quotes = False

    for char in text:
        if char == '"':
            in_quotes = not in_quotes
        if char == '|' and not in_quotes:
            items.append(''.join(current))
            current = []
        else:
            current.append(char)
    items.append(''.join(current))

    return [item.strip() for item in items if item.strip()]


def parse_field(text: str) -> List[MitabField]:
    """Tokenize one MITAB column

    Args:
        text: Raw column content

    Returns:
        List of MitabField, empty for ``-`` or blank columns
    """
    text = (text or '').strip()
    if not text or text == EMPTY_VALUE:
        return []

    fields = []
    for item in split_items(text):
        match = _FIELD_RE.match(item)
        if not match:
            fields.append(MitabField('', item.strip('"')))
            continue
        fields.append(MitabField(
            match.group('database').strip(),
            match.group('value').strip().strip('"'),
            match.group('annotation')
        ))
    return fields


def normalize_uniprot(accession: str) -> str:
    """Drop isoform and chain suffixes (P04637-2, P04637-PRO_0000185) from an accession"""
    return _ISOFORM_RE.sub('', accession.strip())


@dataclass
class MitabRecord:
    """One parsed PSI-MITAB line

    Equality is based on the column content only; the retained raw line is
    not compared.
    """
    columns: Tuple[str, ...]
    raw: Optional[str] = field(default=None, compare=False, repr=False)

    @classmethod
    def from_line(cls, line: str, keep_raw: bool = False) -> 'MitabRecord':
        """Parse a MITAB line

        Args:
            line: Tab separated MITAB line
            keep_raw: Retain the original line in ``raw``

        Returns:
            MitabRecord instance

        Raises:
            MitabParseError: If the line has fewer than 15 columns
        """
        stripped = line.rstrip('\r\n')
        parts = stripped.split('\t')
        if len(parts) < MIN_COLUMNS:
            raise MitabParseError(
                f"Invalid MITAB line: expecting at least {MIN_COLUMNS} columns, got {len(parts)}",
                {"columns": len(parts), "line": stripped[:200]}
            )

        return cls(
            columns=tuple(part.strip() for part in parts),
            raw=stripped if keep_raw else None
        )

    def column(self, name: str) -> List[MitabField]:
        """Parsed content of a named MITAB 2.5 column"""
        return parse_field(self.columns[MITAB_COLUMNS.index(name)])

    @property
    def extra(self) -> Tuple[str, ...]:
        """Columns beyond MITAB 2.5, verbatim"""
        return self.columns[MIN_COLUMNS:]

    @cached_property
    def ids(self) -> Optional[Tuple[str, str]]:
        """Primary identifiers of interactors A and B, without database prefix"""
        ids_a = self.column('ids_a')
        if not ids_a:
            return None
        ids_b = self.column('ids_b')

        # B is empty for intra-molecular interactions
        id_a = ids_a[0].value
        id_b = ids_b[0].value if ids_b else id_a
        return id_a, id_b

    def pair_of_identifiers(self) -> Optional[Tuple[str, str]]:
        return self.ids

    def _uniprot_of(self, side: str) -> Optional[str]:
        for item in self.column(f'ids_{side}') + self.column(f'alt_ids_{side}'):
            if item.database.lower() == 'uniprotkb' and item.value:
                return normalize_uniprot(item.value)
        return None

    @cached_property
    def uniprot_pair(self) -> Optional[Tuple[str, str]]:
        """Sorted pair of UniProtKB accessions, None if a side has no UniProt id"""
        uniprot_a = self._uniprot_of('a')
        if not uniprot_a:
            return None

        if self.column('ids_b') or self.column('alt_ids_b'):
            uniprot_b = self._uniprot_of('b')
        else:
            uniprot_b = uniprot_a

        if not uniprot_b:
            return None
        return tuple(sorted((uniprot_a, uniprot_b)))

    @property
    def pmid(self) -> Optional[str]:
        """PubMed id of the publication, or the first publication id"""
        publications = self.column('publications')
        for item in publications:
            if item.database.lower() == 'pubmed':
                return item.value
        return publications[0].value if publications else None

    @property
    def source(self) -> Optional[str]:
        """Name of the source database (e.g. IntAct)"""
        sources = self.column('source_databases')
        if not sources:
            return None
        return sources[0].annotation or sources[0].value

    @property
    def interaction_detection_method(self) -> Optional[str]:
        """PSI-MI code of the detection method (e.g. MI:0018)"""
        methods = self.column('detection_methods')
        return methods[0].value if methods else None

    @property
    def taxid(self) -> List[str]:
        """Taxon ids of interactor A then B"""
        taxids = []
        for name in ('taxids_a', 'taxids_b'):
            for item in self.column(name):
                if item.database.lower() == 'taxid':
                    taxids.append(item.value)
                    break
        return taxids

    def to_display_form(self) -> Dict[str, Any]:
        return {
            'ids': list(self.ids) if self.ids else None,
            'uniprot_pair': list(self.uniprot_pair) if self.uniprot_pair else None,
            'pmid': self.pmid,
            'source': self.source,
            'detection_method': self.interaction_detection_method,
            'taxid': self.taxid,
            'interaction_types': [item.value for item in self.column('interaction_types')],
            'mitab': list(self.columns),
        }

    @property
    def json(self) -> str:
        return json.dumps(self.to_display_form())

    def __str__(self) -> str:
        return '\t'.join(self.columns)
