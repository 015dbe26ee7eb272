#!/usr/bin/env python3
"""
Deduplicated store of interaction evidence, indexed by interactor pair.

Pairs are unordered: evidence stored for (A, B) is found again with
(B, A). Inside a pair, records equal to an already stored record are
dropped. Iterating over the store is a live view; adding records while
iterating is not supported.
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import (Any, Callable, Dict, Iterable, Iterator, List, Optional,
                    Set, Tuple, Union)

import pandas as pd

from interolog.error_handlers import log_exception
from interolog.exceptions import FileOperationError, MitabParseError
from interolog.models.mitab import MitabRecord

PairKey = Tuple[str, str]


def pair_key(id1: str, id2: str) -> PairKey:
    """Canonical (sorted) key of an unordered identifier pair"""
    return (id1, id2) if id1 <= id2 else (id2, id1)


@dataclass
class PublicationCheck:
    """Outcome of InteractionStore.check_publication"""
    accepted: bool
    conflict: Optional[str] = None

    def __bool__(self) -> bool:
        return self.accepted


class InteractionStore:
    """Interaction evidence (MITAB records) grouped by interactor pair"""

    def __init__(self, keep_raw: bool = False, skip_comments: bool = True):
        """Initialize an empty store

        Args:
            keep_raw: Keep the raw MITAB line of records read by this store
            skip_comments: Ignore lines starting with '#' (MITAB header lines)
        """
        self.keep_raw = keep_raw
        self.skip_comments = skip_comments
        self.logger = logging.getLogger("interolog.store")
        self.records: Dict[PairKey, List[MitabRecord]] = {}
        # Publication id -> lowercase name of the first source reporting it
        self.registered_publications: Dict[str, str] = {}
        self._index: Dict[str, Set[PairKey]] = {}

    @classmethod
    def from_config(cls, config_manager) -> 'InteractionStore':
        return cls(keep_raw=bool(config_manager.get('mitab.keep_raw', False)),
                   skip_comments=bool(config_manager.get('mitab.skip_comments', True)))

    # ----- ingestion -----

    def read_lines(self, lines: Union[str, Iterable[str]]) -> List[MitabRecord]:
        """Parse MITAB lines and register them

        Args:
            lines: A string (split on newlines) or an iterable of lines.
                Blank lines are skipped, and so are lines starting with '#'
                unless the store was built with ``skip_comments=False``.

        Returns:
            Records parsed from the lines, including those already stored

        Raises:
            MitabParseError: If a line has too few columns
        """
        if isinstance(lines, str):
            lines = lines.split('\n')

        added = []
        for line in lines:
            line = line.rstrip('\r\n')
            if not line or self.skip_comments and line.startswith('#'):
                continue
            record = MitabRecord.from_line(line, keep_raw=self.keep_raw)
            added.append(record)
            self.add(record)

        return added

    def read(self, file_path: str) -> int:
        """Read a MITAB file

        Args:
            file_path: Path to the MITAB file

        Returns:
            Number of lines read

        Raises:
            FileOperationError: If the file cannot be read
            MitabParseError: If a line is malformed (the line number is in details)
        """
        if not os.path.exists(file_path):
            raise FileOperationError(f"MITAB file not found: {file_path}", {"path": file_path})

        line_count = 0
        try:
            with open(file_path, 'r', encoding='utf-8') as fh:
                for line_count, line in enumerate(fh, start=1):
                    self.read_lines([line])
        except MitabParseError as e:
            e.details.update({"path": file_path, "line_number": line_count})
            log_exception(self.logger, e)
            raise
        except OSError as e:
            raise FileOperationError(f"Error reading MITAB file {file_path}: {str(e)}",
                                     {"path": file_path}) from e

        self.logger.info(f"Read entire file {file_path} ({line_count} lines, {len(self)} pairs)")
        return line_count

    # ----- mutation -----

    def add(self, *records: MitabRecord) -> None:
        """Register records, skipping those equal to a record of the same pair"""
        for record in records:
            ids = record.pair_of_identifiers()
            if not ids:
                self.logger.debug(f"Skipping record without interactor pair: {record}")
                continue

            key = pair_key(*ids)
            lines = self.records.get(key)
            if lines is None:
                lines = self.records[key] = []
                for identifier in key:
                    self._index.setdefault(identifier, set()).add(key)

            if all(line != record for line in lines):
                lines.append(record)

    def merge(self, other: 'InteractionStore') -> None:
        """Add all the records of other to this store"""
        for lines in list(other.records.values()):
            self.add(*lines)

    plus = merge

    def check_publication(self, record: MitabRecord) -> PublicationCheck:
        """Check that a publication is always reported by the same source

        The first source reporting a publication id is registered. Later
        records of the same publication from another source are rejected.
        """
        pmid = record.pmid
        source = (record.source or '').lower()

        if pmid not in self.registered_publications:
            self.registered_publications[pmid] = source
            self.logger.debug(f"Registering publication {pmid} from {source}")
            return PublicationCheck(True)

        known_source = self.registered_publications[pmid]
        if known_source == source:
            return PublicationCheck(True)

        conflict = (f"Publication {pmid} provided by {source} has already been "
                    f"fetched from {known_source}")
        self.logger.warning(conflict)
        return PublicationCheck(False, conflict)

    def flush_raw(self) -> None:
        """Delete every raw line held by this store, then disable keep_raw"""
        self.keep_raw = False
        for record in self:
            record.raw = None

    def clear(self) -> None:
        """Clear every record and registered publication"""
        self.records = {}
        self._index = {}
        self.registered_publications = {}

    # ----- lookup -----

    def __len__(self) -> int:
        """Number of interactor pairs"""
        return len(self.records)

    def __iter__(self) -> Iterator[MitabRecord]:
        for lines in self.records.values():
            yield from lines

    def has(self, identifier: str) -> bool:
        return identifier in self._index

    def has_pair(self, id1: str, id2: str) -> bool:
        return pair_key(id1, id2) in self.records

    def get(self, identifier: str) -> List[MitabRecord]:
        """All the records of the pairs involving identifier"""
        lines = []
        for key in sorted(self._index.get(identifier, ())):
            lines.extend(self.records[key])
        return lines

    def get_pair(self, id1: str, id2: str) -> List[MitabRecord]:
        """Records of the pair (id1, id2), in either order"""
        return self.records.get(pair_key(id1, id2), [])

    def get_by_index(self, index: int) -> MitabRecord:
        """Record at index in iteration order. Prefer lookups by identifier."""
        for position, record in enumerate(self):
            if position == index:
                return record
        raise IndexError(f"Record index out of range: {index}")

    def pairs(self) -> Iterator[Tuple[str, str, List[MitabRecord]]]:
        """Yield (id1, id2, records) for each stored pair"""
        for (id1, id2), lines in self.records.items():
            yield id1, id2, lines

    # ----- views -----

    def partners_of(self) -> Dict[str, Set[str]]:
        """Partners of every identifier, in both directions"""
        partners: Dict[str, Set[str]] = {}
        for id1, id2 in self.records:
            partners.setdefault(id1, set()).add(id2)
            partners.setdefault(id2, set()).add(id1)
        return partners

    def paired_lines(self) -> Dict[str, Dict[str, List[Optional[str]]]]:
        """Raw lines of every pair as {id1: {id2: lines}}, shared by both directions"""
        couples: Dict[str, Dict[str, List[Optional[str]]]] = {}
        for (id1, id2), lines in self.records.items():
            raw_lines = [line.raw for line in lines]
            couples.setdefault(id1, {})[id2] = raw_lines
            couples.setdefault(id2, {})[id1] = raw_lines
        return couples

    def topology(self) -> Tuple[Set[str], Dict[PairKey, List[MitabRecord]]]:
        """Graph of UniProt accessions

        Returns:
            (nodes, edges), edges mapping a sorted accession pair to its records.
            Records without a UniProt pair are left out.
        """
        nodes: Set[str] = set()
        edges: Dict[PairKey, List[MitabRecord]] = {}

        for record in self:
            uniprot_pair = record.uniprot_pair
            if not uniprot_pair:
                continue

            nodes.update(uniprot_pair)
            edges.setdefault(uniprot_pair, []).append(record)

        return nodes, edges

    def publications(self) -> Set[Optional[str]]:
        return {record.pmid for record in self}

    def biomolecules(self) -> List[str]:
        """Unique UniProt accessions, in order of appearance"""
        seen: Dict[str, None] = {}
        for record in self:
            if record.uniprot_pair:
                for accession in record.uniprot_pair:
                    seen.setdefault(accession, None)
        return list(seen)

    def filter(self, uniprot: Optional[Iterable[str]] = None,
               predicate: Optional[Callable[[MitabRecord], bool]] = None) -> 'InteractionStore':
        """New store with the records involving one of the uniprot accessions,
        plus the records accepted by predicate
        """
        target = InteractionStore(keep_raw=self.keep_raw, skip_comments=self.skip_comments)

        wanted = set(uniprot or ())
        if wanted:
            for record in self:
                if record.uniprot_pair and wanted.intersection(record.uniprot_pair):
                    target.add(record)

        if predicate:
            for record in self:
                if predicate(record):
                    target.add(record)

        return target

    # ----- export -----

    def dump(self) -> str:
        return '\n'.join('\n'.join(str(line) for line in lines) for lines in self.records.values())

    def __str__(self) -> str:
        return self.dump()

    def __repr__(self) -> str:
        return f"<InteractionStore pairs={len(self)}>"

    def to_json(self) -> str:
        return json.dumps({'type': 'mitabResult', 'data': [record.to_display_form() for record in self]})

    def to_dataframe(self) -> pd.DataFrame:
        """One row per record: pair, UniProt pair, publication, source, method and taxon ids"""
        columns = ['id_a', 'id_b', 'uniprot_a', 'uniprot_b', 'pmid', 'source',
                   'detection_method', 'taxid']
        rows: List[Dict[str, Any]] = []
        for id1, id2, lines in self.pairs():
            for record in lines:
                uniprot_pair = record.uniprot_pair or (None, None)
                rows.append({
                    'id_a': id1,
                    'id_b': id2,
                    'uniprot_a': uniprot_pair[0],
                    'uniprot_b': uniprot_pair[1],
                    'pmid': record.pmid,
                    'source': record.source,
                    'detection_method': record.interaction_detection_method,
                    'taxid': '|'.join(record.taxid),
                })
        return pd.DataFrame(rows, columns=columns)
