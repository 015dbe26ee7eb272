#!/usr/bin/env python3
"""
Tests for interolog.services.interaction_store

Covers deduplication, symmetric pair lookups, merging, publication checks,
adjacency views, topology extraction, filtering and file ingestion.
"""

import json

import pandas as pd
import pytest

from interolog.config import ConfigManager
from interolog.exceptions import FileOperationError, MitabParseError
from interolog.models.mitab import MitabRecord
from interolog.services.interaction_store import InteractionStore, pair_key


@pytest.fixture
def records(make_record):
    """R1(A,B), R2(A,B) equal to R1, R3(B,C)"""
    r1 = make_record("A", "B")
    r2 = make_record("A", "B")
    r3 = make_record("B", "C", pmid="20000001", method="MI:0006")
    return r1, r2, r3


@pytest.fixture
def store(records):
    store = InteractionStore()
    store.add(*records)
    return store


class TestPairKey:

    def test_pair_key_is_symmetric(self):
        assert pair_key("B", "A") == pair_key("A", "B") == ("A", "B")


class TestAdd:
    """Test registration and deduplication of records"""

    def test_equal_records_are_deduplicated(self, store, records):
        """Test that R2 equal to R1 is not stored twice"""
        r1, r2, r3 = records

        assert len(store.get_pair("A", "B")) == 1
        assert store.get_pair("A", "B")[0] is r1
        assert len(store) == 2
        assert list(store) == [r1, r3]

    def test_adding_equal_record_keeps_length(self, store, make_record):
        """Test that re-adding an equal record does not grow the pair"""
        store.add(make_record("A", "B"))

        assert len(store.get_pair("A", "B")) == 1

    def test_insertion_order_is_preserved(self, make_record):
        """Test that distinct records of a pair keep their order"""
        store = InteractionStore()
        first = make_record("A", "B", pmid="1")
        second = make_record("B", "A", pmid="2")
        store.add(first, second)

        assert store.get_pair("A", "B") == [first, second]

    def test_record_without_pair_is_skipped(self, mitab_line):
        """Test that records without identifiers are ignored"""
        record = MitabRecord.from_line(mitab_line("A", "B").replace("uniprotkb:A\t", "-\t", 1))
        store = InteractionStore()

        store.add(record)

        assert len(store) == 0


class TestLookup:
    """Test symmetric lookups"""

    def test_pair_symmetry(self, store):
        """Test that both orders give the same answer"""
        assert store.has_pair("A", "B") and store.has_pair("B", "A")
        assert store.get_pair("A", "B") == store.get_pair("B", "A")
        assert not store.has_pair("A", "C")

    def test_has(self, store):
        assert store.has("A")
        assert store.has("C")
        assert not store.has("Z")

    def test_get_concatenates_pairs(self, store, records):
        """Test that get returns every record involving the identifier"""
        r1, _, r3 = records

        assert store.get("B") == [r1, r3]
        assert store.get("C") == [r3]

    def test_misses_are_empty(self, store):
        """Test that lookups never fail"""
        assert store.get("Z") == []
        assert store.get_pair("Y", "Z") == []

    def test_pairs(self, store, records):
        """Test iteration over pairs"""
        r1, _, r3 = records

        assert list(store.pairs()) == [("A", "B", [r1]), ("B", "C", [r3])]

    def test_get_by_index(self, store, records):
        assert store.get_by_index(1) is records[2]
        with pytest.raises(IndexError):
            store.get_by_index(5)

    def test_iteration_is_restartable(self, store):
        assert list(store) == list(store)


class TestMerge:
    """Test merging stores"""

    def test_merge_is_idempotent(self, store):
        """Test that merging the same store twice equals merging it once"""
        target = InteractionStore()
        target.merge(store)
        once = list(target)
        target.merge(store)

        assert list(target) == once == list(store)

    def test_self_merge(self, store):
        """Test that merging a store into itself changes nothing"""
        before = list(store)
        store.merge(store)

        assert list(store) == before

    def test_merge_uses_content_equality(self, store, make_record):
        """Test that equal records from another store are not duplicated"""
        other = InteractionStore()
        other.add(make_record("A", "B"), make_record("C", "D"))

        store.merge(other)

        assert len(store.get_pair("A", "B")) == 1
        assert store.has_pair("D", "C")


class TestCheckPublication:
    """Test publication provenance checks"""

    def test_same_source_is_accepted(self, make_record):
        store = InteractionStore()

        assert store.check_publication(make_record("A", "B", source="IntAct")).accepted
        assert store.check_publication(make_record("C", "D", source="intact"))
        assert store.registered_publications == {"10089390": "intact"}

    def test_conflicting_source_is_rejected(self, make_record):
        """Test that another source for a known publication is reported"""
        store = InteractionStore()
        store.check_publication(make_record("A", "B", source="IntAct"))

        check = store.check_publication(make_record("A", "B", source="MINT"))

        assert not check
        assert "mint" in check.conflict and "intact" in check.conflict

    def test_add_ignores_publication_registry(self, make_record):
        """Test that conflicts never block add"""
        store = InteractionStore()
        store.check_publication(make_record("A", "B", source="IntAct"))

        store.add(make_record("A", "B", source="MINT"))

        assert len(store.get_pair("A", "B")) == 1


class TestViews:
    """Test adjacency and topology views"""

    def test_partners_of(self, store):
        partners = store.partners_of()

        assert partners["A"] == {"B"}
        assert partners["B"] == {"A", "C"}
        assert partners["C"] == {"B"}

    def test_paired_lines_share_lists(self, mitab_line):
        """Test that both directions hold the same list of raw lines"""
        store = InteractionStore(keep_raw=True)
        line = mitab_line("A", "B")
        store.read_lines(line)

        couples = store.paired_lines()

        assert couples["A"]["B"] is couples["B"]["A"]
        assert couples["A"]["B"] == [line]

    def test_topology(self, store, records):
        """Test nodes and edges of the UniProt graph"""
        r1, _, r3 = records

        nodes, edges = store.topology()

        assert nodes == {"A", "B", "C"}
        assert edges == {("A", "B"): [r1], ("B", "C"): [r3]}

    def test_topology_skips_non_uniprot_records(self, mitab_line):
        store = InteractionStore()
        store.read_lines(mitab_line("A", "X").replace("uniprotkb:X", "chebi:CHEBI_1"))

        nodes, edges = store.topology()

        assert len(store) == 1
        assert nodes == set()
        assert edges == {}

    def test_publications_and_biomolecules(self, store):
        assert store.publications() == {"10089390", "20000001"}
        assert store.biomolecules() == ["A", "B", "C"]


class TestFilter:
    """Test sub-store extraction"""

    def test_filter_by_identifier(self, store, records):
        subset = store.filter(["C"])

        assert list(subset) == [records[2]]
        assert subset is not store
        assert subset.records is not store.records

    def test_filter_by_predicate(self, store, records):
        subset = store.filter(predicate=lambda record: record.interaction_detection_method == "MI:0018")

        assert list(subset) == [records[0]]

    def test_filter_union_without_duplicates(self, store, records):
        """Test that a record matching both criteria is included once"""
        subset = store.filter(["A", "C"], lambda record: True)

        assert list(subset) == [records[0], records[2]]

    def test_empty_filter(self, store):
        assert len(store.filter()) == 0

    def test_filtered_store_is_independent(self, store, make_record):
        subset = store.filter(["A"])
        subset.add(make_record("E", "F"))

        assert not store.has("E")


class TestMaintenance:
    """Test raw line flushing and clearing"""

    def test_flush_raw(self, mitab_line):
        """Test that raw lines are dropped and no longer retained"""
        store = InteractionStore(keep_raw=True)
        store.read_lines(mitab_line("A", "B"))

        store.flush_raw()
        store.read_lines(mitab_line("C", "D"))

        assert not store.keep_raw
        assert all(record.raw is None for record in store)

    def test_clear(self, store, records):
        """Test that clear empties pairs and publications without touching views"""
        store.check_publication(records[0])
        partners = store.partners_of()

        store.clear()

        assert len(store) == 0
        assert not store.has("A")
        assert store.registered_publications == {}
        assert partners["A"] == {"B"}


class TestExport:
    """Test text, JSON and DataFrame exports"""

    def test_dump(self, store, records):
        assert store.dump() == f"{records[0]}\n{records[2]}"
        assert str(store) == store.dump()

    def test_json_envelope(self, store):
        data = json.loads(store.to_json())

        assert data['type'] == "mitabResult"
        assert len(data['data']) == 2

    def test_dataframe(self, store):
        frame = store.to_dataframe()

        assert isinstance(frame, pd.DataFrame)
        assert len(frame) == 2
        assert list(frame['detection_method']) == ["MI:0018", "MI:0006"]
        assert frame.iloc[1]['uniprot_b'] == "C"

    def test_empty_dataframe(self):
        frame = InteractionStore().to_dataframe()

        assert frame.empty
        assert 'pmid' in frame.columns


@pytest.mark.integration
class TestReading:
    """Test MITAB ingestion"""

    def test_read_lines_skips_comments(self, mitab_line):
        store = InteractionStore()

        added = store.read_lines("# header\n\n" + mitab_line("A", "B") + "\n" + mitab_line("A", "B"))

        assert len(added) == 2
        assert len(store.get_pair("A", "B")) == 1

    def test_read_lines_keeps_comments_when_configured(self, tmp_path, mitab_line):
        """Test that mitab.skip_comments=false sends '#' lines to the parser"""
        path = tmp_path / "interolog.yml"
        path.write_text("mitab:\n  skip_comments: false\n")
        store = InteractionStore.from_config(ConfigManager(str(path)))

        assert not store.skip_comments
        with pytest.raises(MitabParseError):
            store.read_lines("# header\n" + mitab_line("A", "B"))
        assert len(store) == 0

    def test_read_file(self, mitab_file):
        store = InteractionStore()

        line_count = store.read(str(mitab_file))

        assert line_count == 4
        assert len(store) == 2
        assert len(store.get_pair("Q00987", "P04637")) == 1

    def test_read_missing_file(self, tmp_path):
        with pytest.raises(FileOperationError):
            InteractionStore().read(str(tmp_path / "missing.mitab"))

    def test_read_malformed_line(self, tmp_path, mitab_line):
        path = tmp_path / "broken.mitab"
        path.write_text(mitab_line("A", "B") + "\nnot\ta\tmitab\tline\n")

        with pytest.raises(MitabParseError) as excinfo:
            InteractionStore().read(str(path))

        assert excinfo.value.details["line_number"] == 2
