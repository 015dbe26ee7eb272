#!/usr/bin/env python3
"""
Shared fixtures for the interolog test suite
"""

import pytest

from interolog.models.mitab import MitabRecord


def build_mitab_line(id_a, id_b, pmid="10089390", source="IntAct", method="MI:0018",
                     taxid_a="9606", taxid_b="9606", interaction_id="EBI-1001"):
    """Build a 15 column MITAB 2.5 line"""
    columns = [
        f"uniprotkb:{id_a}",
        f"uniprotkb:{id_b}" if id_b else "-",
        "-",
        "-",
        f"psi-mi:{id_a.lower()}_human(display_long)",
        "-",
        f'psi-mi:"{method}"(two hybrid)',
        "Doe et al. (1999)",
        f"pubmed:{pmid}|imex:IM-1234",
        f"taxid:{taxid_a}(human)|taxid:{taxid_a}(Homo sapiens)",
        f"taxid:{taxid_b}(human)" if taxid_b else "-",
        'psi-mi:"MI:0915"(physical association)',
        f'psi-mi:"MI:0469"({source})',
        f"intact:{interaction_id}",
        "intact-miscore:0.56",
    ]
    return "\t".join(columns)


def build_hvector(template="P00001", reference_length=100, start=1, end=50,
                  similar=40, identical=45, evalue=0.01):
    """Build a homology field vector (PSI-BLAST tabular layout)"""
    return [
        template, str(reference_length), str(start), str(end),
        "1", str(end - start + 1), str(end - start + 1),
        str(similar), str(identical), str(evalue),
    ]


@pytest.fixture
def mitab_line():
    """Factory for MITAB lines"""
    return build_mitab_line


@pytest.fixture
def make_record():
    """Factory for parsed MITAB records"""
    def _make(id_a, id_b, keep_raw=False, **kwargs):
        return MitabRecord.from_line(build_mitab_line(id_a, id_b, **kwargs), keep_raw=keep_raw)
    return _make


@pytest.fixture
def hvector():
    """Factory for homology field vectors"""
    return build_hvector


@pytest.fixture
def mitab_file(tmp_path):
    """MITAB file with a header, a duplicated A-B record and a B-C record"""
    path = tmp_path / "sample.mitab"
    lines = [
        "#ID(s) interactor A\tID(s) interactor B\t...",
        build_mitab_line("P04637", "Q00987"),
        build_mitab_line("P04637", "Q00987"),
        build_mitab_line("Q00987", "P38398", pmid="20000001", method="MI:0006",
                         interaction_id="EBI-2002"),
        "",
    ]
    path.write_text("\n".join(lines))
    return path
