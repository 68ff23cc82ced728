# tests/test_classifier.py
"""Test secondary structure segmentation."""

import numpy as np
import pytest

from proteinribbon.core.models import HelixRange, SheetRange
from proteinribbon.core.structure.classifier import (
    OverlapPolicy,
    StructureType,
    classify,
    group_segments_by_chain,
    residue_structure_types,
    segments_for_chain,
    structure_type_for,
)


@pytest.fixture
def six_residues(make_ca_chain):
    return make_ca_chain([(i * 3.8, 0.0, 0.0) for i in range(6)])


def _summary(segments):
    return [(s.structure_type, s.start_index, s.end_index) for s in segments]


def test_helix_then_sheet(six_residues):
    segments = classify(six_residues, [HelixRange("A", 1, 3)], [SheetRange("A", 4, 6)])

    assert _summary(segments) == [
        (StructureType.HELIX, 0, 2),
        (StructureType.SHEET, 3, 5),
    ]
    assert segments[0].length == 3
    assert segments[1].residues == tuple(six_residues[3:])


def test_unannotated_residues_are_coil(six_residues):
    segments = classify(six_residues, [HelixRange("A", 3, 4)], [])

    assert _summary(segments) == [
        (StructureType.COIL, 0, 1),
        (StructureType.HELIX, 2, 3),
        (StructureType.COIL, 4, 5),
    ]


def test_overlap_policy(six_residues):
    helices = [HelixRange("A", 1, 4)]
    sheets = [SheetRange("A", 3, 6)]

    sheet_wins = classify(six_residues, helices, sheets)
    assert _summary(sheet_wins) == [
        (StructureType.HELIX, 0, 1),
        (StructureType.SHEET, 2, 5),
    ]

    helix_wins = classify(six_residues, helices, sheets, OverlapPolicy.HELIX_OVER_SHEET)
    assert _summary(helix_wins) == [
        (StructureType.HELIX, 0, 3),
        (StructureType.SHEET, 4, 5),
    ]

    # Plain strings are accepted for the policy
    assert _summary(classify(six_residues, helices, sheets, "helix")) == _summary(helix_wins)


def test_structure_type_for_agrees_with_classify(six_residues):
    helices = [HelixRange("A", 1, 4)]
    sheets = [SheetRange("A", 3, 6)]
    for policy in OverlapPolicy:
        types = residue_structure_types(classify(six_residues, helices, sheets, policy),
                                        len(six_residues))
        single = [structure_type_for(r, helices, sheets, policy) for r in six_residues]
        assert types == single


def test_segments_split_at_chain_boundary(make_ca_chain):
    chain_a = make_ca_chain([(i * 3.8, 0, 0) for i in range(3)], chain_id="A")
    chain_b = make_ca_chain([(i * 3.8, 10, 0) for i in range(3)], chain_id="B", serial_start=10)
    segments = classify(chain_a + chain_b, [], [])

    assert [(s.chain_id, s.start_index, s.end_index) for s in segments] == [
        ("A", 0, 2),
        ("B", 3, 5),
    ]
    grouped = group_segments_by_chain(segments)
    assert list(grouped) == ["A", "B"]
    assert segments_for_chain(segments, "B") == [segments[1]]


def test_annotation_of_other_chain_ignored(six_residues):
    segments = classify(six_residues, [HelixRange("B", 1, 6)], [])
    assert _summary(segments) == [(StructureType.COIL, 0, 5)]


def test_every_residue_in_exactly_one_segment(make_ca_chain):
    residues = make_ca_chain([(i * 3.8, 0, 0) for i in range(20)])
    helices = [HelixRange("A", 2, 6), HelixRange("A", 15, 18)]
    sheets = [SheetRange("A", 8, 12), SheetRange("A", 17, 20)]
    segments = classify(residues, helices, sheets)

    covered = [i for s in segments for i in range(s.start_index, s.end_index + 1)]
    assert covered == list(range(20))
    for a, b in zip(segments, segments[1:]):
        assert a.structure_type != b.structure_type


def test_classify_is_idempotent(six_residues):
    helices = [HelixRange("A", 2, 3)]
    sheets = [SheetRange("A", 5, 6)]
    assert classify(six_residues, helices, sheets) == classify(six_residues, helices, sheets)


def test_empty_input():
    assert classify([], [HelixRange("A", 1, 3)], []) == []
    assert residue_structure_types([]) == []


def test_segment_positions(make_backbone_chain):
    residues = make_backbone_chain(4)
    segment = classify(residues, [], [])[0]

    assert segment.ca_positions.shape == (4, 3)
    assert segment.o_positions.shape == (4, 3)
    assert np.allclose(segment.ca_positions[:, 0], [1.46 + i * 4.31 for i in range(4)])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
