import io
import math

import numpy as np
import pytest

from gcode_cleaner.compare import (
    align_moves, extract_moves, is_annotation, passthrough_lines,
    removed_point_deviation, replay_kept, verify,
)
from gcode_cleaner.rewriter import rewrite


PART = [
    "; generated by slicer",
    "G28",
    "G1 X0 Y0 E0",
    "G1 X1 Y0 E1",
    "G1 X2 Y0 E2",
    "G1 X3 Y0 E3",
    "G1 X3 Y1 E4",
    "G1 X3 Y1.01 E4.01",
    "G1 X3 Y1.02 E4.02",
    "; layer 2",
    "G1 X0 Y0 E5",
    "G1 X0 Y2 E7",
    "M107",
]


def cleaned(lines, verbose=False):
    out = io.StringIO()
    rewrite(lines, out, verbose=verbose)
    return out.getvalue().splitlines()


def test_extract_moves_skips_comments_and_annotations():
    lines = ["G1 X0 Y0 E0", ";G1 X1 Y0 E1 ratio=0.50 error=0.00 (straight line)", "G1 X2 Y0 E2"]
    points, texts = extract_moves(lines)
    assert points.shape == (2, 3)
    assert texts == ["G1 X0 Y0 E0", "G1 X2 Y0 E2"]


def test_extract_moves_empty():
    points, texts = extract_moves(["M107"])
    assert points.shape == (0, 3)
    assert texts == []


def test_annotation_detection():
    assert is_annotation(";G1 X0.01 Y0 E0.01 length=0.03 (too short)")
    assert is_annotation(";  G1 X1 Y0 E1 ratio=0.50 error=0.00 (straight line)")
    assert not is_annotation("; layer 2")
    assert not is_annotation("G1 X1 Y0 E1")


def test_passthrough_lines():
    assert passthrough_lines(PART) == ["; generated by slicer", "G28", "; layer 2", "M107"]


def test_align_moves():
    kept = align_moves(["a", "b", "c", "d"], ["a", "c", "d"])
    assert kept.tolist() == [0, 2, 3]


def test_align_moves_rejects_unknown_or_reordered():
    with pytest.raises(ValueError):
        align_moves(["a", "b", "c"], ["a", "x"])
    with pytest.raises(ValueError):
        align_moves(["a", "b", "c"], ["c", "a"])


def test_deviation_of_removed_points():
    points = np.array([[0, 0, 0], [1, 0.01, 1], [2, 0, 2], [3, 3, 3]], dtype=float)
    dev = removed_point_deviation(points, np.array([0, 2, 3]))
    assert dev.tolist() == pytest.approx([0.01])


def test_deviation_nothing_removed():
    points = np.array([[0, 0, 0], [1, 1, 1]], dtype=float)
    assert len(removed_point_deviation(points, np.array([0, 1]))) == 0


@pytest.mark.parametrize("verbose", [False, True])
def test_cleaned_output_verifies(verbose):
    report = verify(PART, cleaned(PART, verbose=verbose))
    assert report.ok, report.checks
    assert report.original_moves == 9
    assert report.cleaned_moves < report.original_moves


def test_lost_comment_fails():
    out = [line for line in cleaned(PART) if line != "; layer 2"]
    report = verify(PART, out)
    assert not report.ok
    assert report.checks[0][1] is False


def test_cut_corner_fails():
    original = ["G1 X0 Y0 E0", "G1 X1 Y1 E1", "G1 X2 Y0 E2"]
    report = verify(original, ["G1 X0 Y0 E0", "G1 X2 Y0 E2"])
    assert not report.ok
    assert report.max_deviation == pytest.approx(1.0)


def test_dropped_endpoint_fails():
    original = ["G1 X0 Y0 E0", "G1 X1 Y0 E1", "G1 X2 Y0 E2"]
    report = verify(original, ["G1 X0 Y0 E0", "G1 X1 Y0 E1"])
    assert not report.ok


def test_replay_kept():
    assert replay_kept(["G1 X0 Y0 E0", "G1 X1 Y0 E1", "G1 X2 Y0 E2"]).tolist() == [0, 2]
    assert replay_kept(["G1 X0 Y0 E0", "; c", "G1 X1 Y0 E1", "G1 X2 Y0 E2"]).tolist() == [0, 1, 2]
    assert replay_kept(["M107"]).tolist() == []


def test_gentle_arc_verifies():
    # radius 1000, 1 mm steps: chained straight-line removals drift from the arc
    lines = []
    for i in range(200):
        a = i / 1000.0
        lines.append(f"G1 X{1000 * math.sin(a):.4f} Y{1000 * (1 - math.cos(a)):.4f} E{i * 0.05:.4f}")
    report = verify(lines, cleaned(lines))
    assert report.ok, report.checks
    assert report.cleaned_moves < report.original_moves


def test_too_short_span_verifies_despite_far_midpoint():
    original = ["G1 X0 Y0 E0", "G1 X5 Y0 E0", "G1 X0.05 Y0 E0"]
    out = cleaned(original)
    assert out == ["G1 X0 Y0 E0", "G1 X0.05 Y0 E0"]
    report = verify(original, out)
    assert report.ok, report.checks
    assert report.max_deviation == pytest.approx(4.95)
    assert "4.9500" in report.notes[0]


def test_missed_removal_fails():
    original = ["G1 X0 Y0 E0", "G1 X1 Y0 E1", "G1 X2 Y0 E2"]
    report = verify(original, original)
    assert not report.ok
    assert [name for name, ok, _ in report.checks if not ok] == ["Removals match replay"]
