# tests/test_spline.py
"""Test curve fitting, smoothing and resampling."""

import numpy as np
import pytest

from proteinribbon.core.geometry.spline import (
    SplineFitter,
    SplineMethod,
    arc_length,
    b_spline,
    catmull_rom,
    cumulative_arc_length,
    hermite,
    resample_uniform,
    sample_positions,
    smooth_positions,
    smooth_samples,
)


@pytest.fixture
def anchors():
    rng = np.random.default_rng(7)
    return np.cumsum(rng.normal(scale=2.0, size=(7, 3)), axis=0)


def test_catmull_rom_count_and_exact_endpoints(anchors):
    """Output has (n-1)*S+1 samples and starts/ends on the anchors."""
    samples = catmull_rom(anchors, samples_per_segment=5)

    assert len(samples) == (len(anchors) - 1) * 5 + 1
    assert np.allclose(samples[0].position, anchors[0])
    assert np.array_equal(samples[-1].position, anchors[-1])
    assert samples[-1].t == 1.0
    assert samples[-1].residue_index == len(anchors) - 1


def test_catmull_rom_interpolates_every_anchor(anchors):
    """Sample i*S of the curve lies on anchor i."""
    S = 6
    samples = catmull_rom(anchors, samples_per_segment=S)
    for i, anchor in enumerate(anchors):
        assert np.allclose(samples[i * S].position, anchor)


def test_catmull_rom_matches_standard_basis():
    """Tension 0.5 reproduces the textbook Catmull-Rom midpoint."""
    pts = np.array([[0, 0, 0], [1, 2, 0], [3, 3, 1], [4, 1, 2]], dtype=float)
    samples = catmull_rom(pts, samples_per_segment=2)
    p0, p1, p2, p3 = pts
    expected = 0.5 * (2 * p1 + (-p0 + p2) * 0.5 + (2 * p0 - 5 * p1 + 4 * p2 - p3) * 0.25
                      + (-p0 + 3 * p1 - 3 * p2 + p3) * 0.125)
    # Segment 1 spans p1 -> p2; its midpoint is the fourth sample
    assert np.allclose(samples[3].position, expected)


def test_catmull_rom_residue_indices_non_decreasing(anchors):
    samples = catmull_rom(anchors, samples_per_segment=4)
    indices = [s.residue_index for s in samples]
    assert indices == sorted(indices)
    assert all(0.0 <= s.t <= 1.0 for s in samples)


def test_fewer_than_four_anchors_pass_through():
    """Short inputs are returned one sample per anchor."""
    pts = np.array([[0, 0, 0], [3.8, 0, 0], [7.6, 0, 0]])
    samples = catmull_rom(pts, samples_per_segment=10)

    assert len(samples) == 3
    for i, sample in enumerate(samples):
        assert np.allclose(sample.position, pts[i])
        assert sample.t == 0.0
        assert sample.segment_index == i
        assert sample.residue_index == i


def test_empty_input():
    assert catmull_rom([], 8) == []
    assert b_spline([], 8) == []
    assert hermite([], 8) == []


def test_samples_per_segment_clamped(anchors):
    samples = catmull_rom(anchors, samples_per_segment=0)
    assert len(samples) == len(anchors)


def test_b_spline_count():
    pts = np.array([[i * 3.8, np.sin(i), 0.0] for i in range(6)])
    samples = b_spline(pts, samples_per_segment=4)

    assert len(samples) == (6 - 3) * 4 + 1
    assert np.array_equal(samples[-1].position, pts[-1])
    # Segment i is attributed to anchor i + 1
    assert samples[0].residue_index == 1


def test_hermite_passes_through_anchors():
    pts = np.array([[0, 0, 0], [2, 1, 0], [4, 0, 1]], dtype=float)
    samples = hermite(pts, samples_per_segment=4)

    assert len(samples) == (3 - 1) * 4 + 1
    assert np.allclose(samples[0].position, pts[0])
    assert np.allclose(samples[4].position, pts[1])
    assert np.array_equal(samples[-1].position, pts[-1])


def test_smooth_positions_is_pure_and_pins_endpoints(anchors):
    original = anchors.copy()
    smoothed = smooth_positions(anchors, iterations=3, window_size=5)

    assert np.array_equal(anchors, original)
    assert smoothed.shape == anchors.shape
    assert np.array_equal(smoothed[0], anchors[0])
    assert np.array_equal(smoothed[-1], anchors[-1])
    assert not np.allclose(smoothed[1:-1], anchors[1:-1])


def test_smooth_positions_keeps_line_on_line():
    line = np.zeros((20, 3))
    line[:, 0] = np.linspace(0.0, 19.0, 20)
    smoothed = smooth_positions(line, iterations=5, window_size=7)

    assert np.allclose(smoothed[:, 1:], 0.0)
    assert np.all(np.diff(smoothed[:, 0]) > 0)


def test_smooth_positions_window_wider_than_curve():
    pts = np.array([[0, 0, 0], [1, 1, 0], [2, 0, 0], [3, 1, 0]], dtype=float)
    smoothed = smooth_positions(pts, iterations=2, window_size=7)
    assert smoothed.shape == (4, 3)


def test_smooth_samples_keeps_metadata(anchors):
    samples = catmull_rom(anchors, samples_per_segment=4)
    smoothed = smooth_samples(samples, iterations=2, window_size=7)

    assert [s.residue_index for s in smoothed] == [s.residue_index for s in samples]
    assert [s.t for s in smoothed] == [s.t for s in samples]
    assert np.array_equal(smoothed[-1].position, anchors[-1])


def test_arc_length_straight_line():
    pts = np.array([[0, 0, 0], [3, 0, 0], [3, 4, 0]], dtype=float)
    assert arc_length(pts) == pytest.approx(7.0)
    assert np.allclose(cumulative_arc_length(pts), [0.0, 3.0, 7.0])
    assert arc_length(catmull_rom(pts)) == pytest.approx(7.0)


def test_resample_uniform_spacing(helix_ca_positions):
    samples = catmull_rom(helix_ca_positions(8), samples_per_segment=8)
    resampled = resample_uniform(samples, 25)

    assert len(resampled) == 25
    assert np.allclose(resampled[0].position, samples[0].position)
    assert np.allclose(resampled[-1].position, samples[-1].position)

    steps = np.linalg.norm(np.diff(sample_positions(resampled), axis=0), axis=1)
    # Chords of a finely sampled curve: nearly equal spacing
    assert steps.max() - steps.min() < 0.1 * steps.mean()


def test_spline_fitter_remaps_residue_indices(anchors):
    residue_indices = [0, 2, 3, 5, 6, 8, 9]
    fitter = SplineFitter(samples_per_segment=4, smoothing_iterations=2, window_size=7)
    samples = fitter.fit(anchors, residue_indices)

    indices = [s.residue_index for s in samples]
    assert indices[0] == 0
    assert indices[-1] == 9
    assert set(indices) == set(residue_indices)
    assert indices == sorted(indices)


def test_spline_fitter_methods(anchors):
    n = len(anchors)
    assert len(SplineFitter("b_spline", samples_per_segment=3).fit(anchors)) == (n - 3) * 3 + 1
    assert len(SplineFitter("hermite", samples_per_segment=3).fit(anchors)) == (n - 1) * 3 + 1
    with pytest.raises(ValueError):
        SplineFitter("bezier")
    assert SplineFitter("hermite").method == SplineMethod.HERMITE


def test_spline_fitter_short_input_is_not_smoothed():
    """Three anchors come back unchanged even with smoothing enabled."""
    corner = np.array([[0.0, 0.0, 0.0], [3.8, 0.0, 0.0], [3.8, 3.8, 0.0]])
    fitter = SplineFitter(samples_per_segment=24, smoothing_iterations=5, window_size=7)
    samples = fitter.fit(corner, [0, 1, 2])

    assert len(samples) == 3
    assert np.array_equal(sample_positions(samples), corner)
    assert [s.residue_index for s in samples] == [0, 1, 2]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
