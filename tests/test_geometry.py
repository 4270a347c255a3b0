import pytest

from facehealth.features.geometry import (
    Point,
    centroid,
    clamp,
    distance,
    extent,
    rescale,
    rescale_inverted,
)


def test_distance_is_euclidean():
    assert distance(Point(0, 0), Point(3, 4)) == 5.0
    assert distance(Point(1, 1), Point(1, 1)) == 0.0


def test_centroid_and_extent():
    pts = [Point(0, 0), Point(2, 0), Point(2, 4), Point(0, 4)]
    assert centroid(pts) == Point(1.0, 2.0)
    assert extent(pts, axis=0) == (0.0, 2.0)
    assert extent(pts, axis=1) == (0.0, 4.0)


def test_rescale_clamps_to_unit_interval():
    assert rescale(0.25, 0.1, 0.4) == pytest.approx(0.5)
    assert rescale(-3.0, 0.1, 0.4) == 0.0
    assert rescale(9.0, 0.1, 0.4) == 1.0


def test_rescale_inverted_scores_small_values_high():
    assert rescale_inverted(0.15, 0.15, 0.25) == 1.0
    assert rescale_inverted(0.25, 0.15, 0.25) == 0.0
    assert rescale_inverted(0.20, 0.15, 0.25) == pytest.approx(0.5)


def test_clamp_bounds():
    assert clamp(1.5) == 1.0
    assert clamp(-0.5) == 0.0
    assert clamp(150.0, 0.0, 100.0) == 100.0
