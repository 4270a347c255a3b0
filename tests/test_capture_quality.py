import math

import pytest

from facehealth.capture.quality import CaptureContext, capture_quality


def test_centered_quarter_frame_face_is_full_quality(capture):
    assert capture.face_area_fraction == pytest.approx(0.25)
    assert capture.face_center_offset == (0.0, 0.0)
    assert capture.quality() == pytest.approx(1.0)


def test_small_corner_face():
    q = capture_quality((100, 100), (1000, 1000), 0.7, (-0.9, -0.9))
    # size 0.01 * 10, position 1 - 0.9, confidence 0.7
    assert q == pytest.approx((0.1 + 0.1 + 0.7) / 3)


def test_corner_offset_from_context():
    ctx = CaptureContext(1000, 1000, 100, 100, face_x=0, face_y=0, confidence=0.7)
    dx, dy = ctx.face_center_offset
    assert dx == pytest.approx(-0.9)
    assert dy == pytest.approx(-0.9)
    assert ctx.quality() == pytest.approx(0.3)


def test_non_finite_confidence_counts_as_zero():
    q = capture_quality((50, 50), (100, 100), math.nan, (0.0, 0.0))
    assert q == pytest.approx(2 / 3)


def test_empty_image_scores_only_confidence():
    ctx = CaptureContext(0, 0, 10, 10, confidence=0.9)
    assert ctx.face_area_fraction == 0.0
    assert ctx.face_center_offset == (1.0, 1.0)
    assert ctx.quality() == pytest.approx(0.3)


def test_quality_is_bounded():
    q = capture_quality((5000, 5000), (10, 10), 3.0, (40.0, -40.0))
    assert 0.0 <= q <= 1.0


def test_size_gain_from_config():
    q = capture_quality((100, 100), (1000, 1000), 1.0, (0.0, 0.0), cfg={"quality": {"size_gain": 50.0}})
    assert q == pytest.approx((0.5 + 1.0 + 1.0) / 3)


def test_metadata_passthrough(capture):
    meta = capture.metadata()
    assert meta.image_width == 400
    assert meta.image_height == 500
    assert meta.face_width == 200.0
    assert meta.landmark_count == 76
