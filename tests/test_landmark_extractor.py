import math
from dataclasses import replace

import pytest

from facehealth.config import ConfigError
from facehealth.features.feature_vector import FeatureVector, HeadPose
from facehealth.features.landmark_extractor import LandmarkFeatureExtractor
from facehealth.features.regions import LandmarkRegions, to_region

from conftest import EYE_LEFT, FACE_HEIGHT, FACE_WIDTH, INNER_LIPS, OUTER_LIPS


def _extract(regions, head_pose=None, cfg=None):
    return LandmarkFeatureExtractor(cfg).extract(regions, FACE_WIDTH, FACE_HEIGHT, head_pose=head_pose)


def _circle_eye(cx, cy, r):
    # outer, upper_outer, upper_inner, inner, lower_inner, lower_outer; y grows downward
    angles = [180, 120, 60, 0, -60, -120]
    return to_region(
        (cx + r * math.cos(math.radians(a)), cy - r * math.sin(math.radians(a))) for a in angles
    )


def test_neutral_face_features(regions):
    f = _extract(regions)

    assert f.eye_openness_left == pytest.approx(2 / 3)
    assert f.eye_blink_left == pytest.approx(1 / 3)
    assert f.eye_squint_left == pytest.approx(1 / 6)
    assert f.cheek_squint_left == pytest.approx(0.8 / 6)
    assert f.brow_raise_left == pytest.approx(0.28)
    assert f.brow_furrow == pytest.approx(0.3)
    assert f.smile_left == pytest.approx(0.2)
    assert f.frown_left == 0.0
    assert f.mouth_open == pytest.approx(0.06)
    assert f.jaw_open == f.mouth_open
    assert f.lip_press == 0.0
    assert f.mouth_pucker == pytest.approx(2 / 3)
    assert f.jaw_left == 0.0 and f.jaw_right == 0.0


def test_round_eye_is_fully_open(regions):
    f = _extract(replace(regions, eye_left=_circle_eye(60, 100, 10)))

    assert f.eye_openness_left == pytest.approx(1.0)
    assert f.eye_blink_left == pytest.approx(0.0)
    assert f.eye_squint_left == 0.0


def test_short_eye_region_takes_neutral_default(regions):
    short = to_region(EYE_LEFT[:5])

    f = _extract(replace(regions, eye_left=short))
    assert f.eye_openness_left == 0.5
    assert f.eye_blink_left == 0.0
    assert f.eye_squint_left == 0.0
    # other eye unaffected
    assert f.eye_openness_right == pytest.approx(2 / 3)

    alone = _extract(LandmarkRegions(eye_left=short))
    assert alone.eye_openness_left == 0.5


def test_degenerate_eye_with_zero_width(regions):
    flat = to_region([(50, 100)] * 6)
    f = _extract(replace(regions, eye_left=flat))
    assert f.eye_openness_left == 0.5


def test_empty_regions_give_neutral_vector():
    f = _extract(LandmarkRegions())
    assert f == FeatureVector()


def test_raised_corners_smile_without_frown(regions):
    lips = list(OUTER_LIPS)
    lips[0] = (70, 185)
    lips[6] = (130, 185)

    f = _extract(replace(regions, outer_lips=to_region(lips)))
    assert f.smile_left == pytest.approx(6.5 / 250 / 0.03)
    assert f.smile_right == pytest.approx(f.smile_left)
    assert f.frown_left == 0.0 and f.frown_right == 0.0


def test_dropped_corners_frown_without_smile(regions):
    lips = list(OUTER_LIPS)
    lips[0] = (70, 196)
    lips[6] = (130, 196)

    f = _extract(replace(regions, outer_lips=to_region(lips)))
    assert f.frown_left == pytest.approx(0.9)
    assert f.smile_left == 0.0


def test_closed_lips_read_as_press(regions):
    lips = list(INNER_LIPS)
    lips[3] = (100, 190)

    f = _extract(replace(regions, inner_lips=to_region(lips)))
    assert f.lip_press == 1.0
    assert f.mouth_open == 0.0


@pytest.mark.parametrize("chin_x, left, right", [(105, 0.0, 0.5), (95, 0.5, 0.0)])
def test_jaw_shift_follows_chin(regions, chin_x, left, right):
    contour = list(regions.face_contour)
    contour[3] = (chin_x, 245)

    f = _extract(replace(regions, face_contour=to_region(contour)))
    assert f.jaw_left == pytest.approx(left)
    assert f.jaw_right == pytest.approx(right)


def test_mirrored_face_is_fully_symmetric(regions):
    f = _extract(regions)
    assert f.eye_openness_left == f.eye_openness_right
    assert f.brow_raise_left == f.brow_raise_right
    assert f.smile_left == f.smile_right
    assert f.overall_symmetry == pytest.approx(1.0)


def test_head_pose_passes_through_unclamped(regions):
    f = _extract(regions, head_pose=HeadPose(pitch=-12.5, yaw=70.0, roll=3.0))
    assert f.head_pose == HeadPose(-12.5, 70.0, 3.0)


def test_extraction_is_deterministic(regions):
    extractor = LandmarkFeatureExtractor()
    a = extractor.extract(regions, FACE_WIDTH, FACE_HEIGHT)
    b = extractor.extract(regions, FACE_WIDTH, FACE_HEIGHT)
    assert a == b


def test_pixel_and_face_relative_units_agree(regions):
    scaled = LandmarkRegions.from_mapping(
        {name: [(x / FACE_WIDTH, y / FACE_HEIGHT) for x, y in pts] for name, pts in regions.as_dict().items()}
    )
    a = _extract(regions)
    b = LandmarkFeatureExtractor().extract(scaled, 1.0, 1.0)
    # EAR is not invariant to anisotropic scaling; everything normalized per axis is
    assert b.brow_raise_left == pytest.approx(a.brow_raise_left)
    assert b.brow_furrow == pytest.approx(a.brow_furrow)
    assert b.smile_left == pytest.approx(a.smile_left)
    assert b.mouth_open == pytest.approx(a.mouth_open)


def test_layout_override_reads_reordered_points(regions):
    # inner, lower_inner, lower_outer, outer, upper_outer, upper_inner
    order = [3, 4, 5, 0, 1, 2]
    cfg = {
        "layout": {
            "eye": {"inner": 0, "lower_inner": 1, "lower_outer": 2, "outer": 3, "upper_outer": 4, "upper_inner": 5}
        }
    }
    reordered = replace(
        regions,
        eye_left=tuple(regions.eye_left[i] for i in order),
        eye_right=tuple(regions.eye_right[i] for i in order),
    )

    assert _extract(reordered, cfg=cfg) == _extract(regions)


def test_layout_index_out_of_range_is_rejected():
    with pytest.raises(ConfigError):
        LandmarkFeatureExtractor({"layout": {"eye": {"outer": 6}}})


def test_squint_triangle():
    extractor = LandmarkFeatureExtractor()
    assert extractor.eye_squint(0.5) == pytest.approx(1.0)
    assert extractor.eye_squint(0.3) == 0.0
    assert extractor.eye_squint(0.7) == 0.0
    assert extractor.eye_squint(0.95) == 0.0
    assert extractor.eye_squint(0.4) == pytest.approx(0.5)


def test_measured_pairs_follow_available_regions(regions):
    extractor = LandmarkFeatureExtractor()
    assert extractor.measure(regions, FACE_WIDTH, FACE_HEIGHT).measured_pairs == {"eye", "smile", "brow"}
    assert extractor.measure(LandmarkRegions(), FACE_WIDTH, FACE_HEIGHT).measured_pairs == frozenset()

    no_left_eye = replace(regions, eye_left=to_region(EYE_LEFT[:5]))
    assert extractor.measure(no_left_eye, FACE_WIDTH, FACE_HEIGHT).measured_pairs == {"smile", "brow"}
