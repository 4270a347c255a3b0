from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Optional, Set, Tuple

from facehealth.features.feature_vector import FeatureVector, HeadPose
from facehealth.features.geometry import (
    Point,
    centroid,
    clamp,
    distance,
    extent,
    is_finite,
    rescale,
    rescale_inverted,
)
from facehealth.features.regions import LandmarkRegions, Region, RegionLayout
from facehealth.model.calibration import Calibration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EyeFeatures:
    openness: float = 0.5
    blink: float = 0.0
    squint: float = 0.0


@dataclass(frozen=True)
class LandmarkMeasurement:
    """Extracted features plus the bilateral pairs measured on both sides."""
    features: FeatureVector
    measured_pairs: FrozenSet[str] = frozenset()


class LandmarkFeatureExtractor:
    """
    Landmark geometry -> FeatureVector.

    - Pure: no detector, no image, no state between calls
    - Each feature checks its own region; a short or degenerate region
      only costs that feature (it takes its neutral default)
    - Distances are normalized by the face box so pixels and
      face-relative units give the same result
    """

    def __init__(self, cfg: Optional[Dict[str, Any]] = None) -> None:
        self.calibration = Calibration.from_config(cfg)
        self.layout = RegionLayout.from_config(cfg)

    def extract(
        self,
        regions: LandmarkRegions,
        face_width: float,
        face_height: float,
        head_pose: Optional[HeadPose] = None,
    ) -> FeatureVector:
        return self.measure(regions, face_width, face_height, head_pose=head_pose).features

    def measure(
        self,
        regions: LandmarkRegions,
        face_width: float,
        face_height: float,
        head_pose: Optional[HeadPose] = None,
    ) -> LandmarkMeasurement:
        pose = head_pose or HeadPose()

        openness_left = self.eye_openness(regions.eye_left)
        openness_right = self.eye_openness(regions.eye_right)
        left_eye = self._eye(openness_left, regions.eye_left, "eye_left")
        right_eye = self._eye(openness_right, regions.eye_right, "eye_right")

        brow_left = self._brow_raise(regions.brow_left, regions.eye_left, face_height)
        brow_right = self._brow_raise(regions.brow_right, regions.eye_right, face_height)

        corners = self._mouth_corners(regions.outer_lips, face_height)
        smile_left, smile_right, frown_left, frown_right = corners or (0.0, 0.0, 0.0, 0.0)
        mouth_open = self._inner_lip_gap(regions.inner_lips, face_height, press=False)
        jaw_left, jaw_right = self._jaw_shift(regions.face_contour, regions.nose, face_width)

        factor = self.calibration.cheek_squint_factor
        features = FeatureVector(
            eye_blink_left=left_eye.blink,
            eye_blink_right=right_eye.blink,
            eye_openness_left=left_eye.openness,
            eye_openness_right=right_eye.openness,
            eye_squint_left=left_eye.squint,
            eye_squint_right=right_eye.squint,
            brow_raise_left=0.0 if brow_left is None else brow_left,
            brow_raise_right=0.0 if brow_right is None else brow_right,
            brow_furrow=self._brow_furrow(regions.brow_left, regions.brow_right, face_width),
            smile_left=smile_left,
            smile_right=smile_right,
            frown_left=frown_left,
            frown_right=frown_right,
            mouth_open=mouth_open,
            mouth_pucker=self._mouth_pucker(regions.outer_lips, face_width),
            lip_press=self._inner_lip_gap(regions.inner_lips, face_height, press=True),
            # No separate jaw landmark: the inner-lip gap stands in for jaw opening.
            jaw_open=mouth_open,
            jaw_left=jaw_left,
            jaw_right=jaw_right,
            cheek_squint_left=left_eye.squint * factor,
            cheek_squint_right=right_eye.squint * factor,
            head_pitch=float(pose.pitch),
            head_yaw=float(pose.yaw),
            head_roll=float(pose.roll),
        )

        # a pair counts only when both sides were measured, not defaulted
        pairs: Set[str] = set()
        if openness_left is not None and openness_right is not None:
            pairs.add("eye")
        if corners is not None:
            pairs.add("smile")
        if brow_left is not None and brow_right is not None:
            pairs.add("brow")
        return LandmarkMeasurement(features=features.clamped(), measured_pairs=frozenset(pairs))

    # ------------------------------------------------------------------
    # Eyes
    # ------------------------------------------------------------------
    def _eye(self, openness: Optional[float], eye: Region, name: str) -> EyeFeatures:
        if openness is None:
            logger.debug("%s: %d points, using neutral eye features", name, len(eye))
            return EyeFeatures()
        return EyeFeatures(openness=openness, blink=1.0 - openness, squint=self.eye_squint(openness))

    def eye_openness(self, eye: Region) -> Optional[float]:
        """Eye aspect ratio rescaled to [0, 1]; None when the region can't support it."""
        lay = self.layout.eye
        if len(eye) < lay.min_points:
            return None

        horizontal = distance(eye[lay.outer], eye[lay.inner])
        if not is_finite(horizontal) or horizontal <= 0:
            return None

        vertical_outer = distance(eye[lay.upper_outer], eye[lay.lower_outer])
        vertical_inner = distance(eye[lay.upper_inner], eye[lay.lower_inner])
        ear = (vertical_outer + vertical_inner) / (2.0 * horizontal)
        if not is_finite(ear):
            return None

        return rescale(ear, *self.calibration.eye.ear_window)

    def eye_squint(self, openness: float) -> float:
        """Triangle peaking halfway between the squint bounds, zero at or beyond them."""
        low = self.calibration.eye.squint_low
        high = self.calibration.eye.squint_high
        if openness <= low or openness >= high:
            return 0.0
        mid = (low + high) / 2.0
        return clamp(1.0 - abs(openness - mid) / (mid - low))

    # ------------------------------------------------------------------
    # Brows
    # ------------------------------------------------------------------
    def _brow_raise(self, brow: Region, eye: Region, face_height: float) -> Optional[float]:
        if not brow or not eye or not face_height > 0:
            return None

        brow_y = centroid(brow).y
        eye_top, _ = extent(eye, axis=1)
        gap = (eye_top - brow_y) / face_height
        if not is_finite(gap):
            return None
        return rescale(gap, *self.calibration.brow.raise_window)

    def _brow_furrow(self, left: Region, right: Region, face_width: float) -> float:
        if not left or not right or not face_width > 0:
            return 0.0

        _, left_inner = extent(left, axis=0)
        right_inner, _ = extent(right, axis=0)
        gap = (right_inner - left_inner) / face_width
        if not is_finite(gap):
            return 0.0
        return rescale_inverted(gap, *self.calibration.brow.furrow_window)

    # ------------------------------------------------------------------
    # Mouth
    # ------------------------------------------------------------------
    def _mouth_corners(
        self, lips: Region, face_height: float
    ) -> Optional[Tuple[float, float, float, float]]:
        """(smile_left, smile_right, frown_left, frown_right); raise and drop are scored independently."""
        lay = self.layout.outer_lips
        if len(lips) < lay.min_points or not face_height > 0:
            logger.debug("outer_lips: %d points, no smile/frown", len(lips))
            return None

        center_y = (lips[lay.top_center].y + lips[lay.bottom_center].y) / 2.0
        # y grows downward, so a raised corner has a smaller y than the lip center
        lift_left = (center_y - lips[lay.left_corner].y) / face_height
        lift_right = (center_y - lips[lay.right_corner].y) / face_height
        if not is_finite(lift_left, lift_right):
            return None

        mouth = self.calibration.mouth
        return (
            clamp(lift_left / mouth.smile_lift),
            clamp(lift_right / mouth.smile_lift),
            clamp(-lift_left / mouth.frown_drop),
            clamp(-lift_right / mouth.frown_drop),
        )

    def _inner_lip_gap(self, lips: Region, face_height: float, press: bool) -> float:
        lay = self.layout.inner_lips
        if len(lips) < lay.min_points or not face_height > 0:
            return 0.0

        gap = distance(lips[lay.top_center], lips[lay.bottom_center]) / face_height
        if not is_finite(gap):
            return 0.0
        if press:
            return rescale_inverted(gap, *self.calibration.mouth.press_window)
        return rescale(gap, *self.calibration.mouth.open_window)

    def _mouth_pucker(self, lips: Region, face_width: float) -> float:
        lay = self.layout.outer_lips
        if len(lips) < lay.min_points or not face_width > 0:
            return 0.0

        width = distance(lips[lay.left_corner], lips[lay.right_corner]) / face_width
        if not is_finite(width):
            return 0.0
        return rescale_inverted(width, *self.calibration.mouth.pucker_window)

    # ------------------------------------------------------------------
    # Jaw
    # ------------------------------------------------------------------
    def _jaw_shift(self, contour: Region, nose: Region, face_width: float) -> Tuple[float, float]:
        if not contour or not nose or not face_width > 0:
            return 0.0, 0.0

        chin: Point = max(contour, key=lambda p: p.y)
        offset = (chin.x - centroid(nose).x) / face_width
        if not is_finite(offset):
            return 0.0, 0.0

        window = self.calibration.jaw.shift_window
        if offset < 0:
            return rescale(-offset, *window), 0.0
        if offset > 0:
            return 0.0, rescale(offset, *window)
        return 0.0, 0.0
