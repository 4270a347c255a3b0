from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, Optional

from facehealth.capture.quality import CaptureContext
from facehealth.features.blend_shapes import BlendShapes
from facehealth.features.feature_vector import BILATERAL_PAIRS, FeatureVector


class AnalysisMode(str, Enum):
    GEOMETRY = "geometry"          # landmark geometry only
    BLEND_SHAPES = "blend_shapes"  # activation coefficients (geometry may also be present)
    NONE = "none"


@dataclass(frozen=True)
class GeometrySignals:
    """Landmark-derived inputs to the indicator formulas."""
    features: FeatureVector
    confidence: float = 1.0
    face_area_fraction: float = 0.0
    landmark_count: int = 0
    # pairs whose two sides were both measured; defaults to every pair of the vector
    measured_pairs: FrozenSet[str] = frozenset(BILATERAL_PAIRS)

    @staticmethod
    def from_capture(
        features: FeatureVector,
        capture: CaptureContext,
        measured_pairs: Optional[Iterable[str]] = None,
    ) -> "GeometrySignals":
        confidence = float(capture.confidence)
        area = capture.face_area_fraction
        return GeometrySignals(
            features=features,
            confidence=confidence if math.isfinite(confidence) else 0.0,
            face_area_fraction=area if math.isfinite(area) else 0.0,
            landmark_count=int(capture.landmark_count),
            measured_pairs=frozenset(BILATERAL_PAIRS if measured_pairs is None else measured_pairs),
        )

    @property
    def eye_openness(self) -> float:
        return self.features.average_eye_openness

    @property
    def symmetry(self) -> Optional[float]:
        """Mean symmetry of the measured pairs; None when no pair was measured."""
        return self.features.symmetry_over(self.measured_pairs)

    def head_pose_score(self, threshold_deg: float) -> float:
        """1 when facing the camera, 0 once every axis is at or past the threshold."""
        closeness = [
            1.0 - min(abs(angle) / threshold_deg, 1.0)
            for angle in self.features.head_pose.as_tuple()
        ]
        return sum(closeness) / len(closeness)


@dataclass(frozen=True)
class ScoringInput:
    """
    Tagged input to the calculator. The mode is derived from which sources are present,
    so every formula branch is chosen from one place.
    """
    geometry: Optional[GeometrySignals] = None
    blend_shapes: Optional[BlendShapes] = None

    @property
    def mode(self) -> AnalysisMode:
        if self.blend_shapes is not None:
            return AnalysisMode.BLEND_SHAPES
        if self.geometry is not None:
            return AnalysisMode.GEOMETRY
        return AnalysisMode.NONE
