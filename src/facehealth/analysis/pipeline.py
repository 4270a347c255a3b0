from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from facehealth.analysis.record import FacialMetrics
from facehealth.capture.quality import CaptureContext, CaptureMetadata
from facehealth.features.blend_shapes import BlendShapes, missing_names
from facehealth.features.feature_vector import HeadPose
from facehealth.features.landmark_extractor import LandmarkFeatureExtractor, LandmarkMeasurement
from facehealth.features.regions import LandmarkRegions
from facehealth.model.health_indicators import HealthIndicatorCalculator
from facehealth.model.signals import GeometrySignals, ScoringInput

logger = logging.getLogger(__name__)


class FaceAnalyzer:
    """
    Raw geometry / coefficients -> FacialMetrics for one capture.

    Holds only configuration; every call is independent, so one instance
    can serve concurrent callers.
    """

    def __init__(self, cfg: Optional[Dict[str, Any]] = None) -> None:
        self.cfg = cfg or {}
        self.extractor = LandmarkFeatureExtractor(self.cfg)
        self.calculator = HealthIndicatorCalculator(self.cfg)

    def _with_landmark_count(self, capture: CaptureContext, regions: LandmarkRegions) -> CaptureContext:
        if capture.landmark_count > 0:
            return capture
        return replace(capture, landmark_count=regions.point_count)

    def _measure(
        self, regions: LandmarkRegions, capture: CaptureContext, head_pose: Optional[HeadPose]
    ) -> LandmarkMeasurement:
        return self.extractor.measure(
            regions, capture.face_width, capture.face_height, head_pose=head_pose
        )

    def analyze_landmarks(
        self,
        regions: LandmarkRegions,
        capture: CaptureContext,
        head_pose: Optional[HeadPose] = None,
        captured_at: Optional[datetime] = None,
    ) -> FacialMetrics:
        """
        Geometry-only analysis. The calculator's reliability estimate is replaced
        by the capture quality of this frame (scaled to 0-100).
        """
        capture = self._with_landmark_count(capture, regions)
        measurement = self._measure(regions, capture, head_pose)
        features = measurement.features
        signals = ScoringInput(
            geometry=GeometrySignals.from_capture(features, capture, measurement.measured_pairs)
        )

        indicators = self.calculator.score(signals)
        indicators = indicators.with_reliability(capture.quality(self.cfg) * 100.0)

        return FacialMetrics(
            features=features,
            indicators=indicators,
            metadata=capture.metadata(),
            analysis_mode=signals.mode,
            captured_at=captured_at,
        )

    def analyze_blend_shapes(
        self,
        coefficients: Mapping[str, Any],
        capture: Optional[CaptureContext] = None,
        regions: Optional[LandmarkRegions] = None,
        head_pose: Optional[HeadPose] = None,
        captured_at: Optional[datetime] = None,
    ) -> FacialMetrics:
        """
        Activation-based analysis. When a capture is supplied its geometry joins the
        scoring (alertness combines both sources, reliability gains the capture terms).
        """
        blend_shapes = BlendShapes.from_mapping(coefficients)
        missing = missing_names(coefficients)
        if missing:
            logger.debug("%d blend shapes missing, reading as 0", len(missing))

        features = blend_shapes.to_feature_vector(head_pose)

        geometry: Optional[GeometrySignals] = None
        metadata = CaptureMetadata()
        if capture is not None:
            geometry_features = features
            measured_pairs = None
            if regions is not None and not regions.is_empty:
                capture = self._with_landmark_count(capture, regions)
                measurement = self._measure(regions, capture, head_pose)
                geometry_features = measurement.features
                measured_pairs = measurement.measured_pairs
            geometry = GeometrySignals.from_capture(geometry_features, capture, measured_pairs)
            metadata = capture.metadata()

        signals = ScoringInput(geometry=geometry, blend_shapes=blend_shapes)
        return FacialMetrics(
            features=features,
            indicators=self.calculator.score(signals),
            metadata=metadata,
            analysis_mode=signals.mode,
            blend_shapes=blend_shapes,
            captured_at=captured_at,
        )


def analyze_landmarks(
    regions: LandmarkRegions,
    capture: CaptureContext,
    head_pose: Optional[HeadPose] = None,
    cfg: Optional[Dict[str, Any]] = None,
    captured_at: Optional[datetime] = None,
) -> FacialMetrics:
    return FaceAnalyzer(cfg).analyze_landmarks(
        regions, capture, head_pose=head_pose, captured_at=captured_at
    )


def analyze_blend_shapes(
    coefficients: Mapping[str, Any],
    capture: Optional[CaptureContext] = None,
    regions: Optional[LandmarkRegions] = None,
    head_pose: Optional[HeadPose] = None,
    cfg: Optional[Dict[str, Any]] = None,
    captured_at: Optional[datetime] = None,
) -> FacialMetrics:
    return FaceAnalyzer(cfg).analyze_blend_shapes(
        coefficients,
        capture=capture,
        regions=regions,
        head_pose=head_pose,
        captured_at=captured_at,
    )
