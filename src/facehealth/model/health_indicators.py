from __future__ import annotations

import math
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Mapping, Optional

from facehealth.features.blend_shapes import BlendShapes
from facehealth.features.geometry import clamp
from facehealth.model.calibration import ScoringConfig
from facehealth.model.signals import AnalysisMode, GeometrySignals, ScoringInput


OVERALL_WEIGHTS: Dict[str, float] = {
    "alertness_score": 0.30,
    "tension_score": 0.20,        # applied to 100 - tension
    "smile_score": 0.20,
    "facial_symmetry": 0.15,
    "capture_reliability_score": 0.15,
}


@dataclass(frozen=True)
class HealthIndicators:
    """Five 0-100 scores. Smile is centered on 50 (neutral); high tension is bad."""
    alertness_score: float = 0.0
    tension_score: float = 0.0
    smile_score: float = 50.0
    facial_symmetry: float = 0.0
    capture_reliability_score: float = 0.0

    @property
    def overall_score(self) -> float:
        inverted_tension = 100.0 - self.tension_score
        return (
            OVERALL_WEIGHTS["alertness_score"] * self.alertness_score
            + OVERALL_WEIGHTS["tension_score"] * inverted_tension
            + OVERALL_WEIGHTS["smile_score"] * self.smile_score
            + OVERALL_WEIGHTS["facial_symmetry"] * self.facial_symmetry
            + OVERALL_WEIGHTS["capture_reliability_score"] * self.capture_reliability_score
        )

    def with_reliability(self, score: float) -> "HealthIndicators":
        return replace(self, capture_reliability_score=clamp(score, 0.0, 100.0))

    def as_dict(self) -> Dict[str, float]:
        out = asdict(self)
        out["overall_score"] = self.overall_score
        return out

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "HealthIndicators":
        # overall_score is derived, never read back; stored scores are clamped on the way in
        return HealthIndicators(
            alertness_score=_score(float(data.get("alertness_score", 0.0))),
            tension_score=_score(float(data.get("tension_score", 0.0))),
            smile_score=_score(float(data.get("smile_score", 50.0))),
            facial_symmetry=_score(float(data.get("facial_symmetry", 0.0))),
            capture_reliability_score=_score(float(data.get("capture_reliability_score", 0.0))),
        )


def _score(value: float) -> float:
    if math.isnan(value):
        return 0.0
    return clamp(value, 0.0, 100.0)


class HealthIndicatorCalculator:
    """
    Deterministic rule-based scorer (no ML).
    Formula branch per indicator is picked by ScoringInput.mode.
    """

    def __init__(self, cfg: Optional[Dict[str, Any]] = None) -> None:
        self.cfg = ScoringConfig.from_config(cfg)
        self.w = self.cfg.weights

    def score(self, signals: ScoringInput) -> HealthIndicators:
        return HealthIndicators(
            alertness_score=self.alertness(signals),
            tension_score=self.tension(signals),
            smile_score=self.smile(signals),
            facial_symmetry=self.symmetry(signals),
            capture_reliability_score=self.reliability(signals),
        )

    # ------------------------------------------------------------------
    # Alertness
    # ------------------------------------------------------------------
    def _geometry_alertness(self, geo: GeometrySignals) -> float:
        pose_score = geo.head_pose_score(self.cfg.pose_threshold_deg)
        return geo.eye_openness * 100.0 - (1.0 - pose_score) * self.w.pose_penalty

    def alertness(self, signals: ScoringInput) -> float:
        mode = signals.mode
        if mode == AnalysisMode.NONE:
            return _score(self.w.alertness_baseline)
        if mode == AnalysisMode.GEOMETRY:
            return _score(self._geometry_alertness(signals.geometry))
        if mode == AnalysisMode.BLEND_SHAPES:
            bs: BlendShapes = signals.blend_shapes
            wide_bonus = bs.average_eye_wide * self.w.eye_wide_bonus
            blink_penalty = bs.average_blink * self.w.blink_penalty
            squint_penalty = bs.average_squint * self.w.squint_penalty
            brow_bonus = bs["browInnerUp"] * self.w.brow_inner_up_bonus
            if signals.geometry is not None:
                base = self._geometry_alertness(signals.geometry)
                return _score(base + wide_bonus - blink_penalty - squint_penalty + brow_bonus)
            base = (1.0 - bs.average_blink) * self.w.activation_openness
            return _score(base + wide_bonus - squint_penalty + brow_bonus)
        raise ValueError(f"Unhandled analysis mode: {mode}")

    # ------------------------------------------------------------------
    # Tension
    # ------------------------------------------------------------------
    def tension(self, signals: ScoringInput) -> float:
        mode = signals.mode
        if mode == AnalysisMode.NONE:
            return _score(self.w.tension_baseline)
        if mode == AnalysisMode.GEOMETRY:
            geo = signals.geometry
            pose_score = geo.head_pose_score(self.cfg.pose_threshold_deg)
            rigidity = (1.0 - pose_score) * self.w.pose_rigidity_tension
            eye_tension = (1.0 - geo.eye_openness) * self.w.eye_closure_tension
            return _score(self.w.geometry_tension_base + rigidity + eye_tension)
        if mode == AnalysisMode.BLEND_SHAPES:
            bs: BlendShapes = signals.blend_shapes
            return _score(
                bs.average_brow_down * self.w.brow_down_tension
                + bs.average_squint * self.w.squint_tension
                + bs.jaw_tension * self.w.jaw_tension
                + bs.average_mouth_press * self.w.mouth_press_tension
                + bs.average_nose_sneer * self.w.nose_sneer_tension
            )
        raise ValueError(f"Unhandled analysis mode: {mode}")

    # ------------------------------------------------------------------
    # Smile / mood
    # ------------------------------------------------------------------
    def smile(self, signals: ScoringInput) -> float:
        mode = signals.mode
        if mode == AnalysisMode.NONE:
            return _score(self.w.smile_baseline)
        if mode == AnalysisMode.GEOMETRY:
            # weak proxy: open, bright eyes
            eye_smile = signals.geometry.eye_openness * self.w.eye_smile_proxy
            return _score(self.w.geometry_smile_base + eye_smile)
        if mode == AnalysisMode.BLEND_SHAPES:
            bs: BlendShapes = signals.blend_shapes
            smile_intensity = bs.average_smile * self.w.smile_intensity
            frown_penalty = bs.average_frown * self.w.frown_penalty
            if smile_intensity < self.w.neutral_cutoff and frown_penalty < self.w.neutral_cutoff:
                return _score(self.w.smile_baseline)
            cheek_bonus = bs.average_cheek_squint * self.w.cheek_bonus
            dimple_bonus = bs.average_dimple * self.w.dimple_bonus
            return _score(smile_intensity - frown_penalty + cheek_bonus + dimple_bonus)
        raise ValueError(f"Unhandled analysis mode: {mode}")

    # ------------------------------------------------------------------
    # Symmetry
    # ------------------------------------------------------------------
    def symmetry(self, signals: ScoringInput) -> float:
        mode = signals.mode
        if mode == AnalysisMode.NONE:
            return _score(self.w.symmetry_baseline)
        if mode == AnalysisMode.GEOMETRY:
            measured = signals.geometry.symmetry
            if measured is None:
                return _score(self.w.symmetry_baseline)
            return _score(measured * 100.0)
        if mode == AnalysisMode.BLEND_SHAPES:
            return _score(signals.blend_shapes.overall_symmetry * 100.0)
        raise ValueError(f"Unhandled analysis mode: {mode}")

    # ------------------------------------------------------------------
    # Capture reliability
    # ------------------------------------------------------------------
    def reliability(self, signals: ScoringInput) -> float:
        """Mean of whichever sub-scores are available; absent signals are excluded."""
        parts = []

        geo = signals.geometry
        if geo is not None:
            parts.append(clamp(geo.confidence) * 100.0)
            parts.append(geo.head_pose_score(self.cfg.pose_threshold_deg) * 100.0)
            size = geo.face_area_fraction / self.cfg.full_size_fraction * 100.0
            parts.append(min(max(size, 0.0), 100.0))
            count = geo.landmark_count / self.cfg.reference_landmark_count * 100.0
            parts.append(min(max(count, 0.0), 100.0))

        if signals.blend_shapes is not None:
            parts.append(100.0)

        if not parts:
            return 0.0
        return _score(sum(parts) / len(parts))


def calculate(
    geometry: Optional[GeometrySignals] = None,
    blend_shapes: Optional[BlendShapes] = None,
    cfg: Optional[Dict[str, Any]] = None,
) -> HealthIndicators:
    return HealthIndicatorCalculator(cfg).score(
        ScoringInput(geometry=geometry, blend_shapes=blend_shapes)
    )
