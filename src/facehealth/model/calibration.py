from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Tuple

from facehealth.config import ConfigError, read_positive, read_window, section


# Empirical windows, expressed as fractions of the eye span / face height / face width.
# Recalibration edits these (or configs/default.yaml), never the extractor.
Window = Tuple[float, float]


@dataclass(frozen=True)
class EyeCalibration:
    ear_window: Window = (0.1, 0.4)
    # Squint is a triangle: 1 at the midpoint of the bounds, 0 at or beyond either bound
    # (0.5 at openness 0.4). The earlier app curve used a fixed slope inside the same bounds,
    # 1 - 2 * |openness - 0.5|, giving 0.8 at 0.4 and 0.6 just inside the bounds.
    squint_low: float = 0.3
    squint_high: float = 0.7


@dataclass(frozen=True)
class BrowCalibration:
    raise_window: Window = (0.02, 0.08)
    furrow_window: Window = (0.15, 0.25)     # inverted


@dataclass(frozen=True)
class MouthCalibration:
    smile_lift: float = 0.03
    frown_drop: float = 0.02
    open_window: Window = (0.01, 0.11)
    pucker_window: Window = (0.25, 0.40)     # inverted
    press_window: Window = (0.005, 0.015)    # inverted


@dataclass(frozen=True)
class JawCalibration:
    shift_window: Window = (0.0, 0.05)


@dataclass(frozen=True)
class Calibration:
    eye: EyeCalibration = field(default_factory=EyeCalibration)
    brow: BrowCalibration = field(default_factory=BrowCalibration)
    mouth: MouthCalibration = field(default_factory=MouthCalibration)
    jaw: JawCalibration = field(default_factory=JawCalibration)
    # Stand-in for a dedicated cheek signal: cheek squint = factor * eye squint.
    cheek_squint_factor: float = 0.8

    @staticmethod
    def from_config(cfg: Dict[str, Any] | None) -> "Calibration":
        eye = section(cfg, "calibration", "eye")
        brow = section(cfg, "calibration", "brow")
        mouth = section(cfg, "calibration", "mouth")
        jaw = section(cfg, "calibration", "jaw")
        cheek = section(cfg, "calibration", "cheek")

        d_eye = EyeCalibration()
        squint_low = float(eye.get("squint_low", d_eye.squint_low))
        squint_high = float(eye.get("squint_high", d_eye.squint_high))
        if not 0.0 <= squint_low < squint_high <= 1.0:
            raise ConfigError("calibration.eye squint bounds must satisfy 0 <= low < high <= 1")

        d_brow = BrowCalibration()
        d_mouth = MouthCalibration()
        return Calibration(
            eye=EyeCalibration(
                ear_window=read_window(eye, "ear_window", d_eye.ear_window),
                squint_low=squint_low,
                squint_high=squint_high,
            ),
            brow=BrowCalibration(
                raise_window=read_window(brow, "raise_window", d_brow.raise_window),
                furrow_window=read_window(brow, "furrow_window", d_brow.furrow_window),
            ),
            mouth=MouthCalibration(
                smile_lift=read_positive(mouth, "smile_lift", d_mouth.smile_lift),
                frown_drop=read_positive(mouth, "frown_drop", d_mouth.frown_drop),
                open_window=read_window(mouth, "open_window", d_mouth.open_window),
                pucker_window=read_window(mouth, "pucker_window", d_mouth.pucker_window),
                press_window=read_window(mouth, "press_window", d_mouth.press_window),
            ),
            jaw=JawCalibration(
                shift_window=read_window(jaw, "shift_window", JawCalibration().shift_window),
            ),
            cheek_squint_factor=read_positive(cheek, "squint_factor", 0.8),
        )


@dataclass(frozen=True)
class ScoringWeights:
    """
    Heuristic bonus/penalty multipliers of the indicator formulas.
    These are calibration targets carried over for behavioral parity,
    not values with a verified derivation.
    """
    # alertness
    alertness_baseline: float = 50.0
    pose_penalty: float = 20.0
    eye_wide_bonus: float = 30.0
    blink_penalty: float = 20.0
    squint_penalty: float = 15.0
    brow_inner_up_bonus: float = 15.0
    activation_openness: float = 70.0

    # tension
    tension_baseline: float = 20.0
    brow_down_tension: float = 40.0
    squint_tension: float = 25.0
    jaw_tension: float = 30.0
    mouth_press_tension: float = 20.0
    nose_sneer_tension: float = 15.0
    geometry_tension_base: float = 15.0
    pose_rigidity_tension: float = 30.0
    eye_closure_tension: float = 25.0

    # smile / mood
    smile_baseline: float = 50.0
    smile_intensity: float = 100.0
    frown_penalty: float = 60.0
    cheek_bonus: float = 20.0
    dimple_bonus: float = 15.0
    neutral_cutoff: float = 5.0
    geometry_smile_base: float = 40.0
    eye_smile_proxy: float = 30.0

    # symmetry
    symmetry_baseline: float = 85.0

    @staticmethod
    def from_config(cfg: Dict[str, Any] | None) -> "ScoringWeights":
        overrides = section(cfg, "scoring", "weights")
        known = {f.name for f in fields(ScoringWeights)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ConfigError(f"Unknown scoring weights: {unknown}")

        values: Dict[str, float] = {}
        for name, raw in overrides.items():
            try:
                value = float(raw)
            except (TypeError, ValueError):
                raise ConfigError(f"scoring.weights.{name} must be a number") from None
            if not math.isfinite(value) or value < 0:
                raise ConfigError(f"scoring.weights.{name} must be a finite number >= 0, got {value}")
            values[name] = value
        return replace(ScoringWeights(), **values)


@dataclass(frozen=True)
class ScoringConfig:
    pose_threshold_deg: float = 45.0
    reference_landmark_count: float = 76.0
    full_size_fraction: float = 0.25
    weights: ScoringWeights = field(default_factory=ScoringWeights)

    @staticmethod
    def from_config(cfg: Dict[str, Any] | None) -> "ScoringConfig":
        s_cfg = section(cfg, "scoring")
        return ScoringConfig(
            pose_threshold_deg=read_positive(s_cfg, "pose_threshold_deg", 45.0),
            reference_landmark_count=read_positive(s_cfg, "reference_landmark_count", 76.0),
            full_size_fraction=read_positive(s_cfg, "full_size_fraction", 0.25),
            weights=ScoringWeights.from_config(cfg),
        )


@dataclass(frozen=True)
class QualityConfig:
    size_gain: float = 10.0

    @staticmethod
    def from_config(cfg: Dict[str, Any] | None) -> "QualityConfig":
        return QualityConfig(size_gain=read_positive(section(cfg, "quality"), "size_gain", 10.0))
