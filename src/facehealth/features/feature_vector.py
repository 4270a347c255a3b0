from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from facehealth.features.geometry import clamp


POSE_FIELDS = ("head_pitch", "head_yaw", "head_roll")

# Openness-type features rest at half open; everything else is an activation resting at 0.
OPENNESS_FIELDS = ("eye_openness_left", "eye_openness_right")

# Left/right pairs scored by landmark symmetry, by pair name.
BILATERAL_PAIRS: Dict[str, Tuple[str, str]] = {
    "eye": ("eye_openness_left", "eye_openness_right"),
    "smile": ("smile_left", "smile_right"),
    "brow": ("brow_raise_left", "brow_raise_right"),
}


@dataclass(frozen=True)
class HeadPose:
    """Detector-supplied head rotation in degrees, passed through untouched."""
    pitch: float = 0.0
    yaw: float = 0.0
    roll: float = 0.0

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.pitch, self.yaw, self.roll)


@dataclass(frozen=True)
class FeatureVector:
    """
    Normalized facial-action features for one capture.
    Every field except the head pose angles lies in [0, 1].
    Order is stable and documented for reproducibility.
    """
    # eyes
    eye_blink_left: float = 0.0
    eye_blink_right: float = 0.0
    eye_openness_left: float = 0.5
    eye_openness_right: float = 0.5
    eye_squint_left: float = 0.0
    eye_squint_right: float = 0.0

    # brows
    brow_raise_left: float = 0.0
    brow_raise_right: float = 0.0
    brow_furrow: float = 0.0

    # mouth
    smile_left: float = 0.0
    smile_right: float = 0.0
    frown_left: float = 0.0
    frown_right: float = 0.0
    mouth_open: float = 0.0
    mouth_pucker: float = 0.0
    lip_press: float = 0.0

    # jaw
    jaw_open: float = 0.0
    jaw_left: float = 0.0
    jaw_right: float = 0.0

    # cheeks
    cheek_squint_left: float = 0.0
    cheek_squint_right: float = 0.0

    # head pose (degrees)
    head_pitch: float = 0.0
    head_yaw: float = 0.0
    head_roll: float = 0.0

    @staticmethod
    def names() -> List[str]:
        return [f.name for f in fields(FeatureVector)]

    @staticmethod
    def neutral_default(name: str) -> float:
        return 0.5 if name in OPENNESS_FIELDS else 0.0

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "FeatureVector":
        known = set(FeatureVector.names())
        return FeatureVector(**{k: float(v) for k, v in data.items() if k in known}).clamped()

    def clamped(self) -> "FeatureVector":
        """Bounded features forced into [0, 1]; non-finite values take their neutral default."""
        updates: Dict[str, float] = {}
        for name in self.names():
            value = float(getattr(self, name))
            if not math.isfinite(value):
                updates[name] = 0.0 if name in POSE_FIELDS else self.neutral_default(name)
            elif name not in POSE_FIELDS:
                updates[name] = clamp(value)
        return replace(self, **updates)

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)

    def as_list(self) -> List[float]:
        return [float(getattr(self, name)) for name in self.names()]

    @property
    def head_pose(self) -> HeadPose:
        return HeadPose(self.head_pitch, self.head_yaw, self.head_roll)

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------
    @property
    def average_eye_openness(self) -> float:
        return (self.eye_openness_left + self.eye_openness_right) / 2.0

    @property
    def average_eye_blink(self) -> float:
        return (self.eye_blink_left + self.eye_blink_right) / 2.0

    @property
    def average_eye_squint(self) -> float:
        return (self.eye_squint_left + self.eye_squint_right) / 2.0

    @property
    def average_smile(self) -> float:
        return (self.smile_left + self.smile_right) / 2.0

    @property
    def average_frown(self) -> float:
        return (self.frown_left + self.frown_right) / 2.0

    @property
    def average_brow_raise(self) -> float:
        return (self.brow_raise_left + self.brow_raise_right) / 2.0

    def pair_symmetry(self, pair: str) -> float:
        left, right = BILATERAL_PAIRS[pair]
        return 1.0 - abs(getattr(self, left) - getattr(self, right))

    def symmetry_over(self, pairs: Iterable[str]) -> Optional[float]:
        """Mean pair symmetry over the given pair names; None when no known pair is given."""
        wanted = set(pairs)
        scores = [self.pair_symmetry(name) for name in BILATERAL_PAIRS if name in wanted]
        if not scores:
            return None
        return sum(scores) / len(scores)

    @property
    def eye_symmetry(self) -> float:
        return self.pair_symmetry("eye")

    @property
    def smile_symmetry(self) -> float:
        return self.pair_symmetry("smile")

    @property
    def brow_symmetry(self) -> float:
        return self.pair_symmetry("brow")

    @property
    def overall_symmetry(self) -> float:
        return (self.eye_symmetry + self.smile_symmetry + self.brow_symmetry) / 3.0
