"""
Blend-shape coefficients -> the landmark feature vocabulary.

The 52 names are the ARKit / MediaPipe FaceLandmarker blend shapes. Unknown names
are ignored and missing names read as 0, so partial maps are always accepted.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from facehealth.features.feature_vector import FeatureVector, HeadPose
from facehealth.features.geometry import clamp

logger = logging.getLogger(__name__)


BLEND_SHAPE_NAMES: Tuple[str, ...] = (
    "browDownLeft", "browDownRight", "browInnerUp", "browOuterUpLeft", "browOuterUpRight",
    "cheekPuff", "cheekSquintLeft", "cheekSquintRight",
    "eyeBlinkLeft", "eyeBlinkRight",
    "eyeLookDownLeft", "eyeLookDownRight", "eyeLookInLeft", "eyeLookInRight",
    "eyeLookOutLeft", "eyeLookOutRight", "eyeLookUpLeft", "eyeLookUpRight",
    "eyeSquintLeft", "eyeSquintRight", "eyeWideLeft", "eyeWideRight",
    "jawForward", "jawLeft", "jawOpen", "jawRight",
    "mouthClose", "mouthDimpleLeft", "mouthDimpleRight", "mouthFrownLeft", "mouthFrownRight",
    "mouthFunnel", "mouthLeft", "mouthLowerDownLeft", "mouthLowerDownRight",
    "mouthPressLeft", "mouthPressRight", "mouthPucker", "mouthRight",
    "mouthRollLower", "mouthRollUpper", "mouthShrugLower", "mouthShrugUpper",
    "mouthSmileLeft", "mouthSmileRight", "mouthStretchLeft", "mouthStretchRight",
    "mouthUpperUpLeft", "mouthUpperUpRight",
    "noseSneerLeft", "noseSneerRight",
    "tongueOut",
)

_KNOWN = frozenset(BLEND_SHAPE_NAMES)

# Bilateral pairs scored by overall symmetry, by stem ("eyeBlink" -> eyeBlinkLeft/Right).
SYMMETRY_PAIRS: Tuple[str, ...] = (
    "eyeBlink", "eyeSquint", "eyeWide",
    "eyeLookIn", "eyeLookOut", "eyeLookUp", "eyeLookDown",
    "browDown", "browOuterUp",
    "mouthSmile", "mouthFrown", "mouthDimple", "mouthPress",
    "mouthStretch", "mouthUpperUp", "mouthLowerDown",
    "cheekSquint", "noseSneer",
)

NEUTRAL_CATEGORY = "_neutral"


def _coerce(name: str, value: Any) -> float:
    v = float(value)
    if not math.isfinite(v):
        logger.debug("blend shape %s is not finite, reading as 0", name)
        return 0.0
    return clamp(v)


@dataclass(frozen=True)
class BlendShapes:
    values: Mapping[str, float] = field(default_factory=dict)

    @staticmethod
    def from_mapping(coefficients: Mapping[str, Any]) -> "BlendShapes":
        cleaned = {
            name: _coerce(name, value)
            for name, value in coefficients.items()
            if name in _KNOWN
        }
        return BlendShapes(values=MappingProxyType(cleaned))

    def __getitem__(self, name: str) -> float:
        if name not in _KNOWN:
            raise KeyError(name)
        return float(self.values.get(name, 0.0))

    def pair(self, stem: str) -> Tuple[float, float]:
        return self[f"{stem}Left"], self[f"{stem}Right"]

    def mean(self, stem: str) -> float:
        left, right = self.pair(stem)
        return (left + right) / 2.0

    def as_dict(self) -> Dict[str, float]:
        return {name: self[name] for name in BLEND_SHAPE_NAMES}

    # ------------------------------------------------------------------
    # Derived aggregates
    # ------------------------------------------------------------------
    @property
    def average_blink(self) -> float:
        return self.mean("eyeBlink")

    @property
    def average_squint(self) -> float:
        return self.mean("eyeSquint")

    @property
    def average_eye_wide(self) -> float:
        return self.mean("eyeWide")

    @property
    def average_brow_down(self) -> float:
        return self.mean("browDown")

    @property
    def average_smile(self) -> float:
        return self.mean("mouthSmile")

    @property
    def average_frown(self) -> float:
        return self.mean("mouthFrown")

    @property
    def average_mouth_press(self) -> float:
        return self.mean("mouthPress")

    @property
    def average_nose_sneer(self) -> float:
        return self.mean("noseSneer")

    @property
    def average_cheek_squint(self) -> float:
        return self.mean("cheekSquint")

    @property
    def average_dimple(self) -> float:
        return self.mean("mouthDimple")

    @property
    def jaw_tension(self) -> float:
        """A closed jaw pushed forward reads as clenched."""
        return ((1.0 - self["jawOpen"]) + self["jawForward"]) / 2.0

    def pair_symmetries(self) -> Dict[str, float]:
        out: Dict[str, float] = {}
        for stem in SYMMETRY_PAIRS:
            left, right = self.pair(stem)
            out[stem] = 1.0 - abs(left - right)
        return out

    @property
    def overall_symmetry(self) -> float:
        scores = list(self.pair_symmetries().values())
        return sum(scores) / len(scores)

    # ------------------------------------------------------------------
    # Feature vocabulary
    # ------------------------------------------------------------------
    def to_feature_vector(self, head_pose: Optional[HeadPose] = None) -> FeatureVector:
        pose = head_pose or HeadPose()
        return FeatureVector(
            eye_blink_left=self["eyeBlinkLeft"],
            eye_blink_right=self["eyeBlinkRight"],
            eye_openness_left=1.0 - self["eyeBlinkLeft"],
            eye_openness_right=1.0 - self["eyeBlinkRight"],
            eye_squint_left=self["eyeSquintLeft"],
            eye_squint_right=self["eyeSquintRight"],
            brow_raise_left=self["browOuterUpLeft"],
            brow_raise_right=self["browOuterUpRight"],
            brow_furrow=self.average_brow_down,
            smile_left=self["mouthSmileLeft"],
            smile_right=self["mouthSmileRight"],
            frown_left=self["mouthFrownLeft"],
            frown_right=self["mouthFrownRight"],
            mouth_open=self["jawOpen"],
            mouth_pucker=self["mouthPucker"],
            lip_press=self.average_mouth_press,
            jaw_open=self["jawOpen"],
            jaw_left=self["jawLeft"],
            jaw_right=self["jawRight"],
            cheek_squint_left=self["cheekSquintLeft"],
            cheek_squint_right=self["cheekSquintRight"],
            head_pitch=float(pose.pitch),
            head_yaw=float(pose.yaw),
            head_roll=float(pose.roll),
        ).clamped()


def adapt(
    coefficients: Mapping[str, Any], head_pose: Optional[HeadPose] = None
) -> FeatureVector:
    return BlendShapes.from_mapping(coefficients).to_feature_vector(head_pose)


def coefficients_from_categories(categories: Iterable[Any]) -> Dict[str, float]:
    """
    Flatten a detector's blend-shape category list into a name -> score map.
    Accepts objects with .category_name/.score, dicts with those keys, or (name, score) pairs.
    """
    out: Dict[str, float] = {}
    for item in categories:
        if hasattr(item, "category_name"):
            name, score = item.category_name, item.score
        elif isinstance(item, Mapping):
            name, score = item["category_name"], item["score"]
        else:
            name, score = item
        if name == NEUTRAL_CATEGORY:
            continue
        out[str(name)] = float(score)
    return out


def missing_names(coefficients: Mapping[str, Any]) -> List[str]:
    return [name for name in BLEND_SHAPE_NAMES if name not in coefficients]
