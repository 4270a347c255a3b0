"""
Named landmark regions and the index layout the extractor reads them with.

Coordinates follow image conventions: x grows to the right, y grows downward.
"Left" and "right" are image sides, so the left eye is the one nearer x = 0.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from numbers import Real
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

from facehealth.config import ConfigError, section
from facehealth.features.geometry import Point


class RegionError(ValueError):
    pass


REGION_NAMES = (
    "eye_left",
    "eye_right",
    "brow_left",
    "brow_right",
    "outer_lips",
    "inner_lips",
    "nose",
    "face_contour",
)

# Accept the upstream detector's camelCase names as well.
_ALIASES = {
    "eyeLeft": "eye_left",
    "eyeRight": "eye_right",
    "browLeft": "brow_left",
    "browRight": "brow_right",
    "outerLips": "outer_lips",
    "innerLips": "inner_lips",
    "faceContour": "face_contour",
}

Region = Tuple[Point, ...]


def to_point(raw: Any) -> Point:
    if isinstance(raw, Point):
        return raw
    if hasattr(raw, "x") and hasattr(raw, "y"):
        return Point(float(raw.x), float(raw.y))
    try:
        x, y = raw
    except (TypeError, ValueError):
        raise RegionError(f"Point must be an (x, y) pair, got {raw!r}") from None
    if not isinstance(x, Real) or not isinstance(y, Real):
        raise RegionError(f"Point coordinates must be numbers, got {raw!r}")
    return Point(float(x), float(y))


def to_region(raw: Iterable[Any]) -> Region:
    return tuple(to_point(p) for p in raw)


@dataclass(frozen=True)
class LandmarkRegions:
    """Per-region point sets for one face. Any region may be empty."""
    eye_left: Region = ()
    eye_right: Region = ()
    brow_left: Region = ()
    brow_right: Region = ()
    outer_lips: Region = ()
    inner_lips: Region = ()
    nose: Region = ()
    face_contour: Region = ()

    @staticmethod
    def from_mapping(data: Mapping[str, Iterable[Any]]) -> "LandmarkRegions":
        kwargs: Dict[str, Region] = {}
        for key, points in data.items():
            name = _ALIASES.get(key, key)
            if name not in REGION_NAMES:
                raise RegionError(f"Unknown landmark region: {key}")
            kwargs[name] = to_region(points)
        return LandmarkRegions(**kwargs)

    def as_dict(self) -> Dict[str, List[List[float]]]:
        return {name: [[p.x, p.y] for p in getattr(self, name)] for name in REGION_NAMES}

    @property
    def point_count(self) -> int:
        return sum(len(getattr(self, name)) for name in REGION_NAMES)

    @property
    def is_empty(self) -> bool:
        return self.point_count == 0


# ----------------------------------------------------------------------------
# Index layout
# ----------------------------------------------------------------------------

@dataclass(frozen=True)
class EyeLayout:
    # Six-point eye contour: corners at outer/inner, two upper and two lower lid points.
    outer: int = 0
    upper_outer: int = 1
    upper_inner: int = 2
    inner: int = 3
    lower_inner: int = 4
    lower_outer: int = 5
    min_points: int = 6


@dataclass(frozen=True)
class OuterLipsLayout:
    left_corner: int = 0
    top_center: int = 3
    right_corner: int = 6
    bottom_center: int = 9
    min_points: int = 12


@dataclass(frozen=True)
class InnerLipsLayout:
    top_center: int = 0
    bottom_center: int = 3
    min_points: int = 6


def _layout_from(cls, values: Dict[str, Any]):
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigError(f"Unknown {cls.__name__} fields: {unknown}")
    try:
        layout = cls(**{k: int(v) for k, v in values.items()})
    except (TypeError, ValueError):
        raise ConfigError(f"{cls.__name__} indices must be integers") from None
    for f in fields(layout):
        if f.name == "min_points":
            continue
        idx = getattr(layout, f.name)
        if idx < 0 or idx >= layout.min_points:
            raise ConfigError(
                f"{cls.__name__}.{f.name}={idx} must be in [0, min_points={layout.min_points})"
            )
    return layout


@dataclass(frozen=True)
class RegionLayout:
    eye: EyeLayout = field(default_factory=EyeLayout)
    outer_lips: OuterLipsLayout = field(default_factory=OuterLipsLayout)
    inner_lips: InnerLipsLayout = field(default_factory=InnerLipsLayout)

    @staticmethod
    def from_config(cfg: Dict[str, Any] | None) -> "RegionLayout":
        return RegionLayout(
            eye=_layout_from(EyeLayout, section(cfg, "layout", "eye")),
            outer_lips=_layout_from(OuterLipsLayout, section(cfg, "layout", "outer_lips")),
            inner_lips=_layout_from(InnerLipsLayout, section(cfg, "layout", "inner_lips")),
        )


# ----------------------------------------------------------------------------
# MediaPipe Face Mesh (468 / 478 points) -> regions, ordered to match the layout above
# ----------------------------------------------------------------------------

FACE_MESH_REGIONS: Dict[str, List[int]] = {
    # outer, upper_outer, upper_inner, inner, lower_inner, lower_outer
    "eye_left": [33, 160, 158, 133, 153, 144],
    "eye_right": [263, 387, 385, 362, 380, 373],
    "brow_left": [70, 63, 105, 66, 107, 55, 65, 52, 53, 46],
    "brow_right": [300, 293, 334, 296, 336, 285, 295, 282, 283, 276],
    # left corner, upper lip to right corner, lower lip back
    "outer_lips": [61, 40, 37, 0, 267, 270, 291, 321, 314, 17, 84, 91],
    # top center, right side, bottom center, left side
    "inner_lips": [13, 311, 308, 14, 78, 81],
    "nose": [168, 6, 197, 195, 5, 4, 1, 19, 94, 2, 98, 327],
    "face_contour": [
        10, 338, 297, 332, 284, 251, 389, 356, 454, 323, 361, 288,
        397, 365, 379, 378, 400, 377, 152, 148, 176, 149, 150, 136,
        172, 58, 132, 93, 234, 127, 162, 21, 54, 103, 67, 109,
    ],
}

FACE_MESH_POINTS = 468


def regions_from_face_mesh(
    landmarks: Sequence[Any], image_width: float = 1.0, image_height: float = 1.0
) -> LandmarkRegions:
    """
    Slice a Face Mesh landmark list into named regions.

    Items may expose .x/.y (MediaPipe NormalizedLandmark) or be (x, y) pairs.
    Normalized coordinates are scaled by the image size so the output is in pixels.
    """
    if len(landmarks) < FACE_MESH_POINTS:
        raise RegionError(
            f"Face Mesh output needs at least {FACE_MESH_POINTS} points, got {len(landmarks)}"
        )

    def _scaled(idx: int) -> Point:
        p = to_point(landmarks[idx])
        return Point(p.x * image_width, p.y * image_height)

    return LandmarkRegions(
        **{name: tuple(_scaled(i) for i in idxs) for name, idxs in FACE_MESH_REGIONS.items()}
    )
