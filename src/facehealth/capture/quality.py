from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from facehealth.features.geometry import clamp
from facehealth.model.calibration import QualityConfig


@dataclass(frozen=True)
class CaptureMetadata:
    """Provenance of one capture (read-only, passed through to the record)."""
    image_width: int = 0
    image_height: int = 0
    face_width: float = 0.0
    face_height: float = 0.0
    landmark_count: int = 0

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "CaptureMetadata":
        return CaptureMetadata(
            image_width=int(data.get("image_width", 0)),
            image_height=int(data.get("image_height", 0)),
            face_width=float(data.get("face_width", 0.0)),
            face_height=float(data.get("face_height", 0.0)),
            landmark_count=int(data.get("landmark_count", 0)),
        )


@dataclass(frozen=True)
class CaptureContext:
    """
    What the detector reports about the frame, in pixels.
    Face box origin is its top-left corner.
    """
    image_width: float
    image_height: float
    face_width: float
    face_height: float
    face_x: float = 0.0
    face_y: float = 0.0
    confidence: float = 1.0
    landmark_count: int = 0

    @staticmethod
    def centered(
        image_width: float,
        image_height: float,
        face_width: float,
        face_height: float,
        **kwargs: Any,
    ) -> "CaptureContext":
        return CaptureContext(
            image_width=image_width,
            image_height=image_height,
            face_width=face_width,
            face_height=face_height,
            face_x=(image_width - face_width) / 2.0,
            face_y=(image_height - face_height) / 2.0,
            **kwargs,
        )

    @property
    def face_size(self) -> Tuple[float, float]:
        return (self.face_width, self.face_height)

    @property
    def image_size(self) -> Tuple[float, float]:
        return (self.image_width, self.image_height)

    @property
    def face_area_fraction(self) -> float:
        image_area = self.image_width * self.image_height
        if not image_area > 0:
            return 0.0
        return max(self.face_width * self.face_height / image_area, 0.0)

    @property
    def face_center_offset(self) -> Tuple[float, float]:
        """Face center relative to the image center; 0 is centered, +/-1 is the frame edge."""
        if not (self.image_width > 0 and self.image_height > 0):
            return (1.0, 1.0)
        cx = (self.face_x + self.face_width / 2.0) / self.image_width
        cy = (self.face_y + self.face_height / 2.0) / self.image_height
        return ((cx - 0.5) * 2.0, (cy - 0.5) * 2.0)

    def metadata(self) -> CaptureMetadata:
        return CaptureMetadata(
            image_width=int(self.image_width),
            image_height=int(self.image_height),
            face_width=float(self.face_width),
            face_height=float(self.face_height),
            landmark_count=int(self.landmark_count),
        )

    def quality(self, cfg: Optional[Dict[str, Any]] = None) -> float:
        return capture_quality(
            self.face_size,
            self.image_size,
            self.confidence,
            self.face_center_offset,
            cfg=cfg,
        )


def _finite_or(value: float, fallback: float) -> float:
    return value if math.isfinite(value) else fallback


def capture_quality(
    face_box_size: Tuple[float, float],
    image_size: Tuple[float, float],
    detector_confidence: float,
    face_center_offset: Tuple[float, float],
    *,
    cfg: Optional[Dict[str, Any]] = None,
) -> float:
    """
    Reliability of a single capture in [0, 1]: equal parts face size,
    centering and detector confidence.
    """
    q_cfg = QualityConfig.from_config(cfg)

    face_area = float(face_box_size[0]) * float(face_box_size[1])
    image_area = float(image_size[0]) * float(image_size[1])
    size_score = 0.0
    if image_area > 0:
        size_score = clamp(_finite_or(face_area / image_area * q_cfg.size_gain, 0.0))

    dx, dy = (abs(_finite_or(float(v), 1.0)) for v in face_center_offset)
    position_score = clamp(1.0 - (dx + dy) / 2.0)

    confidence_score = clamp(_finite_or(float(detector_confidence), 0.0))

    return (size_score + position_score + confidence_score) / 3.0
