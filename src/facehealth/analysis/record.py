from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from facehealth.capture.quality import CaptureMetadata
from facehealth.features.blend_shapes import BlendShapes
from facehealth.features.feature_vector import FeatureVector
from facehealth.model.health_indicators import HealthIndicators
from facehealth.model.signals import AnalysisMode

ANALYSIS_VERSION = "1.0"


@dataclass(frozen=True)
class FacialMetrics:
    """
    Everything one capture produced. Built once per capture and never mutated.
    The timestamp comes from the caller; analysis itself never reads the clock.
    """
    features: FeatureVector
    indicators: HealthIndicators
    metadata: CaptureMetadata = field(default_factory=CaptureMetadata)
    analysis_mode: AnalysisMode = AnalysisMode.GEOMETRY
    blend_shapes: Optional[BlendShapes] = None
    captured_at: Optional[datetime] = None
    analysis_version: str = ANALYSIS_VERSION

    def as_dict(self) -> Dict[str, Any]:
        return {
            "captured_at": self.captured_at.isoformat() if self.captured_at else None,
            "analysis_version": self.analysis_version,
            "analysis_mode": self.analysis_mode.value,
            "features": self.features.as_dict(),
            "blend_shapes": self.blend_shapes.as_dict() if self.blend_shapes is not None else None,
            "indicators": self.indicators.as_dict(),
            "metadata": self.metadata.as_dict(),
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "FacialMetrics":
        captured_at = data.get("captured_at")
        blend = data.get("blend_shapes")
        return FacialMetrics(
            features=FeatureVector.from_dict(data.get("features", {})),
            indicators=HealthIndicators.from_dict(data.get("indicators", {})),
            metadata=CaptureMetadata.from_dict(data.get("metadata", {})),
            analysis_mode=AnalysisMode(data.get("analysis_mode", AnalysisMode.GEOMETRY.value)),
            blend_shapes=BlendShapes.from_mapping(blend) if blend is not None else None,
            captured_at=datetime.fromisoformat(captured_at) if captured_at else None,
            analysis_version=str(data.get("analysis_version", ANALYSIS_VERSION)),
        )
