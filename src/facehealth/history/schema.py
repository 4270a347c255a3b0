from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from facehealth.analysis.record import FacialMetrics
from facehealth.features.feature_vector import FeatureVector

INDICATOR_COLUMNS = [
    "alertness_score",
    "tension_score",
    "smile_score",
    "facial_symmetry",
    "capture_reliability_score",
    "overall_score",
]

METADATA_COLUMNS = [
    "image_width",
    "image_height",
    "face_width",
    "face_height",
    "landmark_count",
]


@dataclass(frozen=True)
class CaptureSchema:
    """
    Stable flat-row contract for capture records (derived values only, no images).
    Keep this consistent between history tables and any caller-side export.
    """
    columns: List[str]

    @staticmethod
    def default() -> "CaptureSchema":
        return CaptureSchema(
            columns=[
                # Time
                "captured_at",        # ISO timestamp or None
                "date",               # YYYY-MM-DD (grouping key) or None

                # Provenance
                "analysis_version",   # str
                "analysis_mode",      # geometry | blend_shapes | none

                # Features, indicators, capture metadata
                *FeatureVector.names(),
                *INDICATOR_COLUMNS,
                *METADATA_COLUMNS,
            ]
        )

    @property
    def numeric_columns(self) -> List[str]:
        return [*FeatureVector.names(), *INDICATOR_COLUMNS, *METADATA_COLUMNS]


def make_empty_row(schema: CaptureSchema) -> Dict[str, Any]:
    return {c: None for c in schema.columns}


def flatten_record(record: FacialMetrics, schema: CaptureSchema | None = None) -> Dict[str, Any]:
    schema = schema or CaptureSchema.default()
    row = make_empty_row(schema)
    row.update(
        {
            "captured_at": record.captured_at.isoformat() if record.captured_at else None,
            "date": record.captured_at.strftime("%Y-%m-%d") if record.captured_at else None,
            "analysis_version": record.analysis_version,
            "analysis_mode": record.analysis_mode.value,
        }
    )
    row.update(record.features.as_dict())
    row.update(record.indicators.as_dict())
    row.update(record.metadata.as_dict())
    return row
