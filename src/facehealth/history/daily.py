from __future__ import annotations

from typing import Iterable, List

import pandas as pd

from facehealth.analysis.record import FacialMetrics
from facehealth.history.schema import CaptureSchema, flatten_record


# Order of the regression feature row; head pose is mapped from [-45, 45] degrees to [0, 1].
MODEL_FEATURE_NAMES = [
    "eye_openness_left", "eye_openness_right",
    "eye_blink_left", "eye_blink_right",
    "eye_squint_left", "eye_squint_right",
    "brow_raise_left", "brow_raise_right", "brow_furrow",
    "smile_left", "smile_right",
    "frown_left", "frown_right",
    "mouth_open", "lip_press",
    "cheek_squint_left", "cheek_squint_right",
    "alertness", "tension", "smile_score", "symmetry",
    "head_pitch", "head_yaw", "head_roll",
]

_POSE_RANGE_DEG = 45.0


def model_feature_row(record: FacialMetrics) -> List[float]:
    f = record.features
    hi = record.indicators
    return [
        f.eye_openness_left, f.eye_openness_right,
        f.eye_blink_left, f.eye_blink_right,
        f.eye_squint_left, f.eye_squint_right,
        f.brow_raise_left, f.brow_raise_right, f.brow_furrow,
        f.smile_left, f.smile_right,
        f.frown_left, f.frown_right,
        f.mouth_open, f.lip_press,
        f.cheek_squint_left, f.cheek_squint_right,
        hi.alertness_score / 100.0,
        hi.tension_score / 100.0,
        hi.smile_score / 100.0,
        hi.facial_symmetry / 100.0,
        (f.head_pitch + _POSE_RANGE_DEG) / (2 * _POSE_RANGE_DEG),
        (f.head_yaw + _POSE_RANGE_DEG) / (2 * _POSE_RANGE_DEG),
        (f.head_roll + _POSE_RANGE_DEG) / (2 * _POSE_RANGE_DEG),
    ]


def records_to_frame(
    records: Iterable[FacialMetrics], schema: CaptureSchema | None = None
) -> pd.DataFrame:
    """One row per capture, columns in schema order."""
    schema = schema or CaptureSchema.default()
    rows = [flatten_record(r, schema) for r in records]
    df = pd.DataFrame(rows, columns=schema.columns)

    for c in schema.numeric_columns:
        df[c] = pd.to_numeric(df[c], errors="coerce")
    for c in ["captured_at", "date", "analysis_version", "analysis_mode"]:
        df[c] = df[c].astype("string")
    return df


def aggregate_by_day(df: pd.DataFrame, schema: CaptureSchema | None = None) -> pd.DataFrame:
    """
    Per-day means of every numeric column plus a capture count.
    Rows without a date are left out.
    """
    schema = schema or CaptureSchema.default()
    if "date" not in df.columns:
        raise ValueError("DataFrame must contain 'date' for daily aggregation")

    numeric = [c for c in schema.numeric_columns if c in df.columns]
    dated = df.dropna(subset=["date"])

    grouped = dated.groupby("date", sort=True)
    out = grouped[numeric].mean()
    out.insert(0, "captures", grouped.size())
    return out.reset_index()
