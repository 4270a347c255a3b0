from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

import pandas as pd


@dataclass(frozen=True)
class HistoryReport:
    rows: int
    missing_rates: Dict[str, float]
    mode_distribution: Dict[str, int]
    low_reliability_rows: int
    warnings: List[str]


def check_history(
    df: pd.DataFrame,
    *,
    columns: List[str] | None = None,
    min_reliability: float = 40.0,
    max_missing_rate: float = 0.2,
    max_low_reliability_rate: float = 0.5,
) -> HistoryReport:
    """
    Basic checks before trusting a capture history.
    - missing rates per column
    - analysis mode distribution
    - how many captures fall below the reliability floor
    """
    warnings: List[str] = []

    if columns is None:
        columns = ["capture_reliability_score", "overall_score"]

    missing_rates: Dict[str, float] = {}
    for c in columns:
        if c not in df.columns:
            missing_rates[c] = 1.0
            warnings.append(f"missing_column:{c}")
            continue
        rate = float(df[c].isna().mean()) if len(df) else 0.0
        missing_rates[c] = rate
        if rate > max_missing_rate:
            warnings.append(f"high_missing_rate:{c}:{rate:.2f}")

    mode_distribution: Dict[str, int] = {}
    if "analysis_mode" in df.columns:
        vc = df["analysis_mode"].value_counts(dropna=False)
        mode_distribution = {str(k): int(v) for k, v in vc.items()}

    low_reliability_rows = 0
    if "capture_reliability_score" in df.columns and len(df):
        low = df["capture_reliability_score"] < min_reliability
        low_reliability_rows = int(low.sum())
        rate = low_reliability_rows / len(df)
        if rate > max_low_reliability_rate:
            warnings.append(f"low_reliability:{rate:.2f}")

    return HistoryReport(
        rows=int(len(df)),
        missing_rates=missing_rates,
        mode_distribution=mode_distribution,
        low_reliability_rows=low_reliability_rows,
        warnings=warnings,
    )
