from __future__ import annotations

from typing import Dict, Sequence, Tuple

from facehealth.model.health_indicators import HealthIndicators


# (lower bound, label), highest band first; the last label catches everything below.
Bands = Sequence[Tuple[float, str]]

ALERTNESS_BANDS: Bands = ((80, "Very Alert"), (60, "Alert"), (40, "Moderate"), (20, "Tired"), (0, "Fatigued"))
TENSION_BANDS: Bands = ((80, "Very Tense"), (60, "Tense"), (40, "Moderate"), (20, "Relaxed"), (0, "Very Relaxed"))
MOOD_BANDS: Bands = ((80, "Very Happy"), (60, "Happy"), (40, "Neutral"), (20, "Unhappy"), (0, "Very Unhappy"))
SYMMETRY_BANDS: Bands = ((90, "Excellent"), (75, "Good"), (60, "Moderate"), (0, "Asymmetric"))
RELIABILITY_BANDS: Bands = ((80, "High Quality"), (60, "Good Quality"), (40, "Moderate Quality"), (0, "Low Quality"))


def band(score: float, bands: Bands) -> str:
    for lower, label in bands:
        if score >= lower:
            return label
    return bands[-1][1]


def describe(indicators: HealthIndicators) -> Dict[str, str]:
    return {
        "alertness": band(indicators.alertness_score, ALERTNESS_BANDS),
        "tension": band(indicators.tension_score, TENSION_BANDS),
        "mood": band(indicators.smile_score, MOOD_BANDS),
        "symmetry": band(indicators.facial_symmetry, SYMMETRY_BANDS),
        "reliability": band(indicators.capture_reliability_score, RELIABILITY_BANDS),
    }
