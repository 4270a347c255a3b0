import math
from pathlib import Path

import pytest

from facehealth.config import ConfigError, load_yaml
from facehealth.features.regions import RegionLayout
from facehealth.model.calibration import Calibration, QualityConfig, ScoringConfig

DEFAULT_CONFIG = Path(__file__).resolve().parents[1] / "configs" / "default.yaml"


def test_default_yaml_matches_builtin_defaults():
    cfg = load_yaml(DEFAULT_CONFIG)
    assert Calibration.from_config(cfg) == Calibration()
    assert ScoringConfig.from_config(cfg) == ScoringConfig()
    assert QualityConfig.from_config(cfg) == QualityConfig()
    assert RegionLayout.from_config(cfg) == RegionLayout()


def test_empty_file_is_empty_config(tmp_path):
    p = tmp_path / "empty.yaml"
    p.write_text("", encoding="utf-8")
    assert load_yaml(p) == {}


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_yaml(tmp_path / "nope.yaml")


def test_top_level_must_be_mapping(tmp_path):
    p = tmp_path / "list.yaml"
    p.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_yaml(p)


def test_window_override():
    cal = Calibration.from_config({"calibration": {"eye": {"ear_window": [0.15, 0.35]}}})
    assert cal.eye.ear_window == (0.15, 0.35)
    assert cal.brow == Calibration().brow


@pytest.mark.parametrize(
    "cfg",
    [
        {"calibration": {"eye": {"ear_window": [0.4, 0.1]}}},
        {"calibration": {"brow": {"raise_window": [0.05]}}},
        {"calibration": {"eye": {"squint_low": 0.8, "squint_high": 0.7}}},
        {"calibration": {"mouth": {"smile_lift": 0}}},
        {"calibration": "not a mapping"},
    ],
)
def test_invalid_calibration(cfg):
    with pytest.raises(ConfigError):
        Calibration.from_config(cfg)


@pytest.mark.parametrize(
    "weights",
    [
        {"no_such_weight": 1.0},
        {"pose_penalty": -1.0},
        {"pose_penalty": "lots"},
    ],
)
def test_invalid_weights(weights):
    with pytest.raises(ConfigError):
        ScoringConfig.from_config({"scoring": {"weights": weights}})


def test_invalid_pose_threshold():
    with pytest.raises(ConfigError):
        ScoringConfig.from_config({"scoring": {"pose_threshold_deg": 0}})


@pytest.mark.parametrize("value", [math.nan, math.inf])
def test_non_finite_values_are_rejected(value):
    with pytest.raises(ConfigError):
        ScoringConfig.from_config({"scoring": {"pose_threshold_deg": value}})
    with pytest.raises(ConfigError):
        ScoringConfig.from_config({"scoring": {"weights": {"alertness_baseline": value}}})
    with pytest.raises(ConfigError):
        Calibration.from_config({"calibration": {"eye": {"ear_window": [0.1, value]}}})
    with pytest.raises(ConfigError):
        QualityConfig.from_config({"quality": {"size_gain": value}})


def test_nan_from_yaml_is_rejected(tmp_path):
    p = tmp_path / "nan.yaml"
    p.write_text("scoring:\n  weights:\n    alertness_baseline: .nan\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        ScoringConfig.from_config(load_yaml(p))
