import json

import pytest
import yaml

from facehealth.cli import main


def _write(tmp_path, name, data):
    p = tmp_path / name
    p.write_text(yaml.safe_dump(data), encoding="utf-8")
    return p


@pytest.fixture
def landmark_input(tmp_path, regions):
    return _write(
        tmp_path,
        "capture.yaml",
        {
            "captured_at": "2026-03-01T08:30:00",
            "image": {"width": 400, "height": 500},
            "face_box": {"x": 100, "y": 125, "width": 200, "height": 250},
            "confidence": 1.0,
            "landmark_count": 76,
            "regions": regions.as_dict(),
        },
    )


def test_score_landmarks(landmark_input, capsys):
    main(["score", "--input", str(landmark_input)])
    out = json.loads(capsys.readouterr().out)

    assert out["analysis_mode"] == "geometry"
    assert out["captured_at"] == "2026-03-01T08:30:00"
    assert out["indicators"]["capture_reliability_score"] == pytest.approx(100.0)
    assert out["features"]["eye_openness_left"] == pytest.approx(2 / 3)


def test_describe_landmarks(landmark_input, capsys):
    main(["describe", "--input", str(landmark_input)])
    out = json.loads(capsys.readouterr().out)

    assert set(out) == {"alertness", "tension", "mood", "symmetry", "reliability"}
    assert out["symmetry"] == "Excellent"
    assert out["reliability"] == "High Quality"


def test_score_blend_shapes_with_config(tmp_path, capsys):
    capture = _write(tmp_path, "blend.yaml", {"blend_shapes": {"eyeBlinkLeft": 0.0}})
    config = _write(tmp_path, "cfg.yaml", {"scoring": {"weights": {"jaw_tension": 60.0}}})

    main(["score", "--input", str(capture), "--config", str(config)])
    out = json.loads(capsys.readouterr().out)

    assert out["analysis_mode"] == "blend_shapes"
    assert out["indicators"]["tension_score"] == pytest.approx(30.0)


def test_empty_input_exits(tmp_path):
    capture = _write(tmp_path, "empty.yaml", {"confidence": 0.9})
    with pytest.raises(SystemExit):
        main(["score", "--input", str(capture)])


def test_landmarks_without_frame_sizes_exit(tmp_path, regions):
    capture = _write(tmp_path, "nosize.yaml", {"regions": regions.as_dict()})
    with pytest.raises(SystemExit):
        main(["score", "--input", str(capture)])
