import argparse
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from facehealth.analysis.pipeline import FaceAnalyzer
from facehealth.analysis.record import FacialMetrics
from facehealth.capture.quality import CaptureContext
from facehealth.config import load_yaml
from facehealth.features.feature_vector import HeadPose
from facehealth.features.regions import LandmarkRegions
from facehealth.model.interpretation import describe


def _captured_at(raw: Any) -> Optional[datetime]:
    if raw is None or isinstance(raw, datetime):
        return raw
    return datetime.fromisoformat(str(raw))


def _capture(data: Dict[str, Any]) -> Optional[CaptureContext]:
    image = data.get("image")
    box = data.get("face_box")
    if not image or not box:
        return None
    return CaptureContext(
        image_width=float(image["width"]),
        image_height=float(image["height"]),
        face_width=float(box["width"]),
        face_height=float(box["height"]),
        face_x=float(box.get("x", 0.0)),
        face_y=float(box.get("y", 0.0)),
        confidence=float(data.get("confidence", 1.0)),
        landmark_count=int(data.get("landmark_count", 0)),
    )


def analyze_capture(data: Dict[str, Any], cfg: Dict[str, Any]) -> FacialMetrics:
    regions = LandmarkRegions.from_mapping(data.get("regions") or {})
    blend = data.get("blend_shapes") or {}
    pose_cfg = data.get("head_pose") or {}
    head_pose = HeadPose(
        pitch=float(pose_cfg.get("pitch", 0.0)),
        yaw=float(pose_cfg.get("yaw", 0.0)),
        roll=float(pose_cfg.get("roll", 0.0)),
    )
    capture = _capture(data)
    captured_at = _captured_at(data.get("captured_at"))
    analyzer = FaceAnalyzer(cfg)

    if blend:
        return analyzer.analyze_blend_shapes(
            blend, capture=capture, regions=regions, head_pose=head_pose, captured_at=captured_at
        )
    if regions.is_empty:
        raise SystemExit("Input has neither landmark regions nor blend shapes")
    if capture is None:
        raise SystemExit("Landmark input needs 'image' and 'face_box' sizes")
    return analyzer.analyze_landmarks(
        regions, capture, head_pose=head_pose, captured_at=captured_at
    )


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="facehealth")
    parser.add_argument(
        "command",
        choices=["score", "describe"],
        help="Score a capture, or print the score labels",
    )
    parser.add_argument(
        "--input",
        required=True,
        help="Path to capture YAML/JSON (regions and/or blend_shapes)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config YAML (defaults built in)",
    )
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    cfg = load_yaml(Path(args.config)) if args.config else {}
    data = load_yaml(Path(args.input))
    metrics = analyze_capture(data, cfg)

    if args.command == "score":
        print(json.dumps(metrics.as_dict(), indent=2, sort_keys=True))
    elif args.command == "describe":
        print(json.dumps(describe(metrics.indicators), indent=2))


if __name__ == "__main__":
    main()
