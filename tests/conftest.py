import pytest

from facehealth.capture.quality import CaptureContext
from facehealth.features.regions import LandmarkRegions

# Synthetic, left/right-symmetric face in face-box pixels (200 wide, 250 tall).
FACE_WIDTH = 200.0
FACE_HEIGHT = 250.0

EYE_LEFT = [(40, 100), (52, 94), (68, 94), (80, 100), (68, 106), (52, 106)]
EYE_RIGHT = [(160, 100), (148, 94), (132, 94), (120, 100), (132, 106), (148, 106)]
BROW_LEFT = [(40, 86), (50, 84), (60, 84), (70, 84), (78, 86)]
BROW_RIGHT = [(160, 86), (150, 84), (140, 84), (130, 84), (122, 86)]
OUTER_LIPS = [
    (70, 190), (77, 185), (88, 182), (100, 183), (112, 182), (123, 185),
    (130, 190), (123, 196), (112, 199), (100, 200), (88, 199), (77, 196),
]
INNER_LIPS = [(100, 189), (110, 190), (120, 190), (100, 193), (80, 190), (90, 190)]
NOSE = [(100, 110), (100, 130), (100, 150), (92, 155), (108, 155)]
FACE_CONTOUR = [(10, 100), (20, 170), (50, 220), (100, 245), (150, 220), (180, 170), (190, 100)]


def neutral_regions() -> LandmarkRegions:
    return LandmarkRegions.from_mapping(
        {
            "eye_left": EYE_LEFT,
            "eye_right": EYE_RIGHT,
            "brow_left": BROW_LEFT,
            "brow_right": BROW_RIGHT,
            "outer_lips": OUTER_LIPS,
            "inner_lips": INNER_LIPS,
            "nose": NOSE,
            "face_contour": FACE_CONTOUR,
        }
    )


@pytest.fixture
def regions() -> LandmarkRegions:
    return neutral_regions()


@pytest.fixture
def capture() -> CaptureContext:
    # face covers exactly 25% of an 400x500 frame, dead center
    return CaptureContext.centered(
        400.0, 500.0, FACE_WIDTH, FACE_HEIGHT, confidence=1.0, landmark_count=76
    )
