"""
pose_utils.py - Shared landmark types and geometry used by every analyzer.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .base_analyzer import CameraView

NUM_LANDMARKS = 33

LANDMARK_NAMES = [
    "nose", "left_eye_inner", "left_eye", "left_eye_outer",
    "right_eye_inner", "right_eye", "right_eye_outer", "left_ear",
    "right_ear", "mouth_left", "mouth_right", "left_shoulder",
    "right_shoulder", "left_elbow", "right_elbow", "left_wrist",
    "right_wrist", "left_pinky", "right_pinky", "left_index",
    "right_index", "left_thumb", "right_thumb", "left_hip",
    "right_hip", "left_knee", "right_knee", "left_ankle",
    "right_ankle", "left_heel", "right_heel", "left_foot_index",
    "right_foot_index"
]

# Keypoint indices (y grows downward)
NOSE = 0
LEFT_EYE = 2
LEFT_EAR = 7
RIGHT_EAR = 8
LEFT_SHOULDER = 11
RIGHT_SHOULDER = 12
LEFT_ELBOW = 13
RIGHT_ELBOW = 14
LEFT_WRIST = 15
RIGHT_WRIST = 16
LEFT_HIP = 23
RIGHT_HIP = 24
LEFT_KNEE = 25
RIGHT_KNEE = 26
LEFT_ANKLE = 27
RIGHT_ANKLE = 28
LEFT_HEEL = 29
RIGHT_HEEL = 30
LEFT_FOOT_INDEX = 31
RIGHT_FOOT_INDEX = 32


@dataclass(frozen=True)
class PoseLandmark:
    """One normalized keypoint. x/y are image-relative, z is roughly hip-relative."""
    x: float
    y: float
    z: float = 0.0
    visibility: float = 1.0


Landmarks = Sequence[PoseLandmark]


def has_full_pose(landmarks: Optional[Landmarks]) -> bool:
    """True when the frame carries the complete 33-point topology."""
    return landmarks is not None and len(landmarks) >= NUM_LANDMARKS


# --- Math & Geometry Utilities ---
def angle_at(a: PoseLandmark, b: PoseLandmark, c: PoseLandmark) -> float:
    """
    Unsigned angle in degrees at vertex ``b`` formed by rays to ``a`` and ``c``.

    Uses the difference of the two ray headings in the image plane, folded into
    [0, 180]. Coincident points and non-finite input give 0.0.

    Args:
        a: First point (e.g. shoulder for the elbow angle)
        b: Vertex point (e.g. elbow)
        c: Last point (e.g. wrist)
    Returns:
        Angle in degrees in [0, 180]
    """
    ba = (a.x - b.x, a.y - b.y)
    bc = (c.x - b.x, c.y - b.y)
    if (ba[0] == 0 and ba[1] == 0) or (bc[0] == 0 and bc[1] == 0):
        return 0.0
    radians = np.arctan2(bc[1], bc[0]) - np.arctan2(ba[1], ba[0])
    angle = float(np.abs(np.degrees(radians)))
    if not np.isfinite(angle):
        return 0.0
    if angle > 180.0:
        angle = 360.0 - angle
    return angle


def point(x: float, y: float) -> PoseLandmark:
    """Virtual reference point, e.g. a spot straight above a joint."""
    return PoseLandmark(x=x, y=y)


def mid_x(landmarks: Landmarks, left: int, right: int) -> float:
    return (landmarks[left].x + landmarks[right].x) / 2


def mid_y(landmarks: Landmarks, left: int, right: int) -> float:
    return (landmarks[left].y + landmarks[right].y) / 2


def average_angle(landmarks: Landmarks, left: Tuple[int, int, int], right: Tuple[int, int, int]) -> float:
    """Mean of the same joint angle measured on both sides of the body."""
    left_angle = angle_at(*(landmarks[i] for i in left))
    right_angle = angle_at(*(landmarks[i] for i in right))
    return (left_angle + right_angle) / 2


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


# --- View Detection ---
def detect_view(landmarks: Landmarks, front_max_ratio: float = 0.5, side_min_ratio: float = 1.5):
    """
    Classify the camera angle from the shoulder plane.

    Compares shoulder depth separation against width separation. A zero width
    separation means the shoulders are stacked, which is a side view.
    """
    if not has_full_pose(landmarks):
        return CameraView.UNKNOWN
    left = landmarks[LEFT_SHOULDER]
    right = landmarks[RIGHT_SHOULDER]
    x_diff = abs(left.x - right.x)
    z_diff = abs(left.z - right.z)
    if x_diff == 0:
        return CameraView.SIDE
    ratio = z_diff / x_diff
    if ratio < front_max_ratio:
        return CameraView.FRONT
    if ratio > side_min_ratio:
        return CameraView.SIDE
    return CameraView.FORTY_FIVE


# --- Input Adapters ---
def _landmark_from_raw(raw: Any) -> PoseLandmark:
    if isinstance(raw, PoseLandmark):
        return raw
    if isinstance(raw, dict):
        try:
            return PoseLandmark(
                x=float(raw["x"]),
                y=float(raw["y"]),
                z=float(raw.get("z", 0.0)),
                visibility=float(raw.get("visibility", 1.0)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid landmark {raw!r}: {e}") from e
    if isinstance(raw, (list, tuple)) and len(raw) == 4:
        try:
            x, y, z, visibility = (float(v) for v in raw)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid landmark {raw!r}: {e}") from e
        return PoseLandmark(x=x, y=y, z=z, visibility=visibility)
    raise ValueError(f"Invalid landmark {raw!r}: expected [x, y, z, visibility]")


def landmarks_from_rows(rows: Iterable[Any]) -> List[PoseLandmark]:
    """Build a frame from ``[x, y, z, visibility]`` rows or ``{x, y, z, visibility}`` dicts."""
    return [_landmark_from_raw(row) for row in rows]


def landmarks_from_dict(landmarks: Dict[str, List[float]]) -> List[PoseLandmark]:
    """
    Build an ordered frame from a name-keyed landmark dict.

    Detectors drop keypoints below their visibility floor, so a dict with any
    of the 33 names missing yields an empty frame.
    """
    if any(name not in landmarks for name in LANDMARK_NAMES):
        return []
    return [_landmark_from_raw(landmarks[name]) for name in LANDMARK_NAMES]


def rotate_landmarks(landmarks: Landmarks) -> List[PoseLandmark]:
    """Rotate a portrait-sensor frame 90 degrees into display orientation."""
    return [
        PoseLandmark(x=1 - lm.y, y=lm.x, z=lm.z, visibility=lm.visibility)
        for lm in landmarks
    ]
