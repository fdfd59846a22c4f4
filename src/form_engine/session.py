"""
session.py - Offline analysis of a recorded landmark stream.

A recording is JSON of the form::

    {"exercise": "Squat",
     "frames": [{"timestamp": 0, "landmarks": [[x, y, z, visibility], ...]}, ...]}

Landmarks may also be ``{x, y, z, visibility}`` objects or a dict keyed by
landmark name. Timestamps are milliseconds on the video's own timeline.
"""
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from .exercise_analysis.base_analyzer import ExerciseType, Feedback, RepTimestamp
from .exercise_analysis.config_utils import get_logger
from .exercise_analysis.pose_utils import (PoseLandmark, has_full_pose, landmarks_from_dict,
                                           landmarks_from_rows, rotate_landmarks)
from .rule_engine import GeometricRuleEngine

logger = get_logger("SessionReplay")


@dataclass
class RecordedFrame:
    timestamp: float
    landmarks: List[PoseLandmark]


@dataclass
class SessionSummary:
    exercise: ExerciseType
    detected_exercise: Optional[ExerciseType]
    final_rep_count: int
    rep_timestamps: List[RepTimestamp]
    frames_analyzed: int
    frames_without_pose: int
    average_score: float
    feedback: List[Feedback] = field(default_factory=list)


def _parse_frame(raw: Dict[str, Any], index: int) -> RecordedFrame:
    if not isinstance(raw, dict) or "timestamp" not in raw:
        raise ValueError(f"Frame {index} has no timestamp")
    landmarks = raw.get("landmarks") or []
    if isinstance(landmarks, dict):
        parsed = landmarks_from_dict(landmarks)
    else:
        parsed = landmarks_from_rows(landmarks)
    return RecordedFrame(timestamp=float(raw["timestamp"]), landmarks=parsed)


def parse_recording(data: Dict[str, Any]) -> List[RecordedFrame]:
    frames = data.get("frames") if isinstance(data, dict) else None
    if not isinstance(frames, list):
        raise ValueError("Recording has no 'frames' list")
    return [_parse_frame(raw, i) for i, raw in enumerate(frames)]


def load_recording(path: str) -> Dict[str, Any]:
    """
    Read a recording file.

    Returns:
        Dict with ``exercise`` (ExerciseType or None) and ``frames``
    """
    with open(path, "r") as f:
        data = json.load(f)
    exercise = data.get("exercise") if isinstance(data, dict) else None
    return {
        "exercise": ExerciseType.from_name(exercise) if exercise else None,
        "frames": parse_recording(data),
    }


def resample_frames(frames: List[RecordedFrame], interval_ms: float) -> List[RecordedFrame]:
    """Keep the first frame of every ``interval_ms`` window."""
    if interval_ms <= 0:
        raise ValueError(f"Sampling interval must be positive, got {interval_ms}")
    sampled = []
    next_time = None
    for frame in frames:
        if next_time is None or frame.timestamp >= next_time:
            sampled.append(frame)
            next_time = frame.timestamp + interval_ms
    return sampled


def analyze_recording(frames: List[RecordedFrame], exercise: Any = ExerciseType.AUTO_DETECT,
                      engine: Optional[GeometricRuleEngine] = None,
                      rotate: bool = False) -> SessionSummary:
    """
    Replay recorded frames through the engine on the recording's own timeline.

    Args:
        frames: Frames in timestamp order
        exercise: Exercise to analyze, Auto-Detect by default
        engine: Engine to reuse; a fresh one is built when omitted
        rotate: Rotate portrait-sensor landmarks before analysis
    """
    exercise = ExerciseType.from_name(exercise)
    if engine is None:
        engine = GeometricRuleEngine(exercise=exercise)
    else:
        engine.set_exercise(exercise)
    engine.set_recording_start_time(0)

    feedback = []
    missing = 0
    for frame in frames:
        landmarks = frame.landmarks
        if not has_full_pose(landmarks):
            missing += 1
            logger.warning(f"No usable pose at {frame.timestamp:.0f}ms, skipping frame")
            continue
        if rotate:
            landmarks = rotate_landmarks(landmarks)
        feedback.append(engine.analyze_frame(landmarks, frame.timestamp))

    # status placeholders ("Scanning...", "Detecting X...") carry no score
    scored = [fb.score for fb in feedback if not fb.rep_phase.endswith("...")]
    detected = next((fb.detected_exercise for fb in reversed(feedback)
                     if fb.detected_exercise is not None), None)
    return SessionSummary(
        exercise=exercise,
        detected_exercise=detected,
        final_rep_count=max((fb.reps for fb in feedback), default=0),
        rep_timestamps=engine.get_rep_timestamps(),
        frames_analyzed=len(feedback),
        frames_without_pose=missing,
        average_score=round(float(np.mean(scored)), 1) if scored else 0.0,
        feedback=feedback,
    )


def build_upload_payload(summary: SessionSummary) -> Dict[str, Any]:
    """Form fields that accompany the video upload for deep analysis."""
    exercise = summary.detected_exercise or summary.exercise
    return {
        "exercise_name": exercise.value,
        "rep_count": int(summary.final_rep_count),
        "rep_timestamps": json.dumps([ts.to_dict() for ts in summary.rep_timestamps]),
    }
