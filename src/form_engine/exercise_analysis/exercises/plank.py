"""
plank.py - Timed hold analysis. Reps are whole seconds held in good form.
"""
import math
from typing import Any, Dict, List, Optional

from ..base_analyzer import (BaseExerciseAnalyzer, ExerciseType, Feedback, RepTimestamp,
                             ScoreBreakdown, empty_feedback)
from ..biomechanics import weighted_score
from ..pose_utils import (LEFT_ANKLE, LEFT_HIP, LEFT_KNEE, LEFT_SHOULDER, RIGHT_ANKLE, RIGHT_HIP,
                          RIGHT_KNEE, RIGHT_SHOULDER, Landmarks, angle_at, has_full_pose)
from ..rep_counter import now_ms
from ..registry import register_analyzer

HOLDING = "Holding"
NOT_HOLDING = "Rest"


@register_analyzer(ExerciseType.PLANK)
class PlankAnalyzer(BaseExerciseAnalyzer):
    """
    Accumulates hold time while the body line is straight.

    Good form only starts counting once it has been held for the
    stabilization buffer, so a pose that merely passes through a straight
    line is not credited. Breaking form drops the buffer.
    """

    exercise = ExerciseType.PLANK

    def __init__(self, settings: Dict[str, Any]):
        super().__init__()
        self.weights = settings["weights"]
        self.stabilize_seconds = settings.get("stabilize_seconds", 0.5)
        self.reset()

    def reset(self) -> None:
        self.accumulated_seconds = 0.0
        self.is_holding = False
        self._stable_seconds = 0.0
        self._last_frame_time: Optional[float] = None

    def set_elapsed_time(self, seconds: float) -> None:
        """Credit hold time already observed elsewhere (e.g. during auto-detection)."""
        self.accumulated_seconds = seconds
        self.is_holding = True

    def get_rep_timestamps(self) -> List[RepTimestamp]:
        return []

    def analyze(self, landmarks: Landmarks, timestamp: Optional[float] = None) -> Feedback:
        if not has_full_pose(landmarks):
            return empty_feedback()
        if timestamp is None:
            timestamp = now_ms()
        delta = 0.0
        if self._last_frame_time is not None:
            delta = max(0.0, (timestamp - self._last_frame_time) / 1000)
        self._last_frame_time = timestamp

        # use the side facing the camera
        if landmarks[LEFT_HIP].visibility > landmarks[RIGHT_HIP].visibility:
            shoulder, hip, knee, ankle = (landmarks[i] for i in (LEFT_SHOULDER, LEFT_HIP, LEFT_KNEE, LEFT_ANKLE))
        else:
            shoulder, hip, knee, ankle = (landmarks[i] for i in (RIGHT_SHOULDER, RIGHT_HIP, RIGHT_KNEE, RIGHT_ANKLE))

        hip_angle = angle_at(shoulder, hip, knee)
        knee_angle = angle_at(hip, knee, ankle)

        good_form = True
        message = "Hold position"
        correction = None
        if hip_angle < 165:
            good_form = False
            message, correction = "Hips too high", "Lower hips to form straight line"
        if hip.y > (shoulder.y + knee.y) / 2 + 0.05:
            good_form = False
            message, correction = "Hips sagging", "Lift hips & squeeze glutes"
        if knee_angle < 160:
            good_form = False
            message, correction = "Legs bent", "Straighten your legs"

        if good_form:
            self._stable_seconds += delta
            if self._stable_seconds > self.stabilize_seconds:
                self.is_holding = True
                self.accumulated_seconds += delta
                message = "Good Plank! Hold it!"
            else:
                message = "Stabilizing..."
        else:
            self.is_holding = False
            self._stable_seconds = 0.0

        breakdown = ScoreBreakdown(
            stability=100.0 if good_form else 50.0,
            rom=100.0,
            posture=max(0.0, 1 - abs(180 - hip_angle) / 40) * 100,
            efficiency=100.0,
            bracing=100.0,
        )
        breakdown.total = weighted_score(breakdown, self.weights)
        return Feedback(
            score=breakdown.total,
            breakdown=breakdown,
            reps=math.floor(self.accumulated_seconds),
            rep_phase=HOLDING if self.is_holding else NOT_HOLDING,
            message=message,
            correction=correction,
            is_good_form=good_form,
            joint_angles={"hip": hip_angle, "knee": knee_angle},
        )
