"""
russian_twist.py - Counts side-to-side twists from the hands' offset over the hips.
"""
from typing import Any, Dict, List, Optional

from ..base_analyzer import (BaseExerciseAnalyzer, ExerciseType, Feedback, RepTimestamp,
                             ScoreBreakdown, empty_feedback)
from ..biomechanics import weighted_score
from ..pose_utils import (LEFT_HIP, LEFT_SHOULDER, LEFT_WRIST, RIGHT_HIP, RIGHT_SHOULDER,
                          RIGHT_WRIST, Landmarks, has_full_pose, mid_x)
from ..rep_counter import now_ms
from ..registry import register_analyzer

LEFT = "left"
RIGHT = "right"


@register_analyzer(ExerciseType.RUSSIAN_TWIST)
class RussianTwistAnalyzer(BaseExerciseAnalyzer):
    """
    Each reversal of twist direction is one rep.

    A side is reached once the hands move more than ``twist_ratio`` shoulder
    widths off the hip midline. A reversal only counts after the hands have
    crossed the midline and at least ``refractory_ms`` after the last peak.
    """

    exercise = ExerciseType.RUSSIAN_TWIST

    def __init__(self, settings: Dict[str, Any]):
        super().__init__()
        self.weights = settings["weights"]
        self.refractory_ms = settings.get("refractory_ms", 500)
        self.twist_ratio = settings.get("twist_ratio", 0.5)
        self.reset()

    def reset(self) -> None:
        self.count = 0
        self.direction: Optional[str] = None
        self._crossed_center = False
        self._last_offset: Optional[float] = None
        self._last_peak_time: Optional[float] = None
        self._current_mid: Optional[float] = None
        self._timestamps: List[RepTimestamp] = []

    def get_rep_timestamps(self) -> List[RepTimestamp]:
        return list(self._timestamps)

    def analyze(self, landmarks: Landmarks, timestamp: Optional[float] = None) -> Feedback:
        if not has_full_pose(landmarks):
            return empty_feedback()
        if timestamp is None:
            timestamp = now_ms()
        t = timestamp - self.recording_start_time

        offset = mid_x(landmarks, LEFT_WRIST, RIGHT_WRIST) - mid_x(landmarks, LEFT_HIP, RIGHT_HIP)
        threshold = abs(landmarks[LEFT_SHOULDER].x - landmarks[RIGHT_SHOULDER].x) * self.twist_ratio

        if abs(offset) > threshold:
            direction = LEFT if offset > 0 else RIGHT
            if self.direction is None:
                self._last_peak_time = t
            elif (direction != self.direction and self._crossed_center
                    and t - self._last_peak_time > self.refractory_ms):
                self._count_rep(t)
            self.direction = direction

        if self._last_offset is not None and self._last_offset * offset < 0:
            self._crossed_center = True
            self._current_mid = t
        self._last_offset = offset

        breakdown = ScoreBreakdown(stability=100.0, rom=100.0, posture=100.0,
                                   efficiency=100.0, bracing=100.0)
        breakdown.total = weighted_score(breakdown, self.weights)
        if self.direction is None:
            phase = "Rest"
        else:
            phase = f"Twisting {self.direction.capitalize()}"
        return Feedback(
            score=breakdown.total,
            breakdown=breakdown,
            reps=self.count,
            rep_phase=phase,
            message="Twist side to side",
            is_good_form=True,
            joint_angles={"twist_offset": offset},
        )

    def _count_rep(self, t: float) -> None:
        self.count += 1
        start = self._last_peak_time
        if self._current_mid is not None:
            mid = self._current_mid
        else:
            mid = (start + t) // 2
        self._timestamps.append(RepTimestamp(start=start, mid=mid, end=t))
        self._last_peak_time = t
        self._current_mid = None
        self._crossed_center = False
