"""
squat.py - Squat analysis with view-aware pillar rules and quality flags.
"""
from typing import Any, Dict, List, Optional, Tuple

from ..base_analyzer import CameraView, ExerciseType, Pillar, RepPhase
from ..biomechanics import PillarContext
from ..exercise_analyzer import ExerciseAnalyzer, ExerciseProfile, Measurement, MessageContext
from ..pose_utils import (LEFT_ANKLE, LEFT_HEEL, LEFT_HIP, LEFT_KNEE, LEFT_SHOULDER, RIGHT_ANKLE,
                          RIGHT_EAR, RIGHT_FOOT_INDEX, RIGHT_HEEL, RIGHT_HIP, RIGHT_KNEE,
                          RIGHT_SHOULDER, Landmarks, angle_at, clamp, mid_y, point)
from ..registry import register_analyzer

KNEE_VALGUS = "Knee Valgus"
PARTIAL_DEPTH = "Partial Depth"
BUTT_WINK = "Butt Wink"
GOOD_MORNING = "Good Morning Pattern"
LIMITED_ANKLE_MOBILITY = "Limited Ankle Mobility"


# --- Geometry checks ---
def torso_lean(lm: Landmarks) -> float:
    """Torso angle from vertical, measured at the hip."""
    hip = lm[RIGHT_HIP]
    return angle_at(point(hip.x, hip.y - 0.2), hip, lm[RIGHT_SHOULDER])


def check_valgus(lm: Landmarks) -> float:
    knee_width = abs(lm[LEFT_KNEE].x - lm[RIGHT_KNEE].x)
    ankle_width = abs(lm[LEFT_ANKLE].x - lm[RIGHT_ANKLE].x)
    hip_width = abs(lm[LEFT_HIP].x - lm[RIGHT_HIP].x)
    if knee_width < ankle_width * 0.75:
        return 40
    if knee_width < ankle_width * 0.85:
        return 60
    if knee_width < hip_width * 0.85:
        return 75
    return 100


def check_midfoot_balance(lm: Landmarks) -> float:
    midfoot = (lm[RIGHT_HEEL].x + lm[RIGHT_FOOT_INDEX].x) / 2
    deviation = abs(lm[RIGHT_HIP].x - midfoot)
    if deviation > 0.1:
        return 60
    if deviation > 0.05:
        return 80
    return 100


def check_depth(lm: Landmarks) -> float:
    # positive once the hip crease drops below the knee
    depth = lm[RIGHT_HIP].y - lm[RIGHT_KNEE].y
    if depth >= 0.02:
        return 100
    if depth >= -0.02:
        return 90
    if depth >= -0.05:
        return 70
    return 50


def check_symmetry(lm: Landmarks) -> float:
    tilt = max(abs(lm[LEFT_SHOULDER].y - lm[RIGHT_SHOULDER].y),
               abs(lm[LEFT_HIP].y - lm[RIGHT_HIP].y))
    if tilt > 0.05:
        return 70
    if tilt > 0.03:
        return 85
    return 100


def check_torso_angle(lm: Landmarks) -> float:
    lean = torso_lean(lm)
    if lean > 65:
        return 40
    if lean > 55:
        return 60
    if lean < 15:
        return 70
    return 100


def check_butt_wink(lm: Landmarks, view: CameraView) -> bool:
    if view == CameraView.FRONT:
        return False
    hip_flexion = angle_at(lm[RIGHT_SHOULDER], lm[RIGHT_HIP], lm[RIGHT_KNEE])
    return hip_flexion < 50 and torso_lean(lm) > 55


def check_good_morning(lm: Landmarks) -> float:
    lean = torso_lean(lm)
    if lean > 60:
        return 40
    if lean > 50:
        return 70
    return 100


# --- Pillars ---
def _stability(ctx: PillarContext) -> float:
    if ctx.view == CameraView.FRONT:
        return check_valgus(ctx.landmarks)
    if ctx.view == CameraView.SIDE:
        return check_midfoot_balance(ctx.landmarks)
    return 100


def _rom(ctx: PillarContext) -> float:
    return check_depth(ctx.landmarks)


def _posture(ctx: PillarContext) -> float:
    if ctx.view == CameraView.FRONT:
        return check_symmetry(ctx.landmarks)
    return check_torso_angle(ctx.landmarks)


def _efficiency(ctx: PillarContext) -> float:
    if ctx.view != CameraView.SIDE:
        return 100
    if ctx.phase in (RepPhase.BOTTOM, RepPhase.ECCENTRIC):
        knee_travel = abs(ctx.landmarks[RIGHT_KNEE].x - ctx.landmarks[RIGHT_ANKLE].x)
        if knee_travel > 0.15:
            return 70
    return 100


def _bracing(ctx: PillarContext) -> float:
    if ctx.view == CameraView.FRONT:
        return 100
    lm = ctx.landmarks
    deviation = abs(180 - angle_at(lm[RIGHT_EAR], lm[RIGHT_SHOULDER], lm[RIGHT_HIP]))
    if deviation > 30:
        return 60
    if deviation > 20:
        return 80
    return 100


def measure_squat(lm: Landmarks, view: CameraView) -> Measurement:
    hip, knee, ankle = lm[RIGHT_HIP], lm[RIGHT_KNEE], lm[RIGHT_ANKLE]
    hip_angle = angle_at(lm[RIGHT_SHOULDER], hip, knee)
    knee_angle = angle_at(hip, knee, ankle)
    ankle_angle = angle_at(knee, ankle, lm[RIGHT_FOOT_INDEX])

    # knee bend and hip drop relative to the knee, weighted toward the drop
    angle_norm = clamp((170 - knee_angle) / 80)
    y_norm = clamp((0.05 - (knee.y - hip.y)) / 0.15 + 0.5)
    completion = angle_norm * 0.4 + y_norm * 0.6
    return Measurement(
        completion=completion,
        joint_angles={"hip": hip_angle, "knee": knee_angle, "ankle": ankle_angle},
    )


SQUAT_PROFILE = ExerciseProfile(
    exercise=ExerciseType.SQUAT,
    measure=measure_squat,
    pillars={
        Pillar.STABILITY: _stability,
        Pillar.ROM: _rom,
        Pillar.POSTURE: _posture,
        Pillar.EFFICIENCY: _efficiency,
        Pillar.BRACING: _bracing,
    },
    phase_labels={
        RepPhase.REST: "Ready",
        RepPhase.TOP: "Standing",
        RepPhase.ECCENTRIC: "Descending",
        RepPhase.BOTTOM: "Hold",
        RepPhase.CONCENTRIC: "Drive Up",
    },
)


@register_analyzer(ExerciseType.SQUAT)
class SquatAnalyzer(ExerciseAnalyzer):
    """
    Squat analyzer.

    On top of the pillar score it raises advisory quality flags. Any flag
    disqualifies the frame from counting as good form.
    """

    def __init__(self, settings: Dict[str, Any]):
        super().__init__(SQUAT_PROFILE, settings)
        self.heel_baseline_frames = settings.get("heel_baseline_frames", 10)
        self.heel_lift_threshold = settings.get("heel_lift_threshold", 0.015)
        self._heel_baseline: Optional[float] = None
        self._frames_since_start = 0

    def reset(self) -> None:
        super().reset()
        self._heel_baseline = None
        self._frames_since_start = 0

    def _heels_lifted(self, lm: Landmarks) -> bool:
        heel_y = mid_y(lm, LEFT_HEEL, RIGHT_HEEL)
        if self._frames_since_start < self.heel_baseline_frames:
            if self._heel_baseline is None:
                self._heel_baseline = heel_y
            else:
                self._heel_baseline = self._heel_baseline * 0.8 + heel_y * 0.2
            self._frames_since_start += 1
            return False
        # y grows downward, a lifted heel sits above its baseline
        return self._heel_baseline - heel_y > self.heel_lift_threshold

    def _corrections(self, ctx: MessageContext) -> Tuple[List[str], List[str]]:
        lm = ctx.landmarks
        messages: List[str] = []
        flags: List[str] = []

        if self._heels_lifted(lm):
            flags.append(LIMITED_ANKLE_MOBILITY)
            if ctx.phase in (RepPhase.ECCENTRIC, RepPhase.BOTTOM):
                messages.append("Heels Down!")

        if ctx.phase in (RepPhase.REST, RepPhase.TOP):
            if ctx.joint_angles["knee"] < 160:
                messages.append("Stand Tall")
        elif ctx.phase == RepPhase.ECCENTRIC:
            if ctx.view == CameraView.FRONT and check_valgus(lm) < 70:
                messages.append("Knees Out!")
                flags.append(KNEE_VALGUS)
            elif ctx.view == CameraView.SIDE and ctx.breakdown.posture < 60:
                messages.append("Chest Up")
        elif ctx.phase == RepPhase.BOTTOM:
            if ctx.breakdown.rom < 100:
                messages.append("Go Deeper")
                flags.append(PARTIAL_DEPTH)
            if check_butt_wink(lm, ctx.view):
                messages.append("Neutral Spine")
                flags.append(BUTT_WINK)
        elif ctx.phase == RepPhase.CONCENTRIC:
            if ctx.view == CameraView.SIDE and check_good_morning(lm) < 70:
                messages.append("Hips & Chest Together")
                flags.append(GOOD_MORNING)
            elif ctx.view == CameraView.FRONT and check_valgus(lm) < 70:
                messages.append("Knees Out!")

        return messages, flags

    def _is_good_form(self, total: float, flags: List[str]) -> bool:
        return total > 80 and not flags
