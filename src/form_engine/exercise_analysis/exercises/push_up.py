from typing import List

from ..base_analyzer import CameraView, ExerciseType, Pillar, RepPhase
from ..biomechanics import PillarContext, spine_alignment
from ..exercise_analyzer import ExerciseProfile, Measurement, MessageContext
from ..pose_utils import (LEFT_ELBOW, LEFT_HIP, LEFT_KNEE, LEFT_SHOULDER, LEFT_WRIST, RIGHT_ELBOW,
                          RIGHT_HIP, RIGHT_KNEE, RIGHT_SHOULDER, RIGHT_WRIST, Landmarks,
                          average_angle, clamp)
from ..registry import register_profile


def _bracing(ctx: PillarContext) -> float:
    """Hip line: piking and sagging both leak core tension."""
    hip_angle = average_angle(ctx.landmarks,
                              (LEFT_SHOULDER, LEFT_HIP, LEFT_KNEE),
                              (RIGHT_SHOULDER, RIGHT_HIP, RIGHT_KNEE))
    if hip_angle < 150:
        return 60
    if hip_angle < 165:
        return 80
    if hip_angle > 190:
        return 70
    return 100


def measure_push_up(lm: Landmarks, view: CameraView) -> Measurement:
    elbow = average_angle(lm,
                          (LEFT_SHOULDER, LEFT_ELBOW, LEFT_WRIST),
                          (RIGHT_SHOULDER, RIGHT_ELBOW, RIGHT_WRIST))
    return Measurement(completion=clamp((170 - elbow) / 80), joint_angles={"elbow": elbow})


def push_up_messages(ctx: MessageContext) -> List[str]:
    messages = []
    if ctx.breakdown.bracing < 70:
        messages.append("Tighten Core")
    if ctx.breakdown.posture < 70:
        messages.append("Straight Body")
    if ctx.phase == RepPhase.BOTTOM and ctx.breakdown.rom < 70:
        messages.append("Go Lower")
    return messages


PUSH_UP_PROFILE = register_profile(ExerciseProfile(
    exercise=ExerciseType.PUSH_UP,
    measure=measure_push_up,
    pillars={
        Pillar.POSTURE: spine_alignment,
        Pillar.BRACING: _bracing,
    },
    messages=push_up_messages,
    phase_labels={RepPhase.REST: "Get Set"},
))
