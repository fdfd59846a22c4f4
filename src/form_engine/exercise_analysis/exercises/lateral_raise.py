from typing import List

from ..base_analyzer import CameraView, ExerciseType, Pillar
from ..biomechanics import PillarContext
from ..exercise_analyzer import ExerciseProfile, Measurement, MessageContext
from ..pose_utils import (LEFT_ELBOW, RIGHT_ELBOW, RIGHT_HIP, RIGHT_SHOULDER, RIGHT_WRIST,
                          Landmarks, angle_at, clamp)
from ..registry import register_profile


def _posture(ctx: PillarContext) -> float:
    """Side view: hands should sit slightly forward, in the scapular plane."""
    if ctx.view == CameraView.FRONT:
        return 100
    if abs(ctx.landmarks[RIGHT_WRIST].x - ctx.landmarks[RIGHT_SHOULDER].x) < 0.05:
        return 70
    return 100


def _efficiency(ctx: PillarContext) -> float:
    if ctx.view == CameraView.SIDE:
        return 100
    # wrists leading the elbows shifts load off the delts
    if ctx.landmarks[RIGHT_WRIST].y < ctx.landmarks[RIGHT_ELBOW].y - 0.05:
        return 60
    return 100


def _stability(ctx: PillarContext) -> float:
    if ctx.view != CameraView.FRONT:
        return 100
    if abs(ctx.landmarks[LEFT_ELBOW].y - ctx.landmarks[RIGHT_ELBOW].y) > 0.05:
        return 70
    return 100


def measure_lateral_raise(lm: Landmarks, view: CameraView) -> Measurement:
    shoulder = angle_at(lm[RIGHT_HIP], lm[RIGHT_SHOULDER], lm[RIGHT_ELBOW])
    return Measurement(completion=clamp((shoulder - 20) / 65), joint_angles={"shoulder": shoulder})


def lateral_raise_messages(ctx: MessageContext) -> List[str]:
    messages = []
    if ctx.view == CameraView.FRONT:
        if ctx.breakdown.stability < 70:
            messages.append("Arm Height Even")
        if ctx.breakdown.efficiency < 70:
            messages.append("Lead w/ Elbows")
    elif ctx.breakdown.posture < 70:
        messages.append("Hands fwd (Scap Plane)")
    return messages


LATERAL_RAISE_PROFILE = register_profile(ExerciseProfile(
    exercise=ExerciseType.LATERAL_RAISES,
    measure=measure_lateral_raise,
    pillars={
        Pillar.STABILITY: _stability,
        Pillar.POSTURE: _posture,
        Pillar.EFFICIENCY: _efficiency,
    },
    messages=lateral_raise_messages,
))
