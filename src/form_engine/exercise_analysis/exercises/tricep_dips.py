from typing import List

from ..base_analyzer import CameraView, ExerciseType, Pillar, RepPhase
from ..biomechanics import PillarContext
from ..exercise_analyzer import ExerciseProfile, Measurement, MessageContext
from ..pose_utils import (LEFT_EAR, LEFT_ELBOW, LEFT_HIP, LEFT_SHOULDER, LEFT_WRIST, RIGHT_ELBOW,
                          RIGHT_SHOULDER, RIGHT_WRIST, Landmarks, angle_at, average_angle,
                          clamp, point)
from ..registry import register_profile


def _posture(ctx: PillarContext) -> float:
    if ctx.view == CameraView.FRONT:
        return 100
    hip = ctx.landmarks[LEFT_HIP]
    lean = angle_at(point(hip.x, hip.y - 100), hip, ctx.landmarks[LEFT_SHOULDER])
    if lean > 45:
        return 60
    return 100


def _efficiency(ctx: PillarContext) -> float:
    if ctx.view == CameraView.SIDE:
        return 100
    lm = ctx.landmarks
    if angle_at(lm[LEFT_ELBOW], lm[LEFT_SHOULDER], lm[LEFT_HIP]) > 45:
        return 60
    return 100


def check_shoulder_depression(ctx: PillarContext) -> float:
    """Shoulders shrugging up toward the ears at the bottom of the dip."""
    lm = ctx.landmarks
    torso = abs(lm[LEFT_SHOULDER].y - lm[LEFT_HIP].y)
    neck = abs(lm[LEFT_EAR].y - lm[LEFT_SHOULDER].y)
    if neck < torso * 0.15:
        return 60
    return 100


def measure_dips(lm: Landmarks, view: CameraView) -> Measurement:
    elbow = average_angle(lm,
                          (LEFT_SHOULDER, LEFT_ELBOW, LEFT_WRIST),
                          (RIGHT_SHOULDER, RIGHT_ELBOW, RIGHT_WRIST))
    return Measurement(completion=clamp((180 - elbow) / 90), joint_angles={"elbow": elbow})


def dips_messages(ctx: MessageContext) -> List[str]:
    messages = []
    if ctx.phase == RepPhase.BOTTOM and ctx.joint_angles["elbow"] > 100:
        messages.append("Go Deeper")
    if ctx.breakdown.posture < 70:
        messages.append("Torso Upright")
    if ctx.breakdown.stability < 70:
        messages.append("Shoulders Down")
    if ctx.breakdown.efficiency < 70:
        messages.append("Elbows In")
    return messages


DIPS_PROFILE = register_profile(ExerciseProfile(
    exercise=ExerciseType.TRICEP_DIPS,
    measure=measure_dips,
    pillars={
        Pillar.POSTURE: _posture,
        Pillar.STABILITY: check_shoulder_depression,
        Pillar.EFFICIENCY: _efficiency,
    },
    messages=dips_messages,
))
