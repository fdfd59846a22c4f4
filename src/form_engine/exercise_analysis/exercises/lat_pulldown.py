from typing import List

from ..base_analyzer import CameraView, ExerciseType, Pillar, RepPhase
from ..biomechanics import PillarContext
from ..exercise_analyzer import ExerciseProfile, Measurement, MessageContext
from ..pose_utils import (LEFT_WRIST, RIGHT_ELBOW, RIGHT_HIP, RIGHT_SHOULDER, RIGHT_WRIST,
                          Landmarks, angle_at, clamp, point)
from ..registry import register_profile


def _posture(ctx: PillarContext) -> float:
    """Backward lean of the torso from vertical."""
    if ctx.view == CameraView.FRONT:
        return 100
    hip = ctx.landmarks[RIGHT_HIP]
    lean = angle_at(point(hip.x, hip.y - 100), hip, ctx.landmarks[RIGHT_SHOULDER])
    if lean > 30:
        return 40
    return 100


def _stability(ctx: PillarContext) -> float:
    if ctx.view == CameraView.SIDE:
        return 100
    if abs(ctx.landmarks[LEFT_WRIST].y - ctx.landmarks[RIGHT_WRIST].y) > 0.05:
        return 60
    return 100


def measure_lat_pulldown(lm: Landmarks, view: CameraView) -> Measurement:
    elbow = angle_at(lm[RIGHT_SHOULDER], lm[RIGHT_ELBOW], lm[RIGHT_WRIST])
    return Measurement(completion=clamp((170 - elbow) / 100), joint_angles={"elbow": elbow})


def lat_pulldown_messages(ctx: MessageContext) -> List[str]:
    messages = []
    if ctx.view == CameraView.FRONT:
        if ctx.breakdown.stability < 70:
            messages.append("Pull Evenly")
    elif ctx.breakdown.posture < 60:
        messages.append("Less Lean")
    if ctx.phase == RepPhase.TOP and ctx.completion < 0.2 and ctx.joint_angles["elbow"] < 150:
        messages.append("Full Stretch")
    return messages


LAT_PULLDOWN_PROFILE = register_profile(ExerciseProfile(
    exercise=ExerciseType.LAT_PULLDOWN,
    measure=measure_lat_pulldown,
    pillars={
        Pillar.STABILITY: _stability,
        Pillar.POSTURE: _posture,
    },
    messages=lat_pulldown_messages,
))
