from typing import List

from ..base_analyzer import CameraView, ExerciseType, Pillar, RepPhase
from ..biomechanics import PillarContext
from ..exercise_analyzer import ExerciseProfile, Measurement, MessageContext
from ..pose_utils import (LEFT_EYE, LEFT_SHOULDER, RIGHT_ELBOW, RIGHT_HIP, RIGHT_SHOULDER,
                          RIGHT_WRIST, Landmarks, angle_at, clamp)
from ..registry import register_profile


def _stability(ctx: PillarContext) -> float:
    lm = ctx.landmarks
    if ctx.view == CameraView.SIDE:
        # kipping swings the hips out from under the shoulders
        if abs(lm[RIGHT_SHOULDER].x - lm[RIGHT_HIP].x) > 0.15:
            return 60
    elif ctx.view == CameraView.FRONT:
        if abs(lm[LEFT_SHOULDER].y - lm[RIGHT_SHOULDER].y) > 0.05:
            return 70
    return 100


def _rom(ctx: PillarContext) -> float:
    """Chin over the bar, approximated by the hands."""
    if ctx.landmarks[LEFT_EYE].y < ctx.landmarks[RIGHT_WRIST].y:
        return 100
    return 80


def measure_pull_up(lm: Landmarks, view: CameraView) -> Measurement:
    elbow = angle_at(lm[RIGHT_SHOULDER], lm[RIGHT_ELBOW], lm[RIGHT_WRIST])
    return Measurement(completion=clamp((170 - elbow) / 120), joint_angles={"elbow": elbow})


def pull_up_messages(ctx: MessageContext) -> List[str]:
    messages = []
    if ctx.view == CameraView.SIDE:
        if ctx.breakdown.stability < 70:
            messages.append("No Swinging")
        if ctx.phase == RepPhase.TOP and ctx.breakdown.rom < 70:
            messages.append("Chest to Bar")
    elif ctx.breakdown.stability < 70:
        messages.append("Pull Evenly")
    if ctx.phase == RepPhase.BOTTOM and ctx.completion > 0.1:
        messages.append("Full Hang")
    return messages


PULL_UP_PROFILE = register_profile(ExerciseProfile(
    exercise=ExerciseType.PULL_UP,
    measure=measure_pull_up,
    pillars={
        Pillar.STABILITY: _stability,
        Pillar.ROM: _rom,
    },
    messages=pull_up_messages,
))
