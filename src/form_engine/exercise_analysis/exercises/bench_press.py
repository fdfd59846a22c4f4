from typing import List

from ..base_analyzer import CameraView, ExerciseType, Pillar
from ..biomechanics import PillarContext
from ..exercise_analyzer import ExerciseProfile, Measurement, MessageContext
from ..pose_utils import (LEFT_WRIST, RIGHT_ELBOW, RIGHT_HIP, RIGHT_SHOULDER, RIGHT_WRIST,
                          Landmarks, angle_at, clamp)
from ..registry import register_profile


def _efficiency(ctx: PillarContext) -> float:
    lm = ctx.landmarks
    if ctx.view == CameraView.FRONT:
        flare = angle_at(lm[RIGHT_ELBOW], lm[RIGHT_SHOULDER], lm[RIGHT_HIP])
        if flare > 75:
            return 60
        if flare < 30:
            return 80
        return 100
    if ctx.view == CameraView.SIDE:
        # forearm should stay stacked over the elbow
        if abs(lm[RIGHT_WRIST].x - lm[RIGHT_ELBOW].x) > 0.1:
            return 70
        return 100
    return 100


def _stability(ctx: PillarContext) -> float:
    if ctx.view == CameraView.FRONT:
        if abs(ctx.landmarks[LEFT_WRIST].y - ctx.landmarks[RIGHT_WRIST].y) > 0.05:
            return 60
    return 100


def measure_bench_press(lm: Landmarks, view: CameraView) -> Measurement:
    elbow = angle_at(lm[RIGHT_SHOULDER], lm[RIGHT_ELBOW], lm[RIGHT_WRIST])
    return Measurement(completion=clamp((160 - elbow) / 60), joint_angles={"elbow": elbow})


def bench_press_messages(ctx: MessageContext) -> List[str]:
    messages = []
    if ctx.view == CameraView.FRONT:
        if ctx.breakdown.efficiency < 70:
            messages.append("Tuck Elbows")
        if ctx.breakdown.stability < 70:
            messages.append("Uneven Grip")
    elif ctx.breakdown.efficiency < 70:
        messages.append("Fix Bar Path")
    return messages


BENCH_PRESS_PROFILE = register_profile(ExerciseProfile(
    exercise=ExerciseType.BENCH_PRESS,
    measure=measure_bench_press,
    pillars={
        Pillar.STABILITY: _stability,
        Pillar.EFFICIENCY: _efficiency,
    },
    messages=bench_press_messages,
))
