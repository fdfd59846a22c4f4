from typing import List

from ..base_analyzer import CameraView, ExerciseType, Pillar
from ..biomechanics import PillarContext
from ..exercise_analyzer import ExerciseProfile, Measurement, MessageContext
from ..pose_utils import (LEFT_ELBOW, LEFT_HIP, LEFT_SHOULDER, LEFT_WRIST, RIGHT_ELBOW, RIGHT_HIP,
                          RIGHT_SHOULDER, RIGHT_WRIST, Landmarks, average_angle, clamp)
from ..registry import register_profile


def _average_elbow(lm: Landmarks) -> float:
    return average_angle(lm,
                         (LEFT_SHOULDER, LEFT_ELBOW, LEFT_WRIST),
                         (RIGHT_SHOULDER, RIGHT_ELBOW, RIGHT_WRIST))


def _efficiency(ctx: PillarContext) -> float:
    if ctx.view != CameraView.FRONT:
        return 100
    flare = average_angle(ctx.landmarks,
                          (LEFT_ELBOW, LEFT_SHOULDER, LEFT_HIP),
                          (RIGHT_ELBOW, RIGHT_SHOULDER, RIGHT_HIP))
    if flare > 70:
        return 60
    if flare < 30:
        return 70
    return 100


def _rom(ctx: PillarContext) -> float:
    elbow = _average_elbow(ctx.landmarks)
    if elbow < 45:
        return 100
    if elbow < 60:
        return 85
    if elbow < 90:
        return 60
    return 40


def measure_incline_bench(lm: Landmarks, view: CameraView) -> Measurement:
    elbow = _average_elbow(lm)
    return Measurement(completion=clamp((170 - elbow) / 100), joint_angles={"elbow": elbow})


def incline_bench_messages(ctx: MessageContext) -> List[str]:
    if ctx.breakdown.efficiency >= 70:
        return []
    if ctx.view == CameraView.FRONT:
        return ["Tuck Elbows"]
    return ["Touch Upper Chest"]


INCLINE_BENCH_PROFILE = register_profile(ExerciseProfile(
    exercise=ExerciseType.INCLINE_BENCH_PRESS,
    measure=measure_incline_bench,
    pillars={
        Pillar.ROM: _rom,
        Pillar.EFFICIENCY: _efficiency,
    },
    messages=incline_bench_messages,
))
