from typing import List

from ..base_analyzer import CameraView, ExerciseType, Pillar, RepPhase
from ..biomechanics import PillarContext
from ..exercise_analyzer import ExerciseProfile, Measurement, MessageContext
from ..pose_utils import (LEFT_ANKLE, LEFT_HIP, LEFT_KNEE, LEFT_SHOULDER, RIGHT_ANKLE, RIGHT_HIP,
                          RIGHT_KNEE, RIGHT_SHOULDER, Landmarks, average_angle, clamp, mid_x, mid_y)
from ..registry import register_profile

MIN_DRIFT_HISTORY = 5


def _average_hip(lm: Landmarks) -> float:
    return average_angle(lm,
                         (LEFT_SHOULDER, LEFT_HIP, LEFT_KNEE),
                         (RIGHT_SHOULDER, RIGHT_HIP, RIGHT_KNEE))


def _stability(ctx: PillarContext) -> float:
    lm = ctx.landmarks
    if len(ctx.history) >= MIN_DRIFT_HISTORY:
        oldest = ctx.history[0]
        drift = abs(mid_y(lm, LEFT_SHOULDER, RIGHT_SHOULDER)
                    - mid_y(oldest, LEFT_SHOULDER, RIGHT_SHOULDER))
        if drift > 0.05:
            return 60
    if ctx.view == CameraView.SIDE:
        swing = abs(mid_x(lm, LEFT_SHOULDER, RIGHT_SHOULDER) - mid_x(lm, LEFT_HIP, RIGHT_HIP))
        if swing > 0.15:
            return 70
    return 100


def _rom(ctx: PillarContext) -> float:
    hip = _average_hip(ctx.landmarks)
    if hip <= 90:
        return 100
    if hip <= 110:
        return 85
    if hip <= 130:
        return 60
    return 40


def _efficiency(ctx: PillarContext) -> float:
    knee = average_angle(ctx.landmarks,
                         (LEFT_HIP, LEFT_KNEE, LEFT_ANKLE),
                         (RIGHT_HIP, RIGHT_KNEE, RIGHT_ANKLE))
    if knee < 150:
        return 60
    if knee < 165:
        return 85
    return 100


def measure_leg_raises(lm: Landmarks, view: CameraView) -> Measurement:
    hip = _average_hip(lm)
    return Measurement(completion=clamp((170 - hip) / 80), joint_angles={"hip": hip})


def leg_raises_messages(ctx: MessageContext) -> List[str]:
    messages = []
    if ctx.breakdown.stability < 70:
        messages.append("Control Swing" if ctx.view == CameraView.SIDE else "Keep Shoulders Down")
    if ctx.breakdown.efficiency < 70:
        messages.append("Straighten Legs")
    if ctx.phase == RepPhase.TOP and ctx.joint_angles["hip"] > 100:
        messages.append("Legs Higher")
    return messages


LEG_RAISES_PROFILE = register_profile(ExerciseProfile(
    exercise=ExerciseType.LEG_RAISES,
    measure=measure_leg_raises,
    pillars={
        Pillar.STABILITY: _stability,
        Pillar.ROM: _rom,
        Pillar.EFFICIENCY: _efficiency,
    },
    messages=leg_raises_messages,
    phase_labels={RepPhase.REST: "Get Set"},
))
