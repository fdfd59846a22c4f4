from typing import List

from ..base_analyzer import CameraView, ExerciseType, Pillar
from ..biomechanics import PillarContext
from ..exercise_analyzer import ExerciseProfile, Measurement, MessageContext
from ..pose_utils import (LEFT_ELBOW, LEFT_SHOULDER, LEFT_WRIST, RIGHT_ELBOW, RIGHT_SHOULDER,
                          RIGHT_WRIST, Landmarks, angle_at, clamp)
from ..registry import register_profile


def _rom(ctx: PillarContext) -> float:
    """A fly keeps a soft, fixed elbow; a deep bend turns it into a press."""
    if ctx.view == CameraView.FRONT:
        return 100
    lm = ctx.landmarks
    if angle_at(lm[RIGHT_SHOULDER], lm[RIGHT_ELBOW], lm[RIGHT_WRIST]) < 120:
        return 50
    return 100


def _stability(ctx: PillarContext) -> float:
    if ctx.view == CameraView.SIDE:
        return 100
    if abs(ctx.landmarks[LEFT_ELBOW].y - ctx.landmarks[RIGHT_ELBOW].y) > 0.1:
        return 60
    return 100


def measure_chest_fly(lm: Landmarks, view: CameraView) -> Measurement:
    shoulder_width = abs(lm[LEFT_SHOULDER].x - lm[RIGHT_SHOULDER].x)
    if shoulder_width == 0:
        shoulder_width = 0.1
    hand_spread = abs(lm[RIGHT_WRIST].x - lm[LEFT_WRIST].x) / shoulder_width
    elbow = angle_at(lm[RIGHT_SHOULDER], lm[RIGHT_ELBOW], lm[RIGHT_WRIST])
    return Measurement(
        completion=clamp(1 - (hand_spread - 0.5) / 2),
        joint_angles={"elbow": elbow, "hand_spread": hand_spread},
    )


def chest_fly_messages(ctx: MessageContext) -> List[str]:
    if ctx.view == CameraView.SIDE:
        if ctx.breakdown.rom < 70:
            return ["Don't Press"]
    elif ctx.breakdown.stability < 70:
        return ["Balance Arms"]
    return []


CHEST_FLY_PROFILE = register_profile(ExerciseProfile(
    exercise=ExerciseType.CHEST_FLY_MACHINE,
    measure=measure_chest_fly,
    pillars={
        Pillar.ROM: _rom,
        Pillar.STABILITY: _stability,
    },
    messages=chest_fly_messages,
))
