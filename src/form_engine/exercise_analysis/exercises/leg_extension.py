from typing import List

from ..base_analyzer import CameraView, ExerciseType, Pillar, RepPhase
from ..biomechanics import PillarContext
from ..exercise_analyzer import ExerciseProfile, Measurement, MessageContext
from ..pose_utils import (LEFT_ANKLE, LEFT_HIP, LEFT_KNEE, LEFT_SHOULDER, RIGHT_ANKLE, RIGHT_HIP,
                          RIGHT_KNEE, RIGHT_SHOULDER, Landmarks, angle_at, clamp)
from ..registry import register_profile


def hip_opening(lm: Landmarks) -> float:
    """Larger of the two hip angles; rises when the hips lift off the seat."""
    return max(angle_at(lm[LEFT_SHOULDER], lm[LEFT_HIP], lm[LEFT_KNEE]),
               angle_at(lm[RIGHT_SHOULDER], lm[RIGHT_HIP], lm[RIGHT_KNEE]))


def _stability(ctx: PillarContext) -> float:
    if hip_opening(ctx.landmarks) > 130:
        return 60
    return 100


def measure_leg_extension(lm: Landmarks, view: CameraView) -> Measurement:
    left = angle_at(lm[LEFT_HIP], lm[LEFT_KNEE], lm[LEFT_ANKLE])
    right = angle_at(lm[RIGHT_HIP], lm[RIGHT_KNEE], lm[RIGHT_ANKLE])
    # from the side the far leg is occluded; trust the straighter reading
    knee = max(left, right) if view == CameraView.SIDE else (left + right) / 2
    return Measurement(completion=clamp((knee - 90) / 65), joint_angles={"knee": knee})


def leg_extension_messages(ctx: MessageContext) -> List[str]:
    messages = []
    if (ctx.phase in (RepPhase.CONCENTRIC, RepPhase.TOP)
            and ctx.joint_angles["knee"] < 145 and ctx.completion > 0.8):
        messages.append("Extend More")
    if hip_opening(ctx.landmarks) > 145:
        messages.append("Keep Hips Down")
    return messages


LEG_EXTENSION_PROFILE = register_profile(ExerciseProfile(
    exercise=ExerciseType.LEG_EXTENSION,
    measure=measure_leg_extension,
    pillars={Pillar.STABILITY: _stability},
    messages=leg_extension_messages,
))
