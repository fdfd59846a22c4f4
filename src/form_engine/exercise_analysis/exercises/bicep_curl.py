from typing import List

from ..base_analyzer import CameraView, ExerciseType, Pillar, RepPhase
from ..biomechanics import PillarContext
from ..exercise_analyzer import ExerciseProfile, Measurement, MessageContext
from ..pose_utils import RIGHT_ELBOW, RIGHT_HIP, RIGHT_SHOULDER, RIGHT_WRIST, Landmarks, angle_at, clamp
from ..registry import register_profile


def _stability(ctx: PillarContext) -> float:
    """Elbow drifting forward of the shoulder turns the curl into a front raise."""
    if ctx.view == CameraView.FRONT:
        return 100
    if abs(ctx.landmarks[RIGHT_SHOULDER].x - ctx.landmarks[RIGHT_ELBOW].x) > 0.15:
        return 60
    return 100


def _efficiency(ctx: PillarContext) -> float:
    if ctx.view == CameraView.SIDE:
        return 100
    lm = ctx.landmarks
    if angle_at(lm[RIGHT_ELBOW], lm[RIGHT_SHOULDER], lm[RIGHT_HIP]) > 30:
        return 60
    return 100


def measure_curl(lm: Landmarks, view: CameraView) -> Measurement:
    elbow = angle_at(lm[RIGHT_SHOULDER], lm[RIGHT_ELBOW], lm[RIGHT_WRIST])
    return Measurement(completion=clamp((160 - elbow) / 100), joint_angles={"elbow": elbow})


def curl_messages(ctx: MessageContext) -> List[str]:
    messages = []
    if ctx.view == CameraView.SIDE:
        if ctx.breakdown.stability < 70:
            messages.append("Pin Elbows")
    elif ctx.breakdown.efficiency < 70:
        messages.append("Elbows In")
    if ctx.phase == RepPhase.BOTTOM and ctx.completion > 0.1:
        messages.append("Full Extension")
    return messages


CURL_PROFILE = register_profile(ExerciseProfile(
    exercise=ExerciseType.BARBELL_BICEPS_CURL,
    measure=measure_curl,
    pillars={
        Pillar.STABILITY: _stability,
        Pillar.EFFICIENCY: _efficiency,
    },
    messages=curl_messages,
))
