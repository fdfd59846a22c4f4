from typing import List

import numpy as np

from ..base_analyzer import CameraView, ExerciseType, Pillar
from ..biomechanics import PillarContext
from ..exercise_analyzer import ExerciseProfile, Measurement, MessageContext
from ..pose_utils import (LEFT_WRIST, RIGHT_EAR, RIGHT_ELBOW, RIGHT_HIP, RIGHT_SHOULDER, RIGHT_WRIST,
                          Landmarks, angle_at, clamp)
from ..registry import register_profile


def torso_elevation(lm: Landmarks) -> float:
    """Torso angle above horizontal, in degrees."""
    dy = abs(lm[RIGHT_HIP].y - lm[RIGHT_SHOULDER].y)
    dx = abs(lm[RIGHT_HIP].x - lm[RIGHT_SHOULDER].x)
    return float(np.degrees(np.arctan2(dy, dx)))


def _posture(ctx: PillarContext) -> float:
    if ctx.view == CameraView.FRONT:
        return 100
    elevation = torso_elevation(ctx.landmarks)
    if elevation > 70:
        return 40
    if elevation < 20:
        return 50
    if 30 <= elevation <= 60:
        return 100
    return 80


def _bracing(ctx: PillarContext) -> float:
    if ctx.view == CameraView.FRONT:
        return 100
    lm = ctx.landmarks
    if abs(180 - angle_at(lm[RIGHT_EAR], lm[RIGHT_SHOULDER], lm[RIGHT_HIP])) > 20:
        return 50
    if angle_at(lm[RIGHT_HIP], lm[RIGHT_SHOULDER], lm[RIGHT_ELBOW]) > 60:
        return 60
    return 100


def _stability(ctx: PillarContext) -> float:
    if ctx.view == CameraView.SIDE:
        return 100
    if abs(ctx.landmarks[LEFT_WRIST].y - ctx.landmarks[RIGHT_WRIST].y) > 0.05:
        return 60
    return 100


def measure_row(lm: Landmarks, view: CameraView) -> Measurement:
    elbow = angle_at(lm[RIGHT_SHOULDER], lm[RIGHT_ELBOW], lm[RIGHT_WRIST])
    return Measurement(
        completion=clamp((170 - elbow) / 90),
        joint_angles={"elbow": elbow, "torso": torso_elevation(lm)},
    )


def row_messages(ctx: MessageContext) -> List[str]:
    messages = []
    if ctx.view == CameraView.SIDE:
        if ctx.breakdown.posture < 50:
            messages.append("Bend Over ~45°")
        elif ctx.breakdown.posture < 60:
            messages.append("Not So Flat")
        if ctx.breakdown.bracing < 60:
            messages.append("Straighten Back" if ctx.breakdown.bracing < 50 else "Tuck Elbows")
    elif ctx.breakdown.stability < 70:
        messages.append("Even Pull")
    return messages


ROW_PROFILE = register_profile(ExerciseProfile(
    exercise=ExerciseType.T_BAR_ROW,
    measure=measure_row,
    pillars={
        Pillar.POSTURE: _posture,
        Pillar.BRACING: _bracing,
        Pillar.STABILITY: _stability,
    },
    messages=row_messages,
))
