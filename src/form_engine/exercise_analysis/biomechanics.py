"""
biomechanics.py - Five-pillar form scoring with a short landmark history.
"""
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Mapping, Optional

import numpy as np

from .base_analyzer import CameraView, Pillar, RepPhase, ScoreBreakdown
from .pose_utils import RIGHT_EAR, RIGHT_HIP, RIGHT_SHOULDER, Landmarks, angle_at

NO_PENALTY = 100.0


@dataclass(frozen=True)
class PillarContext:
    """What a pillar rule may look at for one frame."""
    landmarks: Landmarks
    phase: RepPhase
    view: CameraView
    history: Deque[Landmarks]


PillarFunction = Callable[[PillarContext], float]


def no_penalty(ctx: PillarContext) -> float:
    return NO_PENALTY


def spine_alignment(ctx: PillarContext) -> float:
    """Ear-shoulder-hip line; 2 points lost per degree of bend."""
    lm = ctx.landmarks
    angle = angle_at(lm[RIGHT_EAR], lm[RIGHT_SHOULDER], lm[RIGHT_HIP])
    return max(0.0, 100.0 - abs(180.0 - angle) * 2)


def weighted_score(breakdown: ScoreBreakdown, weights: Mapping[Pillar, float]) -> float:
    """Weighted sum of the pillars, clamped to [0, 100]."""
    pillars = list(weights)
    values = np.array([breakdown.pillar(p) for p in pillars], dtype=float)
    factors = np.array([weights[p] for p in pillars], dtype=float)
    total = float(np.dot(values, factors)) if pillars else 0.0
    return float(np.clip(total, 0.0, 100.0))


class BiomechanicalAnalyzer:
    """
    Scores the five pillars for one exercise.

    Keeps the last ``max_history`` frames for rules that need short-term
    context. Pillars without a rule score 100.
    """

    def __init__(self, pillars: Optional[Mapping[Pillar, PillarFunction]] = None, max_history: int = 30):
        self._pillars: Dict[Pillar, PillarFunction] = dict(pillars or {})
        self.history: Deque[Landmarks] = deque(maxlen=max_history)

    def analyze_pillars(self, landmarks: Landmarks, phase: RepPhase, view: CameraView) -> ScoreBreakdown:
        self.history.append(landmarks)
        ctx = PillarContext(landmarks=landmarks, phase=phase, view=view, history=self.history)
        scores = {
            pillar.value: float(self._pillars.get(pillar, no_penalty)(ctx))
            for pillar in Pillar
        }
        return ScoreBreakdown(total=0.0, **scores)

    def reset(self) -> None:
        self.history.clear()
