"""
exercise_analyzer.py - Generic analyzer driven by a per-exercise profile.

A profile bundles everything exercise specific: how to turn a frame into a
completion signal, which pillar rules apply, and how corrections are chosen.
The analyzer owns the mutable state (rep counter and pillar history).
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .base_analyzer import (BaseExerciseAnalyzer, CameraView, ExerciseType, Feedback,
                            RepPhase, RepTimestamp, ScoreBreakdown, empty_feedback)
from .biomechanics import BiomechanicalAnalyzer, PillarFunction, weighted_score
from .pose_utils import Landmarks, detect_view, has_full_pose
from .rep_counter import RepCounter

GOOD_FORM_SCORE = 80
CORRECTION_SEPARATOR = ", "


@dataclass(frozen=True)
class Measurement:
    completion: float
    joint_angles: Dict[str, float]


@dataclass(frozen=True)
class MessageContext:
    landmarks: Landmarks
    view: CameraView
    phase: RepPhase
    completion: float
    joint_angles: Dict[str, float]
    breakdown: ScoreBreakdown


def no_messages(ctx: MessageContext) -> List[str]:
    return []


@dataclass(frozen=True)
class ExerciseProfile:
    """Static description of one exercise."""
    exercise: ExerciseType
    measure: Callable[[Landmarks, CameraView], Measurement]
    pillars: Mapping[Any, PillarFunction] = field(default_factory=dict)
    messages: Callable[[MessageContext], List[str]] = no_messages
    phase_labels: Mapping[RepPhase, str] = field(default_factory=dict)

    def phase_label(self, phase: RepPhase) -> str:
        return self.phase_labels.get(phase, phase.value)


class ExerciseAnalyzer(BaseExerciseAnalyzer):
    """Composes a profile with a rep counter and a pillar scorer."""

    def __init__(self, profile: ExerciseProfile, settings: Dict[str, Any]):
        super().__init__()
        self.profile = profile
        self.exercise = profile.exercise
        self.weights = settings["weights"]
        self.rep_counter = RepCounter(
            mode=settings["mode"],
            threshold_low=settings["threshold_low"],
            threshold_high=settings["threshold_high"],
            deadband=settings.get("deadband", 0.1),
        )
        self.biomechanics = BiomechanicalAnalyzer(profile.pillars, max_history=settings["history_length"])
        self._view_thresholds = settings.get("view_detection", {})

    def set_recording_start_time(self, start_time: float) -> None:
        super().set_recording_start_time(start_time)
        self.rep_counter.set_recording_start_time(start_time)

    def get_rep_timestamps(self) -> List[RepTimestamp]:
        return self.rep_counter.get_rep_timestamps()

    def reset(self) -> None:
        self.rep_counter.reset()
        self.biomechanics.reset()

    def analyze(self, landmarks: Landmarks, timestamp: Optional[float] = None) -> Feedback:
        if not has_full_pose(landmarks):
            return empty_feedback()

        view = detect_view(landmarks, **self._view_thresholds)
        measurement = self.profile.measure(landmarks, view)
        count, phase = self.rep_counter.update(measurement.completion, timestamp)
        breakdown = self.biomechanics.analyze_pillars(landmarks, phase, view)

        ctx = MessageContext(
            landmarks=landmarks,
            view=view,
            phase=phase,
            completion=measurement.completion,
            joint_angles=measurement.joint_angles,
            breakdown=breakdown,
        )
        messages, flags = self._corrections(ctx)

        breakdown.total = weighted_score(breakdown, self.weights)
        return Feedback(
            score=breakdown.total,
            breakdown=breakdown,
            reps=count,
            rep_phase=phase.value,
            message=messages[0] if messages else self.profile.phase_label(phase),
            correction=CORRECTION_SEPARATOR.join(messages) if messages else None,
            is_good_form=self._is_good_form(breakdown.total, flags),
            joint_angles=measurement.joint_angles,
            quality_flags=flags,
        )

    def _corrections(self, ctx: MessageContext) -> Tuple[List[str], List[str]]:
        """Ordered corrections (most urgent first) and advisory quality flags."""
        return self.profile.messages(ctx), []

    def _is_good_form(self, total: float, flags: List[str]) -> bool:
        return total > GOOD_FORM_SCORE
