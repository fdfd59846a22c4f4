"""
Exercise analysis package for recognition, rep counting and form scoring.
"""

from .base_analyzer import (BaseExerciseAnalyzer, CameraView, CountMode, ExerciseType, Feedback,
                            Pillar, RepPhase, RepTimestamp, ScoreBreakdown, empty_feedback)
from .biomechanics import BiomechanicalAnalyzer, weighted_score
from .classifier import classify_exercise
from .exercise_analyzer import ExerciseAnalyzer, ExerciseProfile
from .pose_utils import PoseLandmark, angle_at, detect_view
from .registry import ANALYZER_REGISTRY, create_analyzer
from .rep_counter import RepCounter

__all__ = [
    'ANALYZER_REGISTRY',
    'BaseExerciseAnalyzer',
    'BiomechanicalAnalyzer',
    'CameraView',
    'CountMode',
    'ExerciseAnalyzer',
    'ExerciseProfile',
    'ExerciseType',
    'Feedback',
    'Pillar',
    'PoseLandmark',
    'RepCounter',
    'RepPhase',
    'RepTimestamp',
    'ScoreBreakdown',
    'angle_at',
    'classify_exercise',
    'create_analyzer',
    'detect_view',
    'empty_feedback',
    'weighted_score',
]
