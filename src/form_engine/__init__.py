"""
Geometric exercise form analysis: exercise recognition, rep counting and form scoring.
"""

from .exercise_analysis.base_analyzer import ExerciseType, Feedback, RepTimestamp, ScoreBreakdown
from .exercise_analysis.pose_utils import PoseLandmark
from .rule_engine import GeometricRuleEngine

__version__ = "0.1.0"

__all__ = [
    'ExerciseType',
    'Feedback',
    'GeometricRuleEngine',
    'PoseLandmark',
    'RepTimestamp',
    'ScoreBreakdown',
]
