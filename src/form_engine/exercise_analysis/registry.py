"""
registry.py - Exercise tag to analyzer factory lookup.
"""
from functools import partial
from typing import Any, Callable, Dict

from .base_analyzer import BaseExerciseAnalyzer, ExerciseType
from .config_utils import exercise_settings
from .exercise_analyzer import ExerciseAnalyzer, ExerciseProfile

AnalyzerFactory = Callable[[Dict[str, Any]], BaseExerciseAnalyzer]

ANALYZER_REGISTRY: Dict[ExerciseType, AnalyzerFactory] = {}


def register_analyzer(exercise: ExerciseType):
    """Class decorator for analyzers that carry their own state machine."""
    def decorator(cls):
        ANALYZER_REGISTRY[exercise] = cls
        return cls
    return decorator


def register_profile(profile: ExerciseProfile) -> ExerciseProfile:
    ANALYZER_REGISTRY[profile.exercise] = partial(ExerciseAnalyzer, profile)
    return profile


def create_analyzer(exercise: Any, config: Dict[str, Any]) -> BaseExerciseAnalyzer:
    """Build a fresh analyzer for ``exercise`` using the engine config."""
    # Populates the registry
    from . import exercises  # noqa: F401

    exercise = ExerciseType.from_name(exercise)
    factory = ANALYZER_REGISTRY.get(exercise)
    if factory is None:
        raise ValueError(f"Unsupported exercise type: {exercise.value}")
    settings = exercise_settings(config, exercise)
    settings["view_detection"] = config.get("view_detection", {})
    return factory(settings)
