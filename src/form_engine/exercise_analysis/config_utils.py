import json
import logging
import os
from typing import Any, Dict

from .base_analyzer import CountMode, ExerciseType, Pillar

_WEIGHT_TOLERANCE = 1e-6


def get_logger(name: str) -> logging.Logger:
    """Named logger with the shared stream handler attached once."""
    logger = logging.getLogger(name)
    if not logger.hasHandlers():
        handler = logging.StreamHandler()
        formatter = logging.Formatter('%(asctime)s %(levelname)s %(message)s')
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    return logger


logger = get_logger("EngineConfig")


def load_engine_config(config_path: str = None) -> Dict[str, Any]:
    """Load engine tuning from JSON file."""
    if config_path is None:
        config_path = os.path.join(os.path.dirname(__file__), "engine_config.json")
    try:
        with open(config_path, "r") as f:
            config = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not load engine config from {config_path}: {e}")
        raise
    validate_engine_config(config)
    return config


def validate_engine_config(config: Dict[str, Any]) -> None:
    """Raise ValueError if the config cannot drive every exercise."""
    exercises = config.get("exercises")
    if not isinstance(exercises, dict):
        raise ValueError("Engine config has no 'exercises' section")

    for exercise in ExerciseType.concrete():
        settings = exercises.get(exercise.value)
        if settings is None:
            raise ValueError(f"Engine config is missing exercise '{exercise.value}'")

        weights = settings.get("weights", {})
        unknown = set(weights) - {p.value for p in Pillar}
        if unknown:
            raise ValueError(f"Unknown pillars for {exercise.value}: {sorted(unknown)}")
        total = sum(weights.values())
        if abs(total - 1.0) > _WEIGHT_TOLERANCE:
            raise ValueError(f"Pillar weights for {exercise.value} sum to {total}, expected 1.0")

        if "mode" in settings:
            CountMode(settings["mode"])
        low = settings.get("threshold_low")
        high = settings.get("threshold_high")
        if low is not None and high is not None and low >= high:
            raise ValueError(
                f"threshold_low must be below threshold_high for {exercise.value}"
            )


def exercise_settings(config: Dict[str, Any], exercise: ExerciseType) -> Dict[str, Any]:
    """Per-exercise section merged over the rep counter defaults."""
    defaults = dict(config.get("rep_counter", {}))
    settings = config["exercises"].get(exercise.value)
    if settings is None:
        raise ValueError(f"Unsupported exercise type: {exercise.value}")
    merged = {**defaults, **settings}
    merged["mode"] = CountMode(merged.get("mode", CountMode.ECCENTRIC_FIRST.value))
    merged["weights"] = {Pillar(name): float(w) for name, w in settings.get("weights", {}).items()}
    merged["history_length"] = config.get("history_length", 30)
    return merged
