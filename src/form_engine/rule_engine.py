from collections import deque
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from .exercise_analysis.base_analyzer import (BaseExerciseAnalyzer, ExerciseType, Feedback,
                                              RepTimestamp, empty_feedback)
from .exercise_analysis.classifier import classify_exercise
from .exercise_analysis.config_utils import get_logger, load_engine_config
from .exercise_analysis.exercises.plank import PlankAnalyzer
from .exercise_analysis.pose_utils import LEFT_SHOULDER, RIGHT_SHOULDER, Landmarks, has_full_pose
from .exercise_analysis.registry import create_analyzer
from .feedback.messages import FeedbackGenerator

logger = get_logger("GeometricRuleEngine")


class GeometricRuleEngine:
    """
    Routes frames to per-exercise analyzers.

    With a concrete exercise selected, every frame goes to that analyzer. In
    Auto-Detect mode each frame is classified until one exercise has been seen
    for more consecutive frames than its lock threshold; from then on frames go
    to the locked analyzer. One engine serves one session and is not
    thread-safe.
    """

    def __init__(self, exercise: Any = ExerciseType.SQUAT, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the engine.

        Args:
            exercise: Exercise to analyze, or ExerciseType.AUTO_DETECT
            config: Engine tuning, the packaged defaults when omitted
        """
        self.config = config if config is not None else load_engine_config()
        locking = self.config.get("locking", {})
        self._default_lock_frames = locking.get("default_frames", 6)
        self._lock_frames = {
            ExerciseType.from_name(name): frames
            for name, frames in locking.get("frames", {}).items()
        }
        self._movement_variance = locking.get("movement_variance", 0.05)
        self._moving_lock_frames = locking.get("moving_lock_frames", 4)
        self._nominal_fps = locking.get("nominal_fps", 6)

        # One long-lived analyzer per exercise
        self._analyzers: Dict[ExerciseType, BaseExerciseAnalyzer] = {
            exercise_type: create_analyzer(exercise_type, self.config)
            for exercise_type in ExerciseType.concrete()
        }
        self._shoulder_history = deque(maxlen=locking.get("shoulder_history", 30))
        self._current_exercise = ExerciseType.from_name(exercise)
        self._reset_lock()

    # --- Session control ---
    def set_exercise(self, exercise: Any) -> None:
        exercise = ExerciseType.from_name(exercise)
        if exercise != self._current_exercise:
            logger.info(f"Exercise changed: {self._current_exercise.value} -> {exercise.value}")
        self._current_exercise = exercise
        self._reset_lock()
        self._shoulder_history.clear()

    def set_recording_start_time(self, start_time: float) -> None:
        logger.debug(f"Recording start time set to {start_time}")
        for analyzer in self._analyzers.values():
            analyzer.set_recording_start_time(start_time)

    def reset(self) -> None:
        """Start a new set: clear every analyzer and the lock state."""
        for analyzer in self._analyzers.values():
            analyzer.reset()
        self._reset_lock()
        self._shoulder_history.clear()

    def _reset_lock(self) -> None:
        self._is_locked = False
        self._locked_exercise: Optional[ExerciseType] = None
        self._consecutive_frames = 0
        self._potential_exercise: Optional[ExerciseType] = None

    # --- State ---
    @property
    def current_exercise(self) -> ExerciseType:
        return self._current_exercise

    @property
    def is_locked(self) -> bool:
        return self._is_locked

    @property
    def locked_exercise(self) -> Optional[ExerciseType]:
        return self._locked_exercise

    @property
    def potential_exercise(self) -> Optional[ExerciseType]:
        return self._potential_exercise

    @property
    def consecutive_frames(self) -> int:
        return self._consecutive_frames

    @property
    def movement_variance(self) -> float:
        """Spread of the recent shoulder heights; high while the body is moving."""
        if not self._shoulder_history:
            return 0.0
        history = np.asarray(self._shoulder_history, dtype=float)
        return float(history.max() - history.min())

    def get_analyzer(self, exercise: Any) -> BaseExerciseAnalyzer:
        exercise = ExerciseType.from_name(exercise)
        if exercise not in self._analyzers:
            raise ValueError(f"Unsupported exercise type: {exercise.value}")
        return self._analyzers[exercise]

    def lock_threshold(self, exercise: ExerciseType) -> int:
        return self._lock_frames.get(exercise, self._default_lock_frames)

    def get_rep_timestamps(self) -> List[RepTimestamp]:
        if self._current_exercise == ExerciseType.AUTO_DETECT:
            if self._locked_exercise is None:
                return []
            return self._analyzers[self._locked_exercise].get_rep_timestamps()
        return self._analyzers[self._current_exercise].get_rep_timestamps()

    # --- Per-frame analysis ---
    def analyze_frame(self, landmarks: Landmarks, timestamp: Optional[float] = None) -> Feedback:
        if not has_full_pose(landmarks):
            return empty_feedback(message=FeedbackGenerator.no_pose())

        self._shoulder_history.append(
            (landmarks[LEFT_SHOULDER].y + landmarks[RIGHT_SHOULDER].y) / 2
        )
        variance = self.movement_variance
        auto = self._current_exercise == ExerciseType.AUTO_DETECT

        if not auto:
            target = self._current_exercise
        elif self._is_locked:
            if self._locked_exercise == ExerciseType.PLANK and variance > self._movement_variance:
                logger.info(f"Movement detected (variance {variance:.3f}), switching Plank -> Push Up")
                self._locked_exercise = ExerciseType.PUSH_UP
            target = self._locked_exercise
        else:
            detected = classify_exercise(landmarks)
            if detected is None:
                return empty_feedback(
                    message=FeedbackGenerator.get_in_position(),
                    rep_phase=FeedbackGenerator.scanning_phase(),
                )
            target, candidate = self._update_lock(detected, variance)
            if target is None:
                return empty_feedback(
                    message=FeedbackGenerator.confirm_candidate(candidate),
                    rep_phase=FeedbackGenerator.detecting_phase(self._potential_exercise),
                    detected_exercise=self._potential_exercise,
                )

        feedback = self._analyzers[target].analyze(landmarks, timestamp)
        if auto:
            feedback.message = FeedbackGenerator.locked_prefix(target, feedback.message)
        feedback.detected_exercise = target
        return feedback

    def _update_lock(self, detected: ExerciseType, variance: float) -> Tuple[Optional[ExerciseType], ExerciseType]:
        """
        Advance the lock state with this frame's guess.

        Returns:
            Tuple of (locked exercise or None, effective candidate)
        """
        if detected == self._potential_exercise:
            self._consecutive_frames += 1
        else:
            logger.debug(f"New candidate: {detected.value}")
            self._potential_exercise = detected
            self._consecutive_frames = 1

        threshold = self.lock_threshold(detected)
        # a static plank and a moving push-up share the same pose
        if detected in (ExerciseType.PLANK, ExerciseType.PUSH_UP) and variance > self._movement_variance:
            detected = ExerciseType.PUSH_UP
            threshold = self._moving_lock_frames
            if self._potential_exercise == ExerciseType.PUSH_UP:
                self._consecutive_frames += 2

        if self._consecutive_frames <= threshold:
            return None, detected

        self._is_locked = True
        self._locked_exercise = detected
        logger.info(f"Auto-Locked Exercise: {detected.value}")
        if detected == ExerciseType.PLANK:
            plank = self._analyzers[ExerciseType.PLANK]
            if isinstance(plank, PlankAnalyzer):
                plank.set_elapsed_time(threshold / self._nominal_fps)
        return detected, detected
