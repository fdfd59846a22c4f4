from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence


class ExerciseType(Enum):
    """Exercises the engine can analyze, plus the auto-detect sentinel."""
    BARBELL_BICEPS_CURL = "Barbell Biceps Curl"
    BENCH_PRESS = "Bench Press"
    CHEST_FLY_MACHINE = "Chest Fly Machine"
    INCLINE_BENCH_PRESS = "Incline Bench Press"
    LAT_PULLDOWN = "Lat Pulldown"
    LATERAL_RAISES = "Lateral Raises"
    LEG_EXTENSION = "Leg Extension"
    LEG_RAISES = "Leg Raises"
    PLANK = "Plank"
    PULL_UP = "Pull Up"
    PUSH_UP = "Push Up"
    RUSSIAN_TWIST = "Russian Twist"
    SQUAT = "Squat"
    T_BAR_ROW = "T-Bar Row"
    TRICEP_DIPS = "Tricep Dips"
    AUTO_DETECT = "Auto-Detect"

    @classmethod
    def concrete(cls) -> List["ExerciseType"]:
        return [exercise for exercise in cls if exercise is not cls.AUTO_DETECT]

    @classmethod
    def from_name(cls, name: Any) -> "ExerciseType":
        """Accept an ExerciseType, its display name, or its member name."""
        if isinstance(name, cls):
            return name
        for exercise in cls:
            if name == exercise.value or name == exercise.name:
                return exercise
        raise ValueError(f"Unsupported exercise type: {name}")


class CameraView(Enum):
    FRONT = "Front"
    SIDE = "Side"
    FORTY_FIVE = "45"
    UNKNOWN = "Unknown"


class RepPhase(Enum):
    REST = "Rest"
    ECCENTRIC = "Eccentric"
    BOTTOM = "Bottom"
    CONCENTRIC = "Concentric"
    TOP = "Top"


class CountMode(Enum):
    """Direction the rep cycle runs in."""
    ECCENTRIC_FIRST = "EccentricFirst"    # start extended, compress first
    CONCENTRIC_FIRST = "ConcentricFirst"  # start relaxed, contract first


class Pillar(Enum):
    STABILITY = "stability"
    ROM = "rom"
    POSTURE = "posture"
    EFFICIENCY = "efficiency"
    BRACING = "bracing"


@dataclass
class ScoreBreakdown:
    """The five 0-100 pillar scores plus the exercise-weighted total."""
    total: float = 0.0
    stability: float = 0.0
    rom: float = 0.0
    posture: float = 0.0
    efficiency: float = 0.0
    bracing: float = 0.0

    def pillar(self, pillar: Pillar) -> float:
        return getattr(self, pillar.value)

    def to_dict(self) -> Dict[str, float]:
        return {
            "total": self.total,
            "stability": self.stability,
            "rom": self.rom,
            "posture": self.posture,
            "efficiency": self.efficiency,
            "bracing": self.bracing,
        }


@dataclass(frozen=True)
class RepTimestamp:
    """Milliseconds relative to the recording start."""
    start: float
    mid: float
    end: float

    def to_dict(self) -> Dict[str, float]:
        return {"start": self.start, "mid": self.mid, "end": self.end}


@dataclass
class Feedback:
    """Per-frame analysis result handed to the consumer."""
    score: float
    breakdown: ScoreBreakdown
    reps: int
    rep_phase: str
    message: str
    is_good_form: bool
    correction: Optional[str] = None
    joint_angles: Optional[Dict[str, float]] = None
    detected_exercise: Optional[ExerciseType] = None
    quality_flags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "score": self.score,
            "breakdown": self.breakdown.to_dict(),
            "reps": self.reps,
            "repPhase": self.rep_phase,
            "message": self.message,
            "isGoodForm": self.is_good_form,
        }
        if self.correction is not None:
            data["correction"] = self.correction
        if self.joint_angles is not None:
            data["jointAngles"] = dict(self.joint_angles)
        if self.detected_exercise is not None:
            data["detectedExercise"] = self.detected_exercise.value
        if self.quality_flags:
            data["qualityFlags"] = list(self.quality_flags)
        return data


def empty_feedback(message: str = "No Pose", rep_phase: str = RepPhase.REST.value,
                   detected_exercise: Optional[ExerciseType] = None) -> Feedback:
    """Zero-score feedback used whenever there is nothing to analyze."""
    return Feedback(
        score=0,
        breakdown=ScoreBreakdown(),
        reps=0,
        rep_phase=rep_phase,
        message=message,
        is_good_form=False,
        detected_exercise=detected_exercise,
    )


class BaseExerciseAnalyzer(ABC):
    """Common interface for every per-exercise analyzer."""

    exercise: ExerciseType

    def __init__(self):
        self.recording_start_time = 0.0

    def set_recording_start_time(self, start_time: float) -> None:
        """Baseline (ms) that rep timestamps are reported relative to."""
        self.recording_start_time = start_time

    @abstractmethod
    def analyze(self, landmarks: Sequence[Any], timestamp: Optional[float] = None) -> Feedback:
        """
        Analyze one frame.

        Args:
            landmarks: The 33 pose landmarks of the frame
            timestamp: Frame time in ms, wall clock when omitted
        Returns:
            Feedback for this frame
        """
        pass

    @abstractmethod
    def get_rep_timestamps(self) -> List[RepTimestamp]:
        pass

    @abstractmethod
    def reset(self) -> None:
        """Start a new set. Tuning and the recording baseline are kept."""
        pass
