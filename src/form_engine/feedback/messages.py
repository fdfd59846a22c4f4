from ..exercise_analysis.base_analyzer import ExerciseType


class FeedbackGenerator:
    """Status messages the engine emits in place of form feedback."""

    @staticmethod
    def no_pose():
        return "No pose detected"

    @staticmethod
    def scanning_phase():
        return "Scanning..."

    @staticmethod
    def get_in_position():
        return "Get in position..."

    @staticmethod
    def detecting_phase(candidate: ExerciseType):
        return f"Detecting {candidate.value}..."

    @staticmethod
    def confirm_candidate(candidate: ExerciseType):
        if candidate == ExerciseType.PLANK:
            return "Hold still for Plank..."
        return f"Start moving for {candidate.value}..."

    @staticmethod
    def locked_prefix(exercise: ExerciseType, message: str):
        return f"[{exercise.value}] {message}"
