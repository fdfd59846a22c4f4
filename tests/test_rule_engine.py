import pytest

from form_engine import GeometricRuleEngine
from form_engine.exercise_analysis.base_analyzer import ExerciseType, RepTimestamp
from form_engine.exercise_analysis.exercises.plank import PlankAnalyzer

from pose_factory import (barbell_squat_pose, plank_pose, push_up_pose, squat_bottom_pose,
                          standing_pose)


@pytest.fixture
def engine(engine_config):
    return GeometricRuleEngine(config=engine_config)


@pytest.fixture
def auto_engine(engine_config):
    return GeometricRuleEngine(ExerciseType.AUTO_DETECT, config=engine_config)


def feed(engine, poses, step=33, start=0):
    return [engine.analyze_frame(pose, start + i * step) for i, pose in enumerate(poses)]


def test_defaults_to_squat(engine):
    assert engine.current_exercise == ExerciseType.SQUAT
    feedback = engine.analyze_frame(standing_pose(), 0)
    assert feedback.detected_exercise == ExerciseType.SQUAT
    assert feedback.message == "Ready"


def test_manual_mode_counts_reps(engine):
    poses = [standing_pose()] * 5 + [squat_bottom_pose()] * 3 + [standing_pose()] * 5
    results = feed(engine, poses)
    assert results[-1].reps == 1
    assert engine.get_rep_timestamps() == [RepTimestamp(start=165, mid=165, end=264)]
    assert not engine.is_locked


def test_manual_mode_skips_classification(engine):
    engine.set_exercise("Bench Press")
    feedback = engine.analyze_frame(barbell_squat_pose(), 0)
    assert feedback.detected_exercise == ExerciseType.BENCH_PRESS
    assert not feedback.message.startswith("[")


@pytest.mark.parametrize("landmarks", [[], None, standing_pose()[:10]])
def test_no_pose(auto_engine, landmarks):
    feedback = auto_engine.analyze_frame(landmarks, 0)
    assert feedback.message == "No pose detected"
    assert feedback.score == 0
    assert feedback.reps == 0
    assert not feedback.is_good_form


def test_scanning_when_nothing_matches(auto_engine):
    feedback = auto_engine.analyze_frame(standing_pose(), 0)
    assert feedback.rep_phase == "Scanning..."
    assert feedback.message == "Get in position..."
    assert feedback.score == 0
    assert auto_engine.potential_exercise is None


def test_locks_after_threshold_frames(auto_engine):
    assert auto_engine.lock_threshold(ExerciseType.SQUAT) == 6
    results = feed(auto_engine, [barbell_squat_pose()] * 7)
    for feedback in results[:6]:
        assert feedback.rep_phase == "Detecting Squat..."
        assert feedback.message == "Start moving for Squat..."
        assert feedback.detected_exercise == ExerciseType.SQUAT
        assert feedback.score == 0
    assert results[-1].message.startswith("[Squat] ")
    assert results[-1].detected_exercise == ExerciseType.SQUAT
    assert auto_engine.is_locked
    assert auto_engine.locked_exercise == ExerciseType.SQUAT


def test_changing_candidate_restarts_the_count(auto_engine):
    feed(auto_engine, [barbell_squat_pose()] * 3)
    assert auto_engine.consecutive_frames == 3
    feedback = auto_engine.analyze_frame(plank_pose(), 100)
    assert auto_engine.potential_exercise == ExerciseType.PLANK
    assert auto_engine.consecutive_frames == 1
    assert not auto_engine.is_locked
    assert feedback.score == 0


def test_lost_pose_does_not_reset_candidate(auto_engine):
    feed(auto_engine, [barbell_squat_pose()] * 3)
    auto_engine.analyze_frame(standing_pose(), 100)
    auto_engine.analyze_frame([], 133)
    assert auto_engine.consecutive_frames == 3
    auto_engine.analyze_frame(barbell_squat_pose(), 166)
    assert auto_engine.consecutive_frames == 4


def test_plank_lock_credits_detection_time(auto_engine):
    assert auto_engine.lock_threshold(ExerciseType.PLANK) == 30
    results = feed(auto_engine, [plank_pose()] * 31, step=166)
    assert not any(f.message.startswith("[") for f in results[:30])
    assert results[30].detected_exercise == ExerciseType.PLANK
    assert results[30].message.startswith("[Plank] ")
    # 30 frames at the nominal 6 fps
    assert results[30].reps == 5
    assert isinstance(auto_engine.get_analyzer(ExerciseType.PLANK), PlankAnalyzer)


def test_locked_plank_switches_to_push_up_on_movement(auto_engine):
    feed(auto_engine, [plank_pose()] * 31, step=166)
    assert auto_engine.locked_exercise == ExerciseType.PLANK
    feedback = auto_engine.analyze_frame(plank_pose(y_shift=0.1), 31 * 166)
    assert auto_engine.movement_variance == pytest.approx(0.1)
    assert auto_engine.locked_exercise == ExerciseType.PUSH_UP
    assert feedback.detected_exercise == ExerciseType.PUSH_UP
    assert feedback.message.startswith("[Push Up] ")


def test_set_exercise_clears_lock(auto_engine):
    feed(auto_engine, [barbell_squat_pose()] * 7)
    assert auto_engine.is_locked
    auto_engine.set_exercise(ExerciseType.AUTO_DETECT)
    assert not auto_engine.is_locked
    assert auto_engine.locked_exercise is None
    assert auto_engine.consecutive_frames == 0
    assert auto_engine.movement_variance == 0.0


def test_rep_timestamps_follow_the_lock(auto_engine):
    assert auto_engine.get_rep_timestamps() == []
    feed(auto_engine, [barbell_squat_pose()] * 7)
    assert auto_engine.get_rep_timestamps() == \
        auto_engine.get_analyzer(ExerciseType.SQUAT).get_rep_timestamps()


def test_recording_start_reaches_every_analyzer(engine):
    engine.set_recording_start_time(1000)
    for exercise in ExerciseType.concrete():
        assert engine.get_analyzer(exercise).recording_start_time == 1000
    assert engine.get_analyzer(ExerciseType.SQUAT).rep_counter.recording_start_time == 1000


def test_reset_clears_analyzers(engine):
    feed(engine, [standing_pose()] * 5 + [squat_bottom_pose()] * 3 + [standing_pose()] * 5)
    engine.reset()
    assert engine.get_rep_timestamps() == []
    assert engine.analyze_frame(standing_pose(), 1000).reps == 0


def test_unknown_exercise(engine_config, engine):
    with pytest.raises(ValueError, match="Unsupported exercise type"):
        GeometricRuleEngine("Deadlift", config=engine_config)
    with pytest.raises(ValueError, match="Unsupported exercise type"):
        engine.get_analyzer(ExerciseType.AUTO_DETECT)


def test_locked_engine_ignores_reclassification(auto_engine):
    feed(auto_engine, [barbell_squat_pose()] * 7)
    feedback = auto_engine.analyze_frame(standing_pose(), 300)
    assert feedback.message.startswith("[Squat] ")
    assert feedback.detected_exercise == ExerciseType.SQUAT
    feedback = auto_engine.analyze_frame(plank_pose(), 333)
    assert auto_engine.locked_exercise == ExerciseType.SQUAT
    assert feedback.detected_exercise == ExerciseType.SQUAT


def test_moving_plank_candidate_locks_as_push_up(auto_engine):
    poses = [plank_pose(y_shift=0.1 if i % 2 else 0.0) for i in range(5)]
    results = feed(auto_engine, poses)
    for feedback in results[:4]:
        assert feedback.rep_phase == "Detecting Plank..."
        assert not feedback.message.startswith("[")
    assert results[1].message == "Start moving for Push Up..."
    assert results[4].detected_exercise == ExerciseType.PUSH_UP
    assert results[4].message.startswith("[Push Up] ")
    assert auto_engine.locked_exercise == ExerciseType.PUSH_UP
    # the classifier still saw a plank on every frame
    assert auto_engine.potential_exercise == ExerciseType.PLANK


def test_moving_push_up_candidate_locks_faster(auto_engine):
    first = auto_engine.analyze_frame(push_up_pose(), 0)
    assert first.rep_phase == "Detecting Push Up..."
    assert auto_engine.consecutive_frames == 1
    # moving and already pending as a push-up: two bonus frames
    second = auto_engine.analyze_frame(push_up_pose(y_shift=0.1), 33)
    assert auto_engine.consecutive_frames == 4
    assert not auto_engine.is_locked
    assert second.rep_phase == "Detecting Push Up..."
    third = auto_engine.analyze_frame(push_up_pose(), 66)
    assert auto_engine.locked_exercise == ExerciseType.PUSH_UP
    assert third.message.startswith("[Push Up] ")
