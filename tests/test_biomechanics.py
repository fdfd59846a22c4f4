import copy

import pytest

from form_engine.exercise_analysis.base_analyzer import CameraView, ExerciseType, Pillar, RepPhase, ScoreBreakdown
from form_engine.exercise_analysis.biomechanics import BiomechanicalAnalyzer, spine_alignment, weighted_score
from form_engine.exercise_analysis.config_utils import exercise_settings, validate_engine_config

from pose_factory import standing_pose


def test_unspecified_pillars_score_full_marks():
    scorer = BiomechanicalAnalyzer()
    breakdown = scorer.analyze_pillars(standing_pose(), RepPhase.REST, CameraView.SIDE)
    assert breakdown == ScoreBreakdown(total=0.0, stability=100, rom=100, posture=100,
                                       efficiency=100, bracing=100)


def test_pillar_functions_see_phase_and_view():
    seen = []

    def rom(ctx):
        seen.append((ctx.phase, ctx.view, len(ctx.history)))
        return 42

    scorer = BiomechanicalAnalyzer({Pillar.ROM: rom})
    breakdown = scorer.analyze_pillars(standing_pose(), RepPhase.BOTTOM, CameraView.FRONT)
    assert breakdown.rom == 42
    assert seen == [(RepPhase.BOTTOM, CameraView.FRONT, 1)]


def test_history_is_bounded_and_cleared_by_reset():
    scorer = BiomechanicalAnalyzer(max_history=30)
    for _ in range(45):
        scorer.analyze_pillars(standing_pose(), RepPhase.REST, CameraView.SIDE)
    assert len(scorer.history) == 30
    scorer.reset()
    assert len(scorer.history) == 0


def test_spine_alignment_penalizes_forward_head():
    scorer = BiomechanicalAnalyzer({Pillar.POSTURE: spine_alignment})
    straight = scorer.analyze_pillars(standing_pose(), RepPhase.REST, CameraView.SIDE)
    assert straight.posture == pytest.approx(100)
    forward = scorer.analyze_pillars(standing_pose(ear=(0.6, 0.2)), RepPhase.REST, CameraView.SIDE)
    assert forward.posture < 100


def test_weighted_score_is_deterministic():
    breakdown = ScoreBreakdown(stability=73.5, rom=88.0, posture=61.25, efficiency=90.0, bracing=40.0)
    weights = {Pillar.ROM: 0.35, Pillar.STABILITY: 0.25, Pillar.POSTURE: 0.2,
               Pillar.BRACING: 0.1, Pillar.EFFICIENCY: 0.1}
    snapshot = copy.deepcopy(breakdown)
    first = weighted_score(breakdown, weights)
    second = weighted_score(breakdown, weights)
    assert first == second
    assert breakdown == snapshot
    assert first == pytest.approx(0.35 * 88 + 0.25 * 73.5 + 0.2 * 61.25 + 0.1 * 40 + 0.1 * 90)


def test_weighted_score_is_clamped():
    breakdown = ScoreBreakdown(stability=150, rom=150)
    assert weighted_score(breakdown, {Pillar.STABILITY: 0.5, Pillar.ROM: 0.5}) == 100.0
    breakdown = ScoreBreakdown(stability=-20)
    assert weighted_score(breakdown, {Pillar.STABILITY: 1.0}) == 0.0


def test_default_config_is_valid(engine_config):
    validate_engine_config(engine_config)
    settings = exercise_settings(engine_config, ExerciseType.PUSH_UP)
    assert settings["threshold_high"] == 0.60
    assert settings["threshold_low"] == 0.35
    assert settings["weights"][Pillar.BRACING] == 0.3


def test_config_rejects_bad_weights(engine_config):
    broken = copy.deepcopy(engine_config)
    broken["exercises"]["Squat"]["weights"]["rom"] = 0.5
    with pytest.raises(ValueError, match="sum to"):
        validate_engine_config(broken)


def test_config_rejects_missing_exercise(engine_config):
    broken = copy.deepcopy(engine_config)
    del broken["exercises"]["Plank"]
    with pytest.raises(ValueError, match="Plank"):
        validate_engine_config(broken)


def test_config_rejects_inverted_thresholds(engine_config):
    broken = copy.deepcopy(engine_config)
    broken["exercises"]["Leg Raises"]["threshold_low"] = 0.9
    with pytest.raises(ValueError, match="threshold_low"):
        validate_engine_config(broken)
