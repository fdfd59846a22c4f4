import pytest

from form_engine.exercise_analysis.base_analyzer import CountMode, RepPhase, RepTimestamp
from form_engine.exercise_analysis.rep_counter import RepCounter


def feed(counter, values, start=0, step=100):
    for i, value in enumerate(values):
        counter.update(value, start + i * step)
    return counter


def test_single_rep_eccentric_first():
    counter = feed(RepCounter(), [0.0, 0.4, 0.6, 0.6, 0.3, 0.1])
    assert counter.get_count() == 1
    assert counter.phase == RepPhase.TOP
    assert counter.get_rep_timestamps() == [RepTimestamp(start=100, mid=200, end=400)]


def test_phase_progression():
    counter = RepCounter()
    assert counter.update(0.4, 0).phase == RepPhase.ECCENTRIC
    assert counter.update(0.6, 1).phase == RepPhase.BOTTOM
    assert counter.update(0.5, 2).phase == RepPhase.BOTTOM
    assert counter.update(0.4, 3).phase == RepPhase.CONCENTRIC
    state = counter.update(0.3, 4)
    assert state == (1, RepPhase.TOP)


def test_false_start_recovers_without_dangling_timestamp():
    counter = feed(RepCounter(), [0.4, 0.2, 0.4, 0.6, 0.2])
    assert counter.get_count() == 1
    timestamps = counter.get_rep_timestamps()
    assert len(timestamps) == 1
    # the rep starts at the second rise, not the false start
    assert timestamps[0].start == 200


def test_concentric_first_mirrors_cycle():
    counter = RepCounter(mode=CountMode.CONCENTRIC_FIRST)
    phases = [counter.update(v, i).phase for i, v in enumerate([0.0, 0.4, 0.6, 0.4, 0.3])]
    assert phases == [RepPhase.REST, RepPhase.CONCENTRIC, RepPhase.TOP,
                      RepPhase.ECCENTRIC, RepPhase.BOTTOM]
    assert counter.get_count() == 1


def test_return_to_peak_from_second_half():
    counter = feed(RepCounter(), [0.4, 0.7, 0.4, 0.7, 0.3])
    assert counter.get_count() == 1


def test_noise_inside_deadband_does_not_count():
    counter = feed(RepCounter(), [0.4, 0.6, 0.5, 0.46, 0.58, 0.5])
    assert counter.get_count() == 0
    assert counter.phase == RepPhase.BOTTOM


def test_count_is_monotonic_over_many_cycles():
    counter = RepCounter()
    last = 0
    for i, value in enumerate([0.0, 0.5, 0.9, 0.2, 0.6, 0.1, 0.8, 0.95, 0.0] * 3):
        count = counter.update(value, i * 50).count
        assert count >= last
        last = count
    assert last == 9


def test_timestamps_relative_to_recording_start():
    counter = RepCounter()
    counter.set_recording_start_time(1000)
    feed(counter, [0.4, 0.6, 0.1], start=1500)
    assert counter.get_rep_timestamps() == [RepTimestamp(start=500, mid=600, end=700)]


def test_get_rep_timestamps_returns_copy():
    counter = feed(RepCounter(), [0.4, 0.6, 0.1])
    counter.get_rep_timestamps().clear()
    assert len(counter.get_rep_timestamps()) == 1


def test_reset_keeps_tuning():
    counter = RepCounter(mode=CountMode.CONCENTRIC_FIRST, threshold_low=0.2, threshold_high=0.7)
    feed(counter, [0.3, 0.8, 0.1])
    counter.reset()
    assert counter.get_count() == 0
    assert counter.phase == RepPhase.REST
    assert counter.get_rep_timestamps() == []
    assert (counter.mode, counter.threshold_low, counter.threshold_high) == \
        (CountMode.CONCENTRIC_FIRST, 0.2, 0.7)


@pytest.mark.parametrize("low, high", [(0.6, 0.4), (0.5, 0.5), (-0.1, 0.5), (0.2, 1.2)])
def test_invalid_thresholds_rejected(low, high):
    with pytest.raises(ValueError):
        RepCounter(threshold_low=low, threshold_high=high)


def test_jump_straight_to_peak_shares_start_and_mid():
    counter = feed(RepCounter(), [0.0, 0.9, 0.0])
    assert counter.get_count() == 1
    assert counter.phase == RepPhase.TOP
    assert counter.get_rep_timestamps() == [RepTimestamp(start=100, mid=100, end=200)]
