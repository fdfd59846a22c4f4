"""
rep_counter.py - Five-phase repetition state machine driven by a completion signal.
"""
import time
from collections import namedtuple
from typing import List, Optional

from .base_analyzer import CountMode, RepPhase, RepTimestamp

RepState = namedtuple("RepState", ["count", "phase"])

# (start, first half, peak, second half) phases per mode
_CYCLES = {
    CountMode.ECCENTRIC_FIRST: (RepPhase.TOP, RepPhase.ECCENTRIC, RepPhase.BOTTOM, RepPhase.CONCENTRIC),
    CountMode.CONCENTRIC_FIRST: (RepPhase.BOTTOM, RepPhase.CONCENTRIC, RepPhase.TOP, RepPhase.ECCENTRIC),
}

DEFAULT_THRESHOLD_LOW = 0.35
DEFAULT_THRESHOLD_HIGH = 0.55
DEFAULT_DEADBAND = 0.1


def now_ms() -> float:
    return time.time() * 1000


class RepCounter:
    """
    Counts repetitions of a normalized completion signal (0 = rest, 1 = peak).

    A rep is one full start -> peak -> start cycle. Entering the peak requires
    reaching ``threshold_high``; leaving it requires dropping below
    ``threshold_high - deadband``, and the rep only completes at or below
    ``threshold_low``. Within one update the machine keeps advancing while a
    transition guard holds, so a frame that jumps straight from rest to peak
    passes through the intermediate phase.
    """

    def __init__(self, mode: CountMode = CountMode.ECCENTRIC_FIRST,
                 threshold_low: float = DEFAULT_THRESHOLD_LOW,
                 threshold_high: float = DEFAULT_THRESHOLD_HIGH,
                 deadband: float = DEFAULT_DEADBAND):
        if not (0.0 <= threshold_low < threshold_high <= 1.0):
            raise ValueError(
                f"Invalid rep thresholds: low={threshold_low}, high={threshold_high}"
            )
        self.mode = mode
        self.threshold_low = threshold_low
        self.threshold_high = threshold_high
        self.deadband = deadband
        self.recording_start_time = 0.0
        self.reset()

    def reset(self) -> None:
        self.count = 0
        self.phase = RepPhase.REST
        self._timestamps: List[RepTimestamp] = []
        self._rep_start: Optional[float] = None
        self._rep_mid: Optional[float] = None

    def set_recording_start_time(self, start_time: float) -> None:
        self.recording_start_time = start_time

    def get_count(self) -> int:
        return self.count

    def get_rep_timestamps(self) -> List[RepTimestamp]:
        return list(self._timestamps)

    def update(self, completion: float, timestamp: Optional[float] = None) -> RepState:
        """
        Feed one completion sample; returns the count and phase after it.

        A sample that jumps from the start phase straight past ``threshold_high``
        enters and leaves the first half in the same update, so that rep records
        ``mid == start``.
        """
        if timestamp is None:
            timestamp = now_ms()
        relative = timestamp - self.recording_start_time

        # Guards are mutually exclusive per phase, so this settles in at most 4 steps
        for _ in range(4):
            if not self._step(completion, relative):
                break
        return RepState(self.count, self.phase)

    def _step(self, completion: float, t: float) -> bool:
        start, first, peak, second = _CYCLES[self.mode]

        if self.phase in (RepPhase.REST, start):
            if completion > self.threshold_low:
                self.phase = first
                if self._rep_start is None:
                    self._rep_start = t
                return True
        elif self.phase == first:
            if completion >= self.threshold_high:
                self.phase = peak
                self._rep_mid = t
                return True
            if completion < self.threshold_low:
                # false start
                self.phase = start
                self._rep_start = None
                self._rep_mid = None
                return True
        elif self.phase == peak:
            if completion < self.threshold_high - self.deadband:
                self.phase = second
                return True
        elif self.phase == second:
            if completion <= self.threshold_low:
                self.phase = start
                self.count += 1
                if self._rep_start is not None:
                    mid = self._rep_mid if self._rep_mid is not None else t
                    self._timestamps.append(RepTimestamp(start=self._rep_start, mid=mid, end=t))
                self._rep_start = None
                self._rep_mid = None
                return True
            if completion > self.threshold_high:
                self.phase = peak
                return True
        return False
