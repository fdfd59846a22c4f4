"""
classifier.py - Single-frame exercise recognition from body orientation and joint angles.

Rules are evaluated in order and the first match wins. Whole-body signatures
that are easy to confuse with weaker standing or lying patterns are checked
first, then the cascade splits on whether the body is standing or lying.
"""
from collections import namedtuple
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

import numpy as np

from .base_analyzer import ExerciseType
from .config_utils import get_logger
from .pose_utils import (LEFT_ANKLE, LEFT_ELBOW, LEFT_HIP, LEFT_KNEE, LEFT_SHOULDER, LEFT_WRIST, NOSE,
                         RIGHT_ANKLE, RIGHT_ELBOW, RIGHT_HIP, RIGHT_KNEE, RIGHT_SHOULDER, RIGHT_WRIST,
                         Landmarks, average_angle, has_full_pose, mid_x, mid_y)

logger = get_logger("ExerciseClassifier")


@dataclass(frozen=True)
class PoseFeatures:
    """Orientation and proportion measures shared by every rule."""
    shoulder_y: float
    hip_y: float
    wrist_y: float
    knee_y: float
    ankle_y: float
    elbow_y: float
    nose_y: float
    shoulder_x: float
    hip_x: float
    ankle_x: float
    wrist_x: float

    torso_height: float
    horizontal_diff: float
    recline_angle: float
    upright: bool
    is_standing: bool
    is_lying: bool

    elbow_angle: float
    hip_angle: float
    knee_angle: float
    shoulder_flexion: float

    feet_on_floor: bool
    feet_visible: bool
    hands_overhead: bool
    wrist_torso_distance_x: float
    elbow_width: float
    wrist_width: float
    elbows_tucked: bool
    torso_inclined: bool
    thigh_horizontal: bool


def extract_features(lm: Landmarks) -> PoseFeatures:
    shoulder_y = mid_y(lm, LEFT_SHOULDER, RIGHT_SHOULDER)
    hip_y = mid_y(lm, LEFT_HIP, RIGHT_HIP)
    wrist_y = mid_y(lm, LEFT_WRIST, RIGHT_WRIST)
    knee_y = mid_y(lm, LEFT_KNEE, RIGHT_KNEE)
    ankle_y = mid_y(lm, LEFT_ANKLE, RIGHT_ANKLE)
    shoulder_x = mid_x(lm, LEFT_SHOULDER, RIGHT_SHOULDER)
    hip_x = mid_x(lm, LEFT_HIP, RIGHT_HIP)

    torso_height = abs(shoulder_y - hip_y)
    horizontal_diff = abs(shoulder_x - hip_x)
    recline_ratio = horizontal_diff / max(0.001, torso_height)
    upright = shoulder_y < hip_y

    return PoseFeatures(
        shoulder_y=shoulder_y,
        hip_y=hip_y,
        wrist_y=wrist_y,
        knee_y=knee_y,
        ankle_y=ankle_y,
        elbow_y=mid_y(lm, LEFT_ELBOW, RIGHT_ELBOW),
        nose_y=lm[NOSE].y,
        shoulder_x=shoulder_x,
        hip_x=hip_x,
        ankle_x=mid_x(lm, LEFT_ANKLE, RIGHT_ANKLE),
        wrist_x=mid_x(lm, LEFT_WRIST, RIGHT_WRIST),
        torso_height=torso_height,
        horizontal_diff=horizontal_diff,
        recline_angle=float(np.degrees(np.arctan(recline_ratio))),
        upright=upright,
        is_standing=upright and torso_height > horizontal_diff * 0.5,
        is_lying=horizontal_diff > torso_height * 0.7,
        elbow_angle=average_angle(lm, (LEFT_SHOULDER, LEFT_ELBOW, LEFT_WRIST),
                                  (RIGHT_SHOULDER, RIGHT_ELBOW, RIGHT_WRIST)),
        hip_angle=average_angle(lm, (LEFT_SHOULDER, LEFT_HIP, LEFT_KNEE),
                                (RIGHT_SHOULDER, RIGHT_HIP, RIGHT_KNEE)),
        knee_angle=average_angle(lm, (LEFT_HIP, LEFT_KNEE, LEFT_ANKLE),
                                 (RIGHT_HIP, RIGHT_KNEE, RIGHT_ANKLE)),
        shoulder_flexion=average_angle(lm, (LEFT_HIP, LEFT_SHOULDER, LEFT_WRIST),
                                       (RIGHT_HIP, RIGHT_SHOULDER, RIGHT_WRIST)),
        feet_on_floor=ankle_y > 0.72,
        feet_visible=lm[LEFT_ANKLE].visibility > 0.5,
        hands_overhead=wrist_y < lm[NOSE].y or wrist_y < shoulder_y - 0.15,
        wrist_torso_distance_x=abs(mid_x(lm, LEFT_WRIST, RIGHT_WRIST) - shoulder_x),
        elbow_width=abs(lm[LEFT_ELBOW].x - lm[RIGHT_ELBOW].x),
        wrist_width=abs(lm[LEFT_WRIST].x - lm[RIGHT_WRIST].x),
        elbows_tucked=abs(lm[LEFT_ELBOW].x - lm[RIGHT_ELBOW].x) < torso_height * 1.0,
        torso_inclined=horizontal_diff > torso_height * 0.3,
        thigh_horizontal=abs(knee_y - hip_y) < torso_height * 0.25,
    )


ClassificationRule = namedtuple("ClassificationRule", ["name", "exercise", "predicate"])

Predicate = Callable[[PoseFeatures], bool]


# --- Whole-body signatures, checked before the standing/lying split ---
def _inclined_row(f: PoseFeatures) -> bool:
    body_straight = abs(180 - f.hip_angle) < 30
    legs_straight = abs(180 - f.knee_angle) < 30
    inclination = float(np.degrees(np.arctan2(abs(f.shoulder_x - f.ankle_x), abs(f.shoulder_y - f.ankle_y))))
    hands_low = f.wrist_y > f.shoulder_y
    return body_straight and legs_straight and 20 < inclination < 80 and hands_low


def _hinged_row(f: PoseFeatures) -> bool:
    hinging = abs(180 - f.hip_angle) > 30
    knees_soft = 70 < f.knee_angle < 165
    return (f.upright and f.torso_inclined and f.wrist_y > f.shoulder_y
            and knees_soft and f.feet_on_floor and hinging)


def _seated_twist(f: PoseFeatures) -> bool:
    reclined = 10 < f.recline_angle < 80
    v_sit = f.shoulder_y < f.hip_y
    hands_at_torso = f.hip_y + 0.2 > f.wrist_y > f.shoulder_y - 0.15
    return not f.upright and (reclined or v_sit) and f.knee_angle < 150 and hands_at_torso


def _chest_fly(f: PoseFeatures) -> bool:
    seated = f.knee_angle < 155 and f.hip_angle < 150 and f.thigh_horizontal
    arms_wide = f.elbow_width > f.torso_height * 1.0 or f.wrist_width > f.torso_height * 0.9
    arms_out_to_side = f.wrist_torso_distance_x > f.torso_height * 0.4
    hands_at_chest = f.shoulder_y - 0.05 < f.wrist_y < f.hip_y - f.torso_height * 0.1
    return (f.upright and not f.hands_overhead and not f.torso_inclined and seated
            and hands_at_chest and (arms_wide or arms_out_to_side))


# --- Standing ---
def _standing_row(f: PoseFeatures) -> bool:
    bent_over = f.knee_angle < 150 and f.wrist_y > f.hip_y
    return ((f.torso_inclined or bent_over) and f.wrist_y > f.shoulder_y
            and f.knee_y > f.hip_y + 0.1 and f.knee_angle > 90)


def _leg_extension(f: PoseFeatures) -> bool:
    hands_at_sides = f.wrist_torso_distance_x < f.torso_height * 0.45
    hands_near_seat = abs(f.wrist_y - f.hip_y) < f.torso_height * 0.4
    hip_flexed = f.hip_angle < 160
    not_v_sit = f.shoulder_y >= f.hip_y - 0.05
    return (f.torso_inclined and f.thigh_horizontal and hands_at_sides and hands_near_seat
            and hip_flexed and not_v_sit and f.feet_on_floor)


def _hands_in_dip_zone(f: PoseFeatures) -> bool:
    return f.shoulder_y - 0.1 < f.wrist_y < f.hip_y + 0.2


def _bar_dips(f: PoseFeatures) -> bool:
    return _hands_in_dip_zone(f) and f.feet_visible and not f.feet_on_floor


def _bench_dips(f: PoseFeatures) -> bool:
    return (_hands_in_dip_zone(f) and not f.torso_inclined and f.knee_angle < 150
            and f.elbows_tucked)


def _barbell_squat(f: PoseFeatures) -> bool:
    wrists_elevated = f.wrist_y < f.shoulder_y + 0.15
    wrists_near_shoulders = abs(f.wrist_y - f.shoulder_y) < 0.2
    return (f.torso_inclined and f.knee_angle < 140 and f.hip_angle < 150
            and (wrists_elevated or wrists_near_shoulders) and f.feet_on_floor)


def _deep_squat(f: PoseFeatures) -> bool:
    return f.knee_angle < 120 and f.hip_angle < 120 and f.feet_on_floor and not f.thigh_horizontal


def _curl(f: PoseFeatures) -> bool:
    elbows_low = f.elbow_y > f.shoulder_y + 0.05
    legs_straight = not (f.knee_angle < 160 or f.hip_angle < 160)
    return (not f.torso_inclined and not f.hands_overhead and f.elbow_angle < 170
            and f.elbows_tucked and elbows_low and legs_straight)


def _hanging_leg_raise(f: PoseFeatures) -> bool:
    hands_at_hips = abs(f.wrist_y - f.hip_y) < 0.25
    legs_lifting = f.ankle_y < f.knee_y - 0.05 or f.hip_angle < 155
    return (not f.torso_inclined and hands_at_hips and f.elbow_angle > 150
            and f.elbows_tucked and legs_lifting)


def _lateral_raise(f: PoseFeatures) -> bool:
    standing_straight = f.knee_angle > 165 and f.hip_angle > 165
    hands_below_shoulders = f.wrist_y > f.shoulder_y - 0.05
    wide_arc = f.wrist_width > f.elbow_width * 1.2
    arms_out = (f.wrist_width > f.torso_height * 0.7
                or f.wrist_torso_distance_x > f.torso_height * 0.35) and wide_arc
    return standing_straight and arms_out and hands_below_shoulders and not f.hands_overhead


def _overhead_lateral_raise(f: PoseFeatures) -> bool:
    return (f.hands_overhead and f.wrist_torso_distance_x > 0.15 and not f.elbows_tucked
            and (f.feet_on_floor or f.hip_angle > 160))


def _seated_on_machine(f: PoseFeatures) -> bool:
    knees_forward = f.thigh_horizontal and f.ankle_y > f.knee_y + 0.05
    return (f.hip_angle < 135 or knees_forward) and (f.feet_on_floor or f.thigh_horizontal)


def _hands_above_shoulders(f: PoseFeatures) -> bool:
    return f.wrist_y < f.shoulder_y - 0.05


def _overhead_incline_press(f: PoseFeatures) -> bool:
    return (f.hands_overhead and 25 <= f.recline_angle <= 65 and f.shoulder_flexion < 160
            and _hands_above_shoulders(f))


def _lat_pulldown(f: PoseFeatures) -> bool:
    return f.hands_overhead and _seated_on_machine(f) and _hands_above_shoulders(f)


def _pull_up(f: PoseFeatures) -> bool:
    return (f.hands_overhead and _hands_above_shoulders(f) and not _seated_on_machine(f)
            and not f.feet_on_floor)


# --- Lying ---
def _shoulders_above_hips(f: PoseFeatures) -> bool:
    return f.shoulder_y < f.hip_y - 0.05


def _legs_vertical(f: PoseFeatures) -> bool:
    return f.knee_y > f.hip_y + 0.15


def _legs_horizontal(f: PoseFeatures) -> bool:
    return abs(f.knee_y - f.hip_y) < 0.15


def _body_flat(f: PoseFeatures) -> bool:
    return abs(f.shoulder_y - f.ankle_y) < 0.15


def _prone(f: PoseFeatures) -> bool:
    return f.wrist_y > f.shoulder_y


def _straight_flat_body(f: PoseFeatures) -> bool:
    return f.knee_angle > 150 and _legs_horizontal(f) and _body_flat(f)


def _reclined_twist(f: PoseFeatures) -> bool:
    return (_shoulders_above_hips(f) and f.knee_angle < 140 and not _legs_vertical(f)
            and 15 < f.recline_angle < 70)


def _forearm_plank(f: PoseFeatures) -> bool:
    forearms_flat = abs(f.wrist_y - f.elbow_y) < 0.15
    return _straight_flat_body(f) and forearms_flat and f.elbow_angle < 130


def _prone_push_up(f: PoseFeatures) -> bool:
    face_down = not (f.nose_y < f.shoulder_y + 0.1)
    return (_prone(f) and face_down and not f.knee_angle < 135
            and _legs_horizontal(f) and _body_flat(f))


def _supine_or_knees_bent(f: PoseFeatures) -> bool:
    return f.knee_angle < 135 or not _prone(f)


def _moderate_recline(f: PoseFeatures) -> bool:
    return f.recline_angle <= 65


GLOBAL_RULES: List[ClassificationRule] = [
    ClassificationRule("inclined row", ExerciseType.T_BAR_ROW, _inclined_row),
    ClassificationRule("hinged row", ExerciseType.T_BAR_ROW, _hinged_row),
    ClassificationRule("seated twist", ExerciseType.RUSSIAN_TWIST, _seated_twist),
    ClassificationRule("chest fly", ExerciseType.CHEST_FLY_MACHINE, _chest_fly),
]

STANDING_RULES: List[ClassificationRule] = [
    ClassificationRule("standing row", ExerciseType.T_BAR_ROW, _standing_row),
    ClassificationRule("leg extension", ExerciseType.LEG_EXTENSION, _leg_extension),
    ClassificationRule("bar dips", ExerciseType.TRICEP_DIPS, _bar_dips),
    ClassificationRule("bench dips", ExerciseType.TRICEP_DIPS, _bench_dips),
    ClassificationRule("barbell squat", ExerciseType.SQUAT, _barbell_squat),
    ClassificationRule("deep squat", ExerciseType.SQUAT, _deep_squat),
    ClassificationRule("curl", ExerciseType.BARBELL_BICEPS_CURL, _curl),
    ClassificationRule("hanging leg raise", ExerciseType.LEG_RAISES, _hanging_leg_raise),
    ClassificationRule("lateral raise", ExerciseType.LATERAL_RAISES, _lateral_raise),
    ClassificationRule("overhead lateral raise", ExerciseType.LATERAL_RAISES, _overhead_lateral_raise),
    ClassificationRule("overhead incline press", ExerciseType.INCLINE_BENCH_PRESS, _overhead_incline_press),
    ClassificationRule("lat pulldown", ExerciseType.LAT_PULLDOWN, _lat_pulldown),
    ClassificationRule("pull up", ExerciseType.PULL_UP, _pull_up),
]

LYING_RULES: List[ClassificationRule] = [
    ClassificationRule("reclined twist", ExerciseType.RUSSIAN_TWIST, _reclined_twist),
    ClassificationRule("legs vertical", ExerciseType.T_BAR_ROW, _legs_vertical),
    ClassificationRule("legs not horizontal", ExerciseType.T_BAR_ROW, lambda f: not _legs_horizontal(f)),
    ClassificationRule("torso raised", ExerciseType.T_BAR_ROW,
                       lambda f: _shoulders_above_hips(f) and not _body_flat(f)),
    ClassificationRule("forearm plank", ExerciseType.PLANK, _forearm_plank),
    ClassificationRule("straight-arm plank", ExerciseType.PUSH_UP, _straight_flat_body),
    ClassificationRule("prone push up", ExerciseType.PUSH_UP, _prone_push_up),
    ClassificationRule("supine incline press", ExerciseType.INCLINE_BENCH_PRESS,
                       lambda f: _supine_or_knees_bent(f) and _moderate_recline(f)),
    ClassificationRule("supine flat press", ExerciseType.BENCH_PRESS, _supine_or_knees_bent),
    ClassificationRule("prone flat body", ExerciseType.PUSH_UP,
                       lambda f: _prone(f) and _legs_horizontal(f) and _body_flat(f)),
    ClassificationRule("lying incline press", ExerciseType.INCLINE_BENCH_PRESS, _moderate_recline),
    ClassificationRule("lying flat press", ExerciseType.BENCH_PRESS, lambda f: True),
]


def first_match(rules: Sequence[ClassificationRule], features: PoseFeatures) -> Optional[ClassificationRule]:
    for rule in rules:
        if rule.predicate(features):
            return rule
    return None


def classify_exercise(landmarks: Landmarks) -> Optional[ExerciseType]:
    """
    Guess the exercise shown in one frame.

    Returns:
        The matching ExerciseType, or None when the pose is incomplete or no
        rule is confident.
    """
    if not has_full_pose(landmarks):
        return None
    features = extract_features(landmarks)

    rule = first_match(GLOBAL_RULES, features)
    if rule is None and features.is_standing:
        rule = first_match(STANDING_RULES, features)
    elif rule is None and features.is_lying:
        rule = first_match(LYING_RULES, features)

    if rule is None:
        return None
    logger.debug(f"Classified frame as {rule.exercise.value} ({rule.name})")
    return rule.exercise
