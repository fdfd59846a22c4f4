"""
Per-exercise analyzers. Importing this package registers all of them.
"""

from .bench_press import BENCH_PRESS_PROFILE
from .bicep_curl import CURL_PROFILE
from .chest_fly import CHEST_FLY_PROFILE
from .incline_bench import INCLINE_BENCH_PROFILE
from .lat_pulldown import LAT_PULLDOWN_PROFILE
from .lateral_raise import LATERAL_RAISE_PROFILE
from .leg_extension import LEG_EXTENSION_PROFILE
from .leg_raises import LEG_RAISES_PROFILE
from .plank import PlankAnalyzer
from .pull_up import PULL_UP_PROFILE
from .push_up import PUSH_UP_PROFILE
from .russian_twist import RussianTwistAnalyzer
from .squat import SQUAT_PROFILE, SquatAnalyzer
from .t_bar_row import ROW_PROFILE
from .tricep_dips import DIPS_PROFILE

__all__ = [
    'BENCH_PRESS_PROFILE',
    'CURL_PROFILE',
    'CHEST_FLY_PROFILE',
    'INCLINE_BENCH_PROFILE',
    'LAT_PULLDOWN_PROFILE',
    'LATERAL_RAISE_PROFILE',
    'LEG_EXTENSION_PROFILE',
    'LEG_RAISES_PROFILE',
    'PlankAnalyzer',
    'PULL_UP_PROFILE',
    'PUSH_UP_PROFILE',
    'RussianTwistAnalyzer',
    'SQUAT_PROFILE',
    'SquatAnalyzer',
    'ROW_PROFILE',
    'DIPS_PROFILE',
]
