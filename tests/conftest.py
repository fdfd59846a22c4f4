import json

import pytest

from form_engine.exercise_analysis.config_utils import load_engine_config
from form_engine.exercise_analysis.registry import create_analyzer


@pytest.fixture
def engine_config():
    return load_engine_config()


@pytest.fixture
def make_analyzer(engine_config):
    def factory(exercise):
        return create_analyzer(exercise, engine_config)
    return factory


@pytest.fixture
def write_recording(tmp_path):
    def writer(data, name="session.json"):
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return str(path)
    return writer
