"""Pytest fixtures for larder tests."""

import pytest

from larder.testing import CallRecorder


@pytest.fixture
def recorder():
    """Provide a call recorder."""
    recorder = CallRecorder()
    yield recorder
    recorder.clear()


@pytest.fixture
def config_dir(tmp_path):
    """Directory with a Python and a YAML configuration file."""
    (tmp_path / "settings.py").write_text('container.set("loaded", "loaded")\n')
    (tmp_path / "values.yaml").write_text("loaded: from yaml\n")
    return tmp_path
