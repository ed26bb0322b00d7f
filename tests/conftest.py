import os

import pytest

from config import get_settings


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Start every test from default settings, whatever the shell exports."""
    for name in list(os.environ):
        if name.startswith("PHOTOSYNTH_"):
            monkeypatch.delenv(name)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
