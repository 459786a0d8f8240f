"""Shared pytest fixtures."""

import pytest

from mentormatch import config
from tests.factories import make_client, make_volunteer


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep tests away from the real data directory and MENTORMATCH_* variables."""
    for name in (config.ENV_MIN_SCORE, config.ENV_MAX_CLIENTS, config.ENV_SOLVER_MODE):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "DEFAULT_CONFIG_PATH", tmp_path / "missing-config.yaml")
    monkeypatch.setattr(config, "DEFAULT_SNAPSHOT_PATH", tmp_path / "missing-snapshot.yaml")


@pytest.fixture
def client():
    return make_client("alice")


@pytest.fixture
def volunteer():
    return make_volunteer("victor")


