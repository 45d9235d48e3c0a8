"""Shared pytest fixtures and configuration."""

from pathlib import Path

import pytest

from rpcwire.core.constants import TOKEN_ENV_VAR


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME at a temp dir and clear token env so discovery is deterministic."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv(TOKEN_ENV_VAR, raising=False)
    return home
