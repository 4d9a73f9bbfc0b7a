"""Tests for the server entry point's startup handling."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from daynotes.api.server import run


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("WT_NOTES_DATA_DIR", str(tmp_path / "data"))
    for name in ("WT_NOTES_HOST", "WT_NOTES_PORT", "WT_NOTES_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def test_run_initializes_database_and_serves(tmp_path: Path) -> None:
    with patch("daynotes.api.server.uvicorn.run") as serve:
        assert run() == 0

    serve.assert_called_once()
    assert serve.call_args.kwargs["port"] == 8765
    assert serve.call_args.kwargs["log_level"] == "info"
    assert (tmp_path / "data" / "wt-database.sqlite").exists()


def test_bad_port_aborts_startup(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WT_NOTES_PORT", "not-a-port")

    with patch("daynotes.api.server.uvicorn.run") as serve:
        assert run() == 1

    serve.assert_not_called()


def test_bad_log_level_aborts_startup(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WT_NOTES_LOG_LEVEL", "chatty")

    with patch("daynotes.api.server.uvicorn.run") as serve:
        assert run() == 1

    serve.assert_not_called()


def test_unusable_data_dir_aborts_startup(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("file in the way", encoding="utf-8")
    monkeypatch.setenv("WT_NOTES_DATA_DIR", str(blocker / "nested"))

    with patch("daynotes.api.server.uvicorn.run") as serve:
        assert run() == 1

    serve.assert_not_called()
