from __future__ import annotations

import logging
from pathlib import Path

import pytest

from sbchargelimit.core.logging_setup import setup_logging


@pytest.fixture
def clean_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers[:]:
        if handler not in handlers:
            handler.close()
            root.removeHandler(handler)
    root.setLevel(level)


def test_log_file_created_under_cache(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, clean_root_logger) -> None:
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path))
    monkeypatch.setenv("SBCHARGELIMIT_LOG", "debug")

    path = setup_logging(to_stderr=False)
    logging.getLogger("sbchargelimit.test").debug("hello")

    assert path is not None
    assert path.parent == tmp_path / "sbchargelimit"
    assert path.name.startswith("log_")
    assert clean_root_logger.level == logging.DEBUG
    for handler in clean_root_logger.handlers:
        handler.flush()
    assert "hello" in path.read_text(encoding="utf-8")


def test_unknown_level_falls_back_to_info(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, clean_root_logger) -> None:
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path))
    monkeypatch.setenv("SBCHARGELIMIT_LOG", "chatty")

    setup_logging(to_stderr=False)
    assert clean_root_logger.level == logging.INFO
