"""
Pytest configuration and shared fixtures for tmuxdev tests.
"""

import logging
import os

# Add src to path for imports
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from fakes import FakeRegistry, RecordingNotifier, ScriptedPrompter, make_resolver
from tmuxdev.core.lifecycle import LifecycleController


@pytest.fixture
def registry() -> FakeRegistry:
    """Empty in-memory session registry."""
    return FakeRegistry()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def controller_factory(
    registry: FakeRegistry, notifier: RecordingNotifier
) -> Callable[..., LifecycleController]:
    """Build a controller over the fake registry with scripted answers."""

    def _factory(*answers, cwd="/home/dev/myapp", branch=None) -> LifecycleController:
        return LifecycleController(
            resolver=make_resolver(cwd, branch),
            registry=registry,
            prompter=ScriptedPrompter(*answers),
            notifier=notifier,
            dev_command="pnpm dev",
        )

    return _factory


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Undo handler changes made by setup_logging during a test."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level

    yield

    for handler in root_logger.handlers[:]:
        if handler not in handlers:
            root_logger.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root_logger.handlers:
            root_logger.addHandler(handler)
    root_logger.setLevel(level)


@pytest.fixture(autouse=True)
def isolated_config_env(monkeypatch, tmp_path):
    """Keep user config files and TMUXDEV_* variables out of tests."""
    for name in list(os.environ):
        if name.startswith("TMUXDEV_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
