"""
KeyLauncher Test Configuration
------------------------------
Shared fixtures and configuration for all tests.

Launch side effects are blocked: nothing may open a browser or spawn a
process during a test run.
"""

import logging
import os
import subprocess
import sys
import webbrowser
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import infra.logging as launcher_logging  # noqa: E402
from core.orchestrator import ApplicationOrchestrator, OrchestratorConfig  # noqa: E402
from tools.launcher import RecordingLauncher  # noqa: E402


# =============================================================================
# Test Isolation: Block Side Effects
# =============================================================================

@pytest.fixture(autouse=True)
def block_browser_open(monkeypatch):
    """
    Block webbrowser.open() during tests.

    If something tries to open a browser, it raises RuntimeError.
    """
    def _blocked(*args, **kwargs):
        raise RuntimeError(
            "webbrowser.open() is forbidden during tests. "
            "Inject a RecordingLauncher or mock the call."
        )

    monkeypatch.setattr(webbrowser, "open", _blocked)
    monkeypatch.setattr(webbrowser, "open_new", _blocked)
    monkeypatch.setattr(webbrowser, "open_new_tab", _blocked)


@pytest.fixture(autouse=True)
def block_process_spawn(monkeypatch):
    """
    Block subprocess.Popen() and os.startfile() during tests.

    Tests that exercise ProcessLauncher patch these themselves.
    """
    def _blocked(*args, **kwargs):
        raise RuntimeError(
            "Spawning processes is forbidden during tests. "
            "Inject a RecordingLauncher or mock the call."
        )

    monkeypatch.setattr(subprocess, "Popen", _blocked)
    monkeypatch.setattr(os, "startfile", _blocked, raising=False)


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo configure_logging() so caplog sees records in later tests."""
    yield
    root = logging.getLogger(launcher_logging.ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.propagate = True
    root.setLevel(logging.NOTSET)
    launcher_logging._logging_initialized = False
    launcher_logging._log_file_path = None


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep KEYLAUNCHER_* variables from the developer shell out of tests."""
    for key in ("KEYLAUNCHER_CONFIG", "KEYLAUNCHER_LOG_LEVEL", "KEYLAUNCHER_LOG_DIR"):
        monkeypatch.delenv(key, raising=False)


# =============================================================================
# Configuration Files
# =============================================================================

BASIC_CONFIG = """\
commands:
  - name: google
    linkto: https://www.google.com/
    description: Open Google search
  - name: github
    linkto: https://github.com/
  - name: notepad
    linkto: notepad.exe
    arguments: readme.txt
"""


@pytest.fixture(scope="session")
def project_root():
    """Return the project root path."""
    return PROJECT_ROOT


@pytest.fixture
def write_config(tmp_path):
    """Write YAML text to a file under tmp_path and return its path as str."""
    def _write(text: str, name: str = "commands.yaml") -> str:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def config_file(write_config):
    """A valid configuration with google, github and notepad."""
    return write_config(BASIC_CONFIG)


@pytest.fixture
def recording_launcher():
    """Launcher that records calls instead of starting anything."""
    return RecordingLauncher()


@pytest.fixture
def orchestrator(recording_launcher, tmp_path):
    """Uninitialized orchestrator wired to a RecordingLauncher."""
    config = OrchestratorConfig(log_dir=str(tmp_path / "logs"))
    return ApplicationOrchestrator(config, launcher=recording_launcher)
