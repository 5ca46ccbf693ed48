"""
Process Launcher Tests
----------------------
Platform dispatch with the OS calls mocked out.
"""

import os
import shutil
import subprocess
import webbrowser

import pytest

from tools.launcher import ProcessLauncher, RecordingLauncher, LaunchCall, is_url


@pytest.fixture
def spawned(monkeypatch):
    """Capture argv passed to subprocess.Popen."""
    calls = []

    def _popen(argv, **kwargs):
        calls.append(argv)
        assert kwargs.get("start_new_session") is True
        assert kwargs.get("stdout") is subprocess.DEVNULL

    monkeypatch.setattr(subprocess, "Popen", _popen)
    return calls


@pytest.fixture
def opened(monkeypatch):
    """Capture URLs passed to webbrowser.open."""
    urls = []

    def _open(url, *args, **kwargs):
        urls.append(url)
        return True

    monkeypatch.setattr(webbrowser, "open", _open)
    return urls


class TestIsUrl:

    @pytest.mark.parametrize("text", [
        "http://a", "https://a", "ftp://a", "HTTPS://A", "Http://a",
    ])
    def test_urls(self, text):
        assert is_url(text)

    @pytest.mark.parametrize("text", ["www.google.com", "mailto:x@y", "C:\\x", "notepad"])
    def test_not_urls(self, text):
        assert not is_url(text)


class TestUrls:

    def test_url_goes_to_browser(self, opened, spawned):
        ProcessLauncher(system="Linux").launch("https://example.com")
        assert opened == ["https://example.com"]
        assert spawned == []

    def test_no_browser(self, monkeypatch):
        monkeypatch.setattr(webbrowser, "open", lambda url, *a, **k: False)
        with pytest.raises(OSError):
            ProcessLauncher(system="Linux").launch("https://example.com")


class TestPosix:

    def test_executable_with_arguments(self, monkeypatch, spawned):
        monkeypatch.setattr(shutil, "which", lambda name: f"/usr/bin/{name}")
        ProcessLauncher(system="Linux").launch("code", "'my file.txt' --wait")

        assert spawned == [["/usr/bin/code", "my file.txt", "--wait"]]

    def test_file_opened_with_xdg_open(self, monkeypatch, spawned):
        monkeypatch.setattr(
            shutil, "which", lambda name: "/usr/bin/xdg-open" if name == "xdg-open" else None
        )
        ProcessLauncher(system="Linux").launch("/home/me/report.pdf")

        assert spawned == [["/usr/bin/xdg-open", "/home/me/report.pdf"]]

    def test_missing_executable_with_arguments(self, monkeypatch, spawned):
        monkeypatch.setattr(shutil, "which", lambda name: None)
        with pytest.raises(FileNotFoundError):
            ProcessLauncher(system="Linux").launch("nothing-here", "--flag")
        assert spawned == []

    def test_missing_xdg_open(self, monkeypatch, spawned):
        monkeypatch.setattr(shutil, "which", lambda name: None)
        with pytest.raises(FileNotFoundError):
            ProcessLauncher(system="Linux").launch("/tmp/file.txt")

    def test_unbalanced_quotes_are_launch_failure(self, monkeypatch, spawned):
        monkeypatch.setattr(shutil, "which", lambda name: f"/usr/bin/{name}")

        with pytest.raises(OSError) as exc_info:
            ProcessLauncher(system="Linux").launch("ls", '"unterminated')

        assert "Invalid arguments for ls" in str(exc_info.value)
        assert spawned == []


class TestOtherPlatforms:

    def test_macos_uses_open(self, spawned):
        ProcessLauncher(system="Darwin").launch("/Applications/Notes.app", "--x 1")
        assert spawned == [["open", "/Applications/Notes.app", "--args", "--x", "1"]]

    def test_macos_url_with_arguments(self, spawned, opened):
        ProcessLauncher(system="Darwin").launch("https://example.com", "--new")
        assert opened == []
        assert spawned == [["open", "https://example.com", "--args", "--new"]]

    def test_macos_unbalanced_quotes(self, spawned):
        with pytest.raises(OSError):
            ProcessLauncher(system="Darwin").launch("/Applications/Notes.app", "'open")
        assert spawned == []

    def test_windows_uses_startfile(self, monkeypatch):
        calls = []

        def _startfile(target, *args, **kwargs):
            calls.append((target, kwargs.get("arguments")))

        monkeypatch.setattr(os, "startfile", _startfile, raising=False)
        ProcessLauncher(system="Windows").launch("notepad.exe", "readme.txt")
        ProcessLauncher(system="Windows").launch("C:\\Windows")

        assert calls == [("notepad.exe", "readme.txt"), ("C:\\Windows", None)]


class TestRecordingLauncher:

    def test_records(self):
        launcher = RecordingLauncher()
        launcher.launch("a", "b")
        launcher.launch("c")
        assert launcher.calls == [LaunchCall("a", "b"), LaunchCall("c", "")]

    def test_error(self):
        launcher = RecordingLauncher(error=PermissionError("denied"))
        with pytest.raises(PermissionError):
            launcher.launch("a")
        assert launcher.calls == []
