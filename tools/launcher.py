"""
Process Launcher
----------------
Starts a resolved target. Fire-and-forget: returns as soon as the OS has
accepted the launch and never waits for the child process.

Rules:
- No shell=True in subprocess
- URLs without arguments go to the default browser
- Launch failures propagate unchanged
"""

from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Tuple
import logging
import os
import platform
import shlex
import shutil
import subprocess
import webbrowser


URL_SCHEMES: Tuple[str, ...] = ("http://", "https://", "ftp://")


def is_url(target: str) -> bool:
    """True when target starts with a recognized URL scheme (any case)."""
    return target.lower().startswith(URL_SCHEMES)


class Launcher(Protocol):
    """Capability to start a target with an argument string."""

    def launch(self, target: str, arguments: str = "") -> None:
        ...


class ProcessLauncher:
    """
    Launches URLs, files and executables using the platform's facilities.
    """

    def __init__(self, system: Optional[str] = None, logger: Optional[logging.Logger] = None):
        self._system = system or platform.system()
        self._logger = logger or logging.getLogger("keylauncher.tools.launcher")

    def launch(self, target: str, arguments: str = "") -> None:
        """Start target. Raises OSError subclasses when the OS refuses."""
        self._logger.info(f"Launch: {target} {arguments}".rstrip())

        if is_url(target) and not arguments:
            if not webbrowser.open(target):
                raise OSError(f"No browser available to open {target}")
            return

        if self._system == "Windows":
            self._launch_windows(target, arguments)
        elif self._system == "Darwin":
            self._launch_macos(target, arguments)
        else:
            self._launch_posix(target, arguments)

    def _launch_windows(self, target: str, arguments: str) -> None:
        # ShellExecute resolves URLs, file associations and PATH executables
        if arguments:
            os.startfile(target, arguments=arguments)  # type: ignore[attr-defined]
        else:
            os.startfile(target)  # type: ignore[attr-defined]

    def _launch_macos(self, target: str, arguments: str) -> None:
        argv = ["open", target]
        if arguments:
            argv += ["--args", *self._split_arguments(target, arguments)]
        self._spawn(argv)

    def _launch_posix(self, target: str, arguments: str) -> None:
        executable = shutil.which(target)
        if executable:
            self._spawn([executable, *self._split_arguments(target, arguments)])
            return

        if arguments:
            raise FileNotFoundError(f"Executable not found: {target}")

        opener = shutil.which("xdg-open")
        if opener is None:
            raise FileNotFoundError(f"Cannot open {target}: xdg-open is not installed")
        self._spawn([opener, target])

    def _split_arguments(self, target: str, arguments: str) -> List[str]:
        """Shell-style split; malformed quoting is a launch failure."""
        try:
            return shlex.split(arguments)
        except ValueError as e:
            raise OSError(f"Invalid arguments for {target}: {e}") from e

    def _spawn(self, argv: List[str]) -> None:
        subprocess.Popen(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )


@dataclass
class LaunchCall:
    """One recorded launch."""
    target: str
    arguments: str


@dataclass
class RecordingLauncher:
    """
    Launcher that records calls instead of starting processes.

    Set `error` to make every launch raise it.
    """
    calls: List[LaunchCall] = field(default_factory=list)
    error: Optional[BaseException] = None

    def launch(self, target: str, arguments: str = "") -> None:
        if self.error is not None:
            raise self.error
        self.calls.append(LaunchCall(target=target, arguments=arguments))
