# Tools module - Command resolution and process launching
# The executor decides WHAT to launch; the launcher is the only code that
# touches the OS

from .launcher import Launcher, ProcessLauncher, RecordingLauncher, LaunchCall, is_url, URL_SCHEMES
from .executor import (
    CommandExecutor, Execution, ExecutionKind, ExecutionResult, split_command,
)

__all__ = [
    "Launcher",
    "ProcessLauncher",
    "RecordingLauncher",
    "LaunchCall",
    "is_url",
    "URL_SCHEMES",
    "CommandExecutor",
    "Execution",
    "ExecutionKind",
    "ExecutionResult",
    "split_command",
]
