# Core module - Errors, lifecycle state and the orchestrator
# The orchestrator is the ONLY coordinator of load/reload and special commands.
#
# core.orchestrator is imported explicitly: it depends on commands/ and tools/,
# which themselves depend on core.errors.

from .version import __version__, APP_NAME
from .state_machine import StateMachine, State, StateTransition
from .errors import (
    ErrorHandler, ErrorRecord, ErrorCategory, categorize,
    LauncherError, InputValidationError,
    ConfigError, ConfigNotFoundError, ConfigParseError, ConfigValidationError, ConfigWriteError,
    UnknownCommandError,
    SpecialCommandError, UnknownSpecialCommandError, NotASpecialCommandError,
    SpecialCommandRoutingError,
    ReloadPreconditionError, InvalidStateError,
    ConfigurationLoadError, InitializationError, ReloadError,
)

__all__ = [
    "__version__", "APP_NAME",
    "StateMachine", "State", "StateTransition",
    "ErrorHandler", "ErrorRecord", "ErrorCategory", "categorize",
    "LauncherError", "InputValidationError",
    "ConfigError", "ConfigNotFoundError", "ConfigParseError",
    "ConfigValidationError", "ConfigWriteError",
    "UnknownCommandError",
    "SpecialCommandError", "UnknownSpecialCommandError", "NotASpecialCommandError",
    "SpecialCommandRoutingError",
    "ReloadPreconditionError", "InvalidStateError",
    "ConfigurationLoadError", "InitializationError", "ReloadError",
]
