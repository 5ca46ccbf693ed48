"""
Orchestrator
------------
Central coordinator for the launcher.

Ties configuration load/reload to the command registry and the
autocompleter, dispatches the built-in special commands and routes
submitted input to the executor.

Reload rule: the new configuration is loaded and validated first and only
then swapped in. A reload against a missing or broken file leaves the
active commands exactly as they were.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, List, Optional
import asyncio
import logging
import os

from commands.autocomplete import AutoCompleter
from commands.config import DEFAULT_CONFIG_PATH, CommandsConfig, ConfigLoader
from commands.registry import Command, CommandRegistry
from infra.logging import SubmissionContext
from tools.executor import CommandExecutor, ExecutionResult
from tools.launcher import Launcher

from .errors import (
    InitializationError,
    InputValidationError,
    InvalidStateError,
    NotASpecialCommandError,
    ReloadError,
    ReloadPreconditionError,
    UnknownSpecialCommandError,
)
from .state_machine import State, StateMachine
from .version import APP_NAME, __version__


SPECIAL_PREFIX = "!"
RELOAD_COMMAND = "!reload"
VERSION_COMMAND = "!version"
EXIT_COMMAND = "!exit"
SPECIAL_COMMANDS = (RELOAD_COMMAND, VERSION_COMMAND, EXIT_COMMAND)

RELOAD_SUCCESS_MESSAGE = "Configuration reloaded successfully"


@dataclass
class OrchestratorConfig:
    """Configuration for the orchestrator and its host."""
    config_path: str = DEFAULT_CONFIG_PATH
    log_level: str = "INFO"
    log_dir: str = "logs"
    history_file: str = "~/.keylauncher/history"
    app_name: str = APP_NAME

    @classmethod
    def from_env(cls, **overrides) -> "OrchestratorConfig":
        """Defaults, then KEYLAUNCHER_* environment variables, then overrides."""
        config = cls()

        config_path = os.environ.get("KEYLAUNCHER_CONFIG")
        if config_path:
            config.config_path = config_path

        log_level = os.environ.get("KEYLAUNCHER_LOG_LEVEL")
        if log_level:
            config.log_level = log_level.upper()

        log_dir = os.environ.get("KEYLAUNCHER_LOG_DIR")
        if log_dir:
            config.log_dir = log_dir

        for key, value in overrides.items():
            if value is not None:
                setattr(config, key, value)

        return config


class SpecialCommandStatus(Enum):
    """Outcome of a special command."""
    MESSAGE = auto()         # Show message to the user
    EXIT_REQUESTED = auto()  # Host must shut down gracefully


@dataclass(frozen=True)
class SpecialCommandResult:
    """Tagged result of special command dispatch."""
    command: str
    status: SpecialCommandStatus
    message: Optional[str] = None

    @property
    def exit_requested(self) -> bool:
        return self.status is SpecialCommandStatus.EXIT_REQUESTED


@dataclass
class CommandResult:
    """Result of a submitted input."""
    command_input: str
    special: Optional[SpecialCommandResult] = None
    execution: Optional[ExecutionResult] = None

    @property
    def exit_requested(self) -> bool:
        return self.special is not None and self.special.exit_requested

    @property
    def message(self) -> Optional[str]:
        if self.special is not None:
            return self.special.message
        return None

    def __repr__(self) -> str:
        kind = "special" if self.special is not None else "launch"
        return f"CommandResult({kind} {self.command_input!r})"


class ApplicationOrchestrator:
    """
    Central orchestrator for the launcher.

    Responsibilities:
    - Lifecycle state (UNINITIALIZED -> READY <-> RELOADING)
    - Load/reload configuration into registry + autocompleter
    - Special command dispatch
    - Routing submitted input

    Load and reload are serialized by an asyncio lock; readers of the
    registry and autocompleter never block.
    """

    def __init__(
        self,
        config: Optional[OrchestratorConfig] = None,
        loader: Optional[ConfigLoader] = None,
        registry: Optional[CommandRegistry] = None,
        autocompleter: Optional[AutoCompleter] = None,
        executor: Optional[CommandExecutor] = None,
        launcher: Optional[Launcher] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config or OrchestratorConfig()
        self._logger = logger or logging.getLogger("keylauncher.orchestrator")
        self._state_machine = StateMachine(logger=self._logger.getChild("state"))

        self.loader = loader or ConfigLoader()
        self.registry = registry or CommandRegistry()
        self.autocompleter = autocompleter or AutoCompleter()
        self.executor = executor or CommandExecutor(self.registry, launcher=launcher)

        self._config_path: Optional[str] = None
        self._lock = asyncio.Lock()

        self._on_reload: Optional[Callable[[int], None]] = None

    @property
    def state(self) -> State:
        """Get current lifecycle state."""
        return self._state_machine.state

    @property
    def state_machine(self) -> StateMachine:
        return self._state_machine

    @property
    def config_path(self) -> Optional[str]:
        """Path the active configuration was loaded from."""
        return self._config_path

    async def initialize(self, config_path: str) -> None:
        """
        Load the configuration and register every command.

        Raises:
            InputValidationError: config_path is empty
            InvalidStateError: already initialized
            InitializationError: loading failed (cause chained)
        """
        if config_path is None or not str(config_path).strip():
            raise InputValidationError("Configuration path cannot be null or empty")

        async with self._lock:
            if self.state is not State.UNINITIALIZED:
                raise InvalidStateError(
                    f"Cannot initialize in state {self.state.name}; use reload instead"
                )

            self._logger.info(f"Initializing from {config_path}")

            try:
                loaded = await self.loader.load_async(config_path)
                commands = self._build_commands(loaded)
            except Exception as e:
                self._logger.error(f"Initialization failed: {e}")
                raise InitializationError(
                    f"Failed to initialize application from configuration file "
                    f"'{config_path}': {e}",
                    path=config_path,
                    cause=e
                ) from e

            self._apply(commands)
            self._config_path = config_path
            self._state_machine.transition(
                State.READY, "Configuration loaded", {"commands": len(commands)}
            )

    async def reload_configuration(self) -> int:
        """
        Reload from the stored path and replace the command set wholesale.

        Returns:
            Number of commands now registered

        Raises:
            ReloadPreconditionError: initialize() has not succeeded yet
            ReloadError: loading failed; previous commands are kept
        """
        async with self._lock:
            if self.state is State.UNINITIALIZED or not self._config_path:
                raise ReloadPreconditionError(
                    "Cannot reload configuration: no configuration file path is set. "
                    "Call initialize first."
                )

            path = self._config_path
            self._state_machine.transition(State.RELOADING, f"Reloading {path}")

            try:
                loaded = await self.loader.load_async(path)
                commands = self._build_commands(loaded)
            except Exception as e:
                self._logger.warning(f"Reload failed, keeping current commands: {e}")
                self._state_machine.transition(State.READY, "Reload failed")
                raise ReloadError(
                    f"Failed to reload configuration from '{path}': {e}",
                    path=path,
                    cause=e
                ) from e

            self._apply(commands)
            self._state_machine.transition(
                State.READY, "Configuration reloaded", {"commands": len(commands)}
            )

        if self._on_reload:
            self._on_reload(len(commands))

        return len(commands)

    def _build_commands(self, loaded: CommandsConfig) -> List[Command]:
        """Copy config entries into Command objects (off to the side)."""
        return [
            Command(
                name=(entry.name or "").strip(),
                link_to=(entry.link_to or "").strip(),
                description=entry.description,
                arguments=entry.arguments,
            )
            for entry in loaded.commands
        ]

    def _apply(self, commands: List[Command]) -> None:
        """
        Swap the new command set into registry and autocompleter.

        Two assignments, registry first. Between them a reader may get a
        candidate from the old word list that the registry no longer has;
        get_command() returns None for it and submitting it raises
        UnknownCommandError.
        """
        self.registry.replace_all(commands)
        self.autocompleter.update_word_list(self.registry.names())
        self._logger.info(f"Active commands: {len(self.registry)}")

    async def handle_special_command(self, command: str) -> SpecialCommandResult:
        """
        Dispatch !reload, !version or !exit (case-insensitive).

        !exit does not raise; it returns a result whose status is
        EXIT_REQUESTED and the host is expected to shut down.
        """
        if command is None or not command.strip():
            raise InputValidationError("Command cannot be null or empty")

        token = command.strip()
        if not token.startswith(SPECIAL_PREFIX):
            raise NotASpecialCommandError(
                f"Not a special command: '{token}'. Special commands must start with '!'",
                token
            )

        normalized = token.lower()

        if normalized == RELOAD_COMMAND:
            await self.reload_configuration()
            return SpecialCommandResult(token, SpecialCommandStatus.MESSAGE, RELOAD_SUCCESS_MESSAGE)

        if normalized == VERSION_COMMAND:
            return SpecialCommandResult(token, SpecialCommandStatus.MESSAGE, self.get_version())

        if normalized == EXIT_COMMAND:
            self._logger.info("Exit requested")
            return SpecialCommandResult(
                token, SpecialCommandStatus.EXIT_REQUESTED, "Exit requested"
            )

        raise UnknownSpecialCommandError(
            f"Unknown special command: '{token}'. "
            f"Known commands are: {', '.join(SPECIAL_COMMANDS)}",
            token
        )

    def get_version(self) -> str:
        """Version string for this build."""
        return f"{self.config.app_name} Version {__version__}"

    def is_special_command(self, text: str) -> bool:
        """True when text is routed to special command dispatch."""
        return bool(text) and text.strip().startswith(SPECIAL_PREFIX)

    async def submit(self, text: str) -> CommandResult:
        """
        Route one submitted input.

        "!..." input and registered commands whose target is "!..." go to
        special dispatch; everything else is executed.
        """
        with SubmissionContext():
            if self.is_special_command(text):
                special = await self.handle_special_command(text)
                return CommandResult(command_input=text, special=special)

            execution = self.executor.resolve(text)
            if execution.command is not None and execution.command.is_special:
                special = await self.handle_special_command(execution.target)
                return CommandResult(command_input=text, special=special)

            result = await self.executor.execute(text)
            return CommandResult(command_input=text, execution=result)

    def complete(self, text: str) -> str:
        """Longest completion for text."""
        return self.autocompleter.auto_complete_word(text)

    def get_candidates(self, text: str) -> List[str]:
        """All command names starting with text."""
        return self.autocompleter.get_candidates(text)

    def get_status(self) -> dict:
        """Current orchestrator status."""
        return {
            "state": self.state.name,
            "config_path": self._config_path,
            "commands_loaded": len(self.registry),
            "version": __version__,
        }

    def on_reload(self, callback: Callable[[int], None]) -> None:
        """Register callback for successful reloads (receives command count)."""
        self._on_reload = callback
