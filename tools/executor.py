"""
Command Executor
----------------
Turns raw user input into a launch target plus arguments, and hands the
result to a Launcher.

Resolution order:
1. Leading token is a registered command -> its link target
2. Whole input starts with http://, https:// or ftp:// -> direct URL
3. Whole input looks like X:\\... -> direct path
4. Otherwise UnknownCommandError

Special commands ("!reload" etc.) are resolved but never launched; the
orchestrator handles them.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Optional, Tuple
import asyncio
import logging
import re

from commands.registry import Command, CommandRegistry
from core.errors import InputValidationError, SpecialCommandRoutingError, UnknownCommandError
from .launcher import Launcher, ProcessLauncher, is_url


DRIVE_PATH_PATTERN = re.compile(r"^[A-Za-z]:\\")

QUOTE_CHARS = ("\"", "'")


class ExecutionKind(Enum):
    """How an input was resolved."""
    COMMAND = auto()   # Registered command
    SPECIAL = auto()   # Registered command pointing at "!reload" etc.
    URL = auto()       # Direct URL
    PATH = auto()      # Direct drive path


@dataclass(frozen=True)
class Execution:
    """A resolved launch: what to start and with which arguments."""
    target: str
    arguments: str
    kind: ExecutionKind
    command: Optional[Command] = None

    def __repr__(self) -> str:
        return f"Execution({self.kind.name} {self.target!r} args={self.arguments!r})"


@dataclass
class ExecutionResult:
    """Result of handing an execution to the launcher."""
    command_input: str
    execution: Execution
    execution_time_ms: float = 0.0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __repr__(self) -> str:
        return f"ExecutionResult(✓ {self.execution.target} in {self.execution_time_ms:.1f}ms)"


def split_command(command_input: str) -> Tuple[str, str]:
    """
    Split input into (leading token, raw remainder).

    The token ends at the first whitespace outside quotes; its enclosing
    quotes are removed. The first whitespace run after it is the separator
    and the remainder is returned untouched.
    """
    text = command_input.lstrip()
    quote: Optional[str] = None
    token_chars = []
    i = 0

    while i < len(text):
        ch = text[i]
        if quote is not None:
            if ch == quote:
                quote = None
            else:
                token_chars.append(ch)
        elif ch in QUOTE_CHARS:
            quote = ch
        elif ch.isspace():
            break
        else:
            token_chars.append(ch)
        i += 1

    while i < len(text) and text[i].isspace():
        i += 1

    return "".join(token_chars), text[i:]


class CommandExecutor:
    """
    Resolves input against the registry and launches it.

    The launcher is injected so resolution can be tested without
    spawning processes.
    """

    def __init__(
        self,
        registry: CommandRegistry,
        launcher: Optional[Launcher] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.registry = registry
        self.launcher = launcher or ProcessLauncher()
        self._logger = logger or logging.getLogger("keylauncher.tools.executor")

    def resolve(self, command_input: str) -> Execution:
        """Pure resolution. No side effects."""
        if command_input is None or not command_input.strip():
            raise InputValidationError("Command input cannot be empty")

        name, runtime_args = split_command(command_input)
        command = self.registry.get_command(name) if name else None

        if command is not None:
            arguments = runtime_args or (command.arguments or "")
            kind = ExecutionKind.SPECIAL if command.is_special else ExecutionKind.COMMAND
            return Execution(
                target=command.link_to.strip(),
                arguments=arguments,
                kind=kind,
                command=command
            )

        text = command_input.strip()
        if is_url(text):
            return Execution(target=text, arguments="", kind=ExecutionKind.URL)
        if DRIVE_PATH_PATTERN.match(text):
            return Execution(target=text, arguments="", kind=ExecutionKind.PATH)

        raise UnknownCommandError(text)

    def get_execution(self, command_input: str) -> str:
        """Launch target the input resolves to."""
        return self.resolve(command_input).target

    def get_arguments(self, command_input: str) -> str:
        """Argument string the input resolves to."""
        return self.resolve(command_input).arguments

    async def execute(self, command_input: str) -> ExecutionResult:
        """
        Resolve and launch.

        Waits only for the launch call itself. Launcher errors propagate
        unchanged.
        """
        execution = self.resolve(command_input)

        if execution.kind is ExecutionKind.SPECIAL:
            raise SpecialCommandRoutingError(
                f"Special command '{execution.target}' must be handled by the orchestrator",
                execution.target
            )

        self._logger.info(f"Execute: {execution.target} {execution.arguments}".rstrip())
        start_time = datetime.now(timezone.utc)

        await asyncio.to_thread(self.launcher.launch, execution.target, execution.arguments)

        execution_time = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000
        return ExecutionResult(
            command_input=command_input,
            execution=execution,
            execution_time_ms=execution_time
        )
