"""
Command Registry
----------------
Authoritative name -> Command store.
No OS execution. No completion logic. Only lookup.

Names are keyed by their casefolded form. Writers build a new mapping and
swap it in with one assignment (copy-on-write), so readers never need a
lock and never observe a half-applied change.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple
import logging
import threading

from core.errors import InputValidationError


def command_key(name: str) -> str:
    """Normalized registry key for a command name."""
    return name.strip().casefold()


@dataclass(frozen=True)
class Command:
    """A named launch target."""
    name: str
    link_to: str
    description: Optional[str] = None
    arguments: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise InputValidationError("Command name cannot be empty")
        if not isinstance(self.link_to, str) or not self.link_to.strip():
            raise InputValidationError(f"Command '{self.name}' has an empty link target")

    @property
    def key(self) -> str:
        return command_key(self.name)

    @property
    def is_special(self) -> bool:
        """True when the target is a built-in like "!reload"."""
        return self.link_to.strip().startswith("!")

    def __repr__(self) -> str:
        return f"Command(name={self.name}, link_to={self.link_to})"


class CommandRegistry:
    """
    Registry of launchable commands.

    Responsibilities:
    - Insert/replace/remove commands by case-insensitive name
    - Answer existence and lookup queries
    - Hand out immutable snapshots

    Mutations are serialized; reads are lock-free.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._commands: Dict[str, Command] = {}
        self._write_lock = threading.Lock()
        self._logger = logger or logging.getLogger("keylauncher.commands.registry")

    def register_command(self, command: Command) -> None:
        """Insert or replace a command by name."""
        if not isinstance(command, Command):
            raise InputValidationError("Command cannot be None")

        with self._write_lock:
            updated = dict(self._commands)
            replaced = updated.pop(command.key, None)
            updated[command.key] = command
            self._commands = updated

        if replaced is not None:
            self._logger.debug(f"Replaced command: {command.name}")
        else:
            self._logger.debug(f"Registered command: {command.name}")

    def remove_command(self, name: str) -> bool:
        """Remove a command. Returns True if one was removed."""
        if not name or not name.strip():
            return False

        key = command_key(name)
        with self._write_lock:
            if key not in self._commands:
                return False
            updated = dict(self._commands)
            del updated[key]
            self._commands = updated

        self._logger.debug(f"Removed command: {name}")
        return True

    def clear_commands(self) -> None:
        """Remove every command."""
        with self._write_lock:
            self._commands = {}
        self._logger.debug("Cleared all commands")

    def replace_all(self, commands: Iterable[Command]) -> None:
        """
        Replace the whole registry in one step.

        The new mapping is built first; if any entry is invalid the live
        registry is left untouched.
        """
        staged: Dict[str, Command] = {}
        for command in commands:
            if not isinstance(command, Command):
                raise InputValidationError("Command cannot be None")
            staged.pop(command.key, None)
            staged[command.key] = command

        with self._write_lock:
            self._commands = staged

        self._logger.info(f"Command registry rebuilt: {len(staged)} commands")

    def has_command(self, name: str) -> bool:
        """Case-insensitive existence check."""
        if not name or not name.strip():
            return False
        return command_key(name) in self._commands

    def get_command(self, name: str) -> Optional[Command]:
        """Look up a command by name, ignoring case."""
        if not name or not name.strip():
            return None
        return self._commands.get(command_key(name))

    def get_all_commands(self) -> Tuple[Command, ...]:
        """Immutable snapshot of every command."""
        return tuple(self._commands.values())

    def names(self) -> List[str]:
        """Registered names, in registry order."""
        return [cmd.name for cmd in self._commands.values()]

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has_command(name)
