# Commands module - Command registry, completion and configuration
# This module does NOT launch anything, it only stores and looks up commands

from .registry import Command, CommandRegistry, command_key
from .autocomplete import AutoCompleter
from .config import (
    CommandEntry, CommandsConfig, ConfigLoader, ConfigInitializer,
    DEFAULT_CONFIG_PATH, SAMPLE_CONFIG,
)

__all__ = [
    "Command", "CommandRegistry", "command_key",
    "AutoCompleter",
    "CommandEntry", "CommandsConfig", "ConfigLoader", "ConfigInitializer",
    "DEFAULT_CONFIG_PATH", "SAMPLE_CONFIG",
]
