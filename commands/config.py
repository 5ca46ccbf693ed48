"""
Command Configuration
---------------------
Loads commands.yaml into a validated CommandsConfig.

Format:

    commands:
      - name: google
        linkto: https://www.google.com/
        description: Open Google search
        arguments: --new-window      # optional

Raises ConfigNotFoundError, ConfigParseError (with line/column) or
ConfigValidationError (with entry index and name).
"""

from pathlib import Path
from typing import Any, List, Optional
import asyncio
import logging

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from core.errors import (
    ConfigNotFoundError,
    ConfigParseError,
    ConfigValidationError,
    ConfigWriteError,
)


DEFAULT_CONFIG_PATH = "commands.yaml"


class CommandEntry(BaseModel):
    """One command as written in the configuration file."""

    model_config = {"extra": "ignore", "populate_by_name": True}

    name: Optional[str] = None
    link_to: Optional[str] = Field(default=None, alias="linkto")
    description: Optional[str] = None
    arguments: Optional[str] = None

    @field_validator("name", "link_to", "description", "arguments", mode="before")
    @classmethod
    def _scalar_as_text(cls, value: Any) -> Any:
        """YAML scalars like `name: 123` or `arguments: 5` are read as text."""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
        return value


class CommandsConfig(BaseModel):
    """The deserialized configuration unit."""

    model_config = {"extra": "ignore"}

    commands: List[CommandEntry] = Field(default_factory=list)


class ConfigLoader:
    """YAML configuration loader."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("keylauncher.commands.config")

    def load(self, path: str) -> CommandsConfig:
        """Load and validate a configuration file."""
        file_path = Path(path)

        if not file_path.is_file():
            raise ConfigNotFoundError(str(path))

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.MarkedYAMLError as e:
            mark = e.problem_mark or e.context_mark
            line = mark.line + 1 if mark is not None else None
            column = mark.column + 1 if mark is not None else None
            raise ConfigParseError(str(path), e.problem or str(e), line, column) from e
        except yaml.YAMLError as e:
            raise ConfigParseError(str(path), str(e)) from e
        except UnicodeDecodeError as e:
            raise ConfigParseError(str(path), f"invalid UTF-8: {e.reason}") from e

        if data is None:
            raise ConfigParseError(
                str(path),
                "the file is empty or contains no YAML document"
            )

        config = self._validate(str(path), data)
        self._logger.info(f"Loaded {len(config.commands)} commands from {path}")
        return config

    async def load_async(self, path: str) -> CommandsConfig:
        """Load without blocking the event loop."""
        return await asyncio.to_thread(self.load, path)

    def _validate(self, path: str, data: Any) -> CommandsConfig:
        if not isinstance(data, dict):
            raise ConfigValidationError(
                path, f"must be a mapping with a 'commands' list, got {type(data).__name__}"
            )

        if data.get("commands") is None:
            data = {**data, "commands": []}

        try:
            config = CommandsConfig.model_validate(data)
        except ValidationError as e:
            raise self._translate(path, data, e) from e

        for index, entry in enumerate(config.commands):
            if entry.name is None or not entry.name.strip():
                raise ConfigValidationError(path, "is missing required field 'name'", index)
            if entry.link_to is None or not entry.link_to.strip():
                raise ConfigValidationError(
                    path, "is missing required field 'linkto'", index, entry.name
                )

        return config

    def _translate(self, path: str, data: dict, error: ValidationError) -> ConfigValidationError:
        """Point a pydantic error at the offending entry."""
        first = error.errors()[0]
        loc = first.get("loc", ())
        message = first.get("msg", str(error))

        if len(loc) >= 2 and loc[0] == "commands" and isinstance(loc[1], int):
            index = loc[1]
            name = None
            entries = data.get("commands")
            if isinstance(entries, list) and index < len(entries) and isinstance(entries[index], dict):
                raw_name = entries[index].get("name")
                name = raw_name if isinstance(raw_name, str) else None
            field = loc[2] if len(loc) > 2 else None
            reason = f"has invalid field '{field}': {message}" if field else f"is invalid: {message}"
            return ConfigValidationError(path, reason, index, name)

        return ConfigValidationError(path, f"is invalid: {message}")


SAMPLE_CONFIG = """\
# KeyLauncher command configuration
#
# Each command needs a name and a linkto target.
# Type the name, press Tab to complete and Enter to launch.

commands:
  # Web sites
  - name: google
    linkto: https://www.google.com/
    description: Open Google search

  - name: github
    linkto: https://github.com/
    description: Open GitHub homepage

  # Applications
  - name: editor
    linkto: code
    description: Open the editor

  - name: edit_config
    linkto: code
    arguments: commands.yaml
    description: Edit this configuration file

  # Built-in commands
  - name: reload
    linkto: "!reload"
    description: Reload commands.yaml without restarting

  - name: version
    linkto: "!version"
    description: Show version information

  - name: exit
    linkto: "!exit"
    description: Exit the launcher

# Required fields: name, linkto
# Optional fields: description, arguments
#
# - name: myapp
#   linkto: C:\\Program Files\\MyApp\\myapp.exe
#   arguments: --flag value
"""


class ConfigInitializer:
    """First-run helper that writes a sample configuration."""

    def __init__(self, default_path: str = DEFAULT_CONFIG_PATH):
        self.default_path = default_path

    def is_initialization_needed(self, path: Optional[str] = None) -> bool:
        return not Path(path or self.default_path).exists()

    def generate_sample_config(self, path: Optional[str] = None) -> Path:
        """Write SAMPLE_CONFIG, creating parent directories."""
        target = Path(path or self.default_path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(SAMPLE_CONFIG, encoding="utf-8")
        except OSError as e:
            raise ConfigWriteError(
                f"Failed to create configuration file at '{target}': {e}",
                path=str(target)
            ) from e
        return target
