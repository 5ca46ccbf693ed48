"""
Contract Tests
---------------
API surface tests.

These tests verify:
- Public symbols exist
- Required types are exported
- Breaking changes cause test failure
"""

import pytest


class TestCoreAPI:
    """Verify core exports."""

    def test_exports_exist(self):
        from core import (
            __version__,
            APP_NAME,
            StateMachine,
            State,
            ErrorHandler,
            ErrorCategory,
            LauncherError,
            InitializationError,
            ReloadError,
        )

        assert __version__
        assert APP_NAME == "KeyLauncher"
        assert issubclass(InitializationError, LauncherError)
        assert issubclass(ReloadError, LauncherError)

    def test_error_category_values(self):
        from core.errors import ErrorCategory

        # These values must remain stable
        for name in (
            "INPUT_VALIDATION", "CONFIG_NOT_FOUND", "CONFIG_PARSE", "CONFIG_VALIDATION",
            "UNKNOWN_COMMAND", "UNKNOWN_SPECIAL_COMMAND", "NOT_SPECIAL_COMMAND",
            "RELOAD_PRECONDITION", "LAUNCH_FAILURE",
        ):
            assert hasattr(ErrorCategory, name)

    def test_state_values(self):
        from core.state_machine import State

        assert {s.name for s in State} == {"UNINITIALIZED", "READY", "RELOADING"}


class TestOrchestratorAPI:
    """Verify core.orchestrator exports."""

    def test_exports_exist(self):
        from core.orchestrator import (
            ApplicationOrchestrator,
            OrchestratorConfig,
            SpecialCommandResult,
            SpecialCommandStatus,
            CommandResult,
            SPECIAL_COMMANDS,
        )

        assert SPECIAL_COMMANDS == ("!reload", "!version", "!exit")
        assert hasattr(SpecialCommandStatus, "EXIT_REQUESTED")

    def test_methods(self):
        from core.orchestrator import ApplicationOrchestrator

        for name in (
            "initialize", "reload_configuration", "handle_special_command",
            "get_version", "submit", "complete", "get_candidates",
        ):
            assert callable(getattr(ApplicationOrchestrator, name))


class TestCommandsAPI:
    """Verify commands exports."""

    def test_exports_exist(self):
        from commands import (
            Command,
            CommandRegistry,
            AutoCompleter,
            ConfigLoader,
            ConfigInitializer,
            CommandsConfig,
        )

        for name in ("register_command", "has_command", "get_all_commands", "clear_commands"):
            assert hasattr(CommandRegistry, name)
        for name in ("update_word_list", "get_candidates", "auto_complete_word"):
            assert hasattr(AutoCompleter, name)


class TestToolsAPI:
    """Verify tools exports."""

    def test_exports_exist(self):
        from tools import (
            CommandExecutor,
            ProcessLauncher,
            RecordingLauncher,
            ExecutionKind,
            split_command,
        )

        for name in ("get_execution", "get_arguments", "execute", "resolve"):
            assert hasattr(CommandExecutor, name)

    def test_launcher_protocol(self):
        from tools import ProcessLauncher, RecordingLauncher

        assert callable(getattr(ProcessLauncher, "launch"))
        assert callable(getattr(RecordingLauncher, "launch"))


class TestInfraAPI:
    """Verify infra exports."""

    def test_exports_exist(self):
        from infra import get_logger, configure_logging, SubmissionContext

        assert get_logger("x").name.startswith("keylauncher")


@pytest.mark.parametrize("module", ["core", "commands", "tools", "infra"])
def test_all_is_importable(module):
    imported = __import__(module)
    for name in imported.__all__:
        assert hasattr(imported, name), f"{module}.{name} missing"
