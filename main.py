#!/usr/bin/env python3
"""
KeyLauncher - Keyboard-Driven Command Launcher
==============================================

Main entry point.

Usage:
    python main.py                      # Interactive prompt with Tab completion
    python main.py --config my.yaml     # Use another commands file
    python main.py --run google         # Launch one command and exit
    python main.py --list               # Show registered commands
    python main.py --help               # Show help

Type a command name, press Tab to complete, Enter to launch.
Built-ins: !reload, !version, !exit
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Iterable, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document
from prompt_toolkit.history import FileHistory
from prompt_toolkit.key_binding import KeyBindings
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from commands.config import ConfigInitializer
from core.errors import ConfigWriteError, ErrorHandler, InitializationError, LauncherError
from core.orchestrator import ApplicationOrchestrator, OrchestratorConfig
from core.version import __version__
from infra.logging import configure_logging, get_logger


console = Console()


class LauncherCompleter(Completer):
    """Completes the first token against registered command names."""

    def __init__(self, orchestrator: ApplicationOrchestrator):
        self.orchestrator = orchestrator

    def get_completions(self, document: Document, complete_event) -> Iterable[Completion]:
        text = document.text_before_cursor

        # Arguments are free text
        if any(ch.isspace() for ch in text.lstrip()):
            return

        for name in self.orchestrator.get_candidates(text):
            command = self.orchestrator.registry.get_command(name)
            meta = ""
            if command is not None:
                meta = command.description or command.link_to
            yield Completion(name, start_position=-len(text), display_meta=meta)


def build_key_bindings(orchestrator: ApplicationOrchestrator) -> KeyBindings:
    """Tab completes to the longest common prefix; Escape clears the line."""
    bindings = KeyBindings()

    @bindings.add("tab")
    def _(event):
        """Complete to the longest common prefix, open menu if ambiguous."""
        buf = event.app.current_buffer
        text = buf.text
        candidates = orchestrator.get_candidates(text)
        if not candidates:
            return

        completed = orchestrator.complete(text)
        buf.text = completed
        buf.cursor_position = len(completed)

        if len(candidates) >= 2:
            buf.start_completion(select_first=False)

    @bindings.add("escape", eager=True)
    def _(event):
        """Clear current input."""
        event.app.current_buffer.reset()

    return bindings


def print_banner(orchestrator: ApplicationOrchestrator) -> None:
    """Print the welcome banner."""
    banner = Text()
    banner.append(orchestrator.config.app_name, style="bold cyan")
    banner.append(f" {__version__} - Keyboard-Driven Command Launcher\n", style="dim")
    banner.append(f"Commands: {len(orchestrator.registry)} from {orchestrator.config_path}\n\n", style="green")

    banner.append("TAB", style="bold green")
    banner.append(" to complete | ", style="dim")
    banner.append("ENTER", style="bold green")
    banner.append(" to launch | ", style="dim")
    banner.append("!exit", style="bold red")
    banner.append(" to quit", style="dim")

    console.print(Panel(banner, title="Welcome", border_style="blue"))


def print_commands(orchestrator: ApplicationOrchestrator) -> None:
    """Print a table of registered commands."""
    table = Table(title=f"Commands ({orchestrator.config_path})")
    table.add_column("Name", style="bold cyan")
    table.add_column("Target")
    table.add_column("Arguments", style="dim")
    table.add_column("Description", style="dim")

    for command in orchestrator.registry.get_all_commands():
        table.add_row(
            command.name,
            command.link_to,
            command.arguments or "",
            command.description or "",
        )

    console.print(table)


def print_error(error_handler: ErrorHandler, error: BaseException) -> None:
    """Log the error and show its user-facing message."""
    console.print(f"[bold red]Error:[/bold red] {escape(error_handler.handle(error))}")


async def handle_input(
    orchestrator: ApplicationOrchestrator,
    text: str,
    error_handler: ErrorHandler
) -> bool:
    """
    Submit one line of input.

    Returns False when the user asked to exit.
    """
    text = text.strip()
    if not text:
        return True

    try:
        result = await orchestrator.submit(text)
    except (LauncherError, OSError) as e:
        print_error(error_handler, e)
        return True

    if result.exit_requested:
        return False

    if result.message:
        console.print(f"[bold green]{escape(result.message)}[/bold green]")
    elif result.execution is not None:
        execution = result.execution.execution
        launched = f"{execution.target} {execution.arguments}".rstrip()
        console.print(f"[dim]Launched {escape(launched)}[/dim]")

    return True


async def run_interactive(orchestrator: ApplicationOrchestrator, error_handler: ErrorHandler) -> None:
    """Run the interactive prompt until !exit or Ctrl+D."""
    history_file = Path(orchestrator.config.history_file).expanduser()
    history_file.parent.mkdir(parents=True, exist_ok=True)

    session: PromptSession = PromptSession(
        history=FileHistory(str(history_file)),
        completer=LauncherCompleter(orchestrator),
        key_bindings=build_key_bindings(orchestrator),
        complete_while_typing=True,
    )

    print_banner(orchestrator)

    while True:
        try:
            text = await session.prompt_async("> ")
        except KeyboardInterrupt:
            continue
        except EOFError:
            break

        if not await handle_input(orchestrator, text, error_handler):
            break

    console.print("\n[yellow]Shutting down...[/yellow]")


def ensure_config(path: str, generate: bool) -> None:
    """Write a sample configuration on first run."""
    initializer = ConfigInitializer(default_path=path)
    if not generate or not initializer.is_initialization_needed(path):
        return

    created = initializer.generate_sample_config(path)
    console.print(f"[yellow]Created sample configuration:[/yellow] {created.resolve()}")


async def run(args: argparse.Namespace) -> int:
    """Configure, initialize and dispatch to the selected mode."""
    config = OrchestratorConfig.from_env(
        config_path=args.config,
        log_level=args.log_level,
        log_dir=args.log_dir,
    )

    configure_logging(level=config.log_level, log_dir=config.log_dir, rich_console=console)
    logger = get_logger("main")
    error_handler = ErrorHandler(logger=get_logger("errors"))

    orchestrator = ApplicationOrchestrator(config, logger=get_logger("orchestrator"))

    if args.version:
        console.print(orchestrator.get_version())
        return 0

    try:
        ensure_config(config.config_path, generate=not args.no_init)
    except ConfigWriteError as e:
        print_error(error_handler, e)
        return 1

    try:
        await orchestrator.initialize(config.config_path)
    except InitializationError as e:
        print_error(error_handler, e)
        return 1

    logger.info(f"Ready with {len(orchestrator.registry)} commands")

    if args.list:
        print_commands(orchestrator)
        return 0

    if args.run:
        try:
            result = await orchestrator.submit(args.run)
        except (LauncherError, OSError) as e:
            print_error(error_handler, e)
            return 1
        if result.message:
            console.print(escape(result.message))
        return 0

    await run_interactive(orchestrator, error_handler)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="KeyLauncher - Keyboard-Driven Command Launcher"
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to commands file (default: commands.yaml or $KEYLAUNCHER_CONFIG)"
    )
    parser.add_argument(
        "--log-level", "-l",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )
    parser.add_argument(
        "--log-dir",
        default=None,
        help="Directory for log files"
    )
    parser.add_argument(
        "--run", "-r",
        metavar="TEXT",
        default=None,
        help="Submit one input and exit"
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List registered commands and exit"
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit"
    )
    parser.add_argument(
        "--no-init",
        action="store_true",
        help="Do not create a sample commands file when missing"
    )
    return parser


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        return 130


def cli() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli()
