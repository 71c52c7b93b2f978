"""
Base Command Class

Abstract base for all hostdeploy CLI commands.
Provides common functionality and structure.
"""

import json
import traceback
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from rich.console import Console
from rich.markup import escape

from hostdeploy.exceptions import HostDeployError
from hostdeploy.logger import DeployLogger
from hostdeploy.models.results import ExitCode
from hostdeploy.ui_components import show_header


class BaseCommand(ABC):
    """
    Abstract base command class.

    Provides:
    - Logger initialization
    - Header display
    - Error handling with stable exit codes
    - JSON output support
    """

    def __init__(self, verbose: bool = False, json_output: bool = False):
        self.verbose = verbose
        self.json_output = json_output
        self.console = Console()
        self.logger: Optional[DeployLogger] = None

    def init_logger(self, log_dir: Path, secrets: Iterable[str] = ()) -> DeployLogger:
        """
        Initialize command logger.

        The log file is always written; JSON mode only silences the console.
        """
        console = self.console if not self.json_output else Console(quiet=True)
        self.logger = DeployLogger(
            log_dir, secrets=secrets, verbose=self.verbose, console_output=console
        )
        return self.logger

    def redact(self, text: str) -> str:
        """Redact registered secrets (no-op before the logger exists)."""
        return self.logger.redact(text) if self.logger else text

    def output_json(self, data: Dict[str, Any], exit_code: int = 0) -> None:
        """
        Output data as JSON and exit.

        Args:
            data: Data to output as JSON
            exit_code: Exit code (0 for success, non-zero for error)
        """
        print(self.redact(json.dumps(data, indent=2)))
        if exit_code != 0:
            raise SystemExit(exit_code)

    def show_header(
        self,
        title: str,
        subtitle: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Show command header (skip in JSON or verbose mode)."""
        if not self.verbose and not self.json_output:
            show_header(
                title=title,
                subtitle=subtitle,
                details=details,
                console=self.console,
            )

    def print_success(self, message: str) -> None:
        """Print success message (skip in JSON mode)."""
        if not self.json_output:
            self.console.print(f"[green]✓ {escape(message)}[/green]")

    def print_error(self, message: str) -> None:
        """Print error message (skip in JSON mode)."""
        if not self.json_output:
            self.console.print(f"[red]✗ {escape(self.redact(message))}[/red]")

    def print_dim(self, message: str) -> None:
        """Print dim message (skip in JSON mode)."""
        if not self.json_output:
            self.console.print(f"[dim]{escape(message)}[/dim]")

    def _show_log_path(self) -> None:
        if self.logger and not self.json_output:
            self.console.print(f"\n[dim]Logs saved to:[/dim] {self.logger.log_path}\n")

    @abstractmethod
    def execute(self, **kwargs) -> None:
        """
        Execute command logic.

        Must be implemented by subclasses.
        """
        pass

    def run(self, **kwargs) -> None:
        """
        Run command with error handling.

        Args:
            **kwargs: Command arguments
        """
        try:
            self.execute(**kwargs)
        except KeyboardInterrupt:
            if not self.json_output:
                self.console.print("\n[yellow]⚠️  Run interrupted by operator[/yellow]")
            self._show_log_path()
            raise SystemExit(int(ExitCode.INTERRUPTED))
        except SystemExit:
            raise
        except HostDeployError as e:
            self.print_error(e.message)
            if e.context:
                self.print_dim(self.redact(e.context))
            self._show_log_path()
            raise SystemExit(int(e.exit_code))
        except Exception as e:
            error_type = type(e).__name__
            if not self.json_output:
                self.console.print(
                    f"\n[bold red]✗ {error_type}:[/bold red] {escape(self.redact(str(e)))}\n"
                )
                if self.verbose:
                    self.console.print(escape(self.redact(traceback.format_exc())))
            if self.logger:
                self.logger.log_error(f"{error_type}: {e}")
            self._show_log_path()
            raise SystemExit(int(ExitCode.SOURCE))
