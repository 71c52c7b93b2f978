"""
Logging system for hostdeploy
Provides real-time, redacted logging to a file with clean console output
"""

import re
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, TextIO

from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.padding import Padding
from rich.spinner import Spinner
from rich.text import Text

from hostdeploy.constants import LOG_DATETIME_FORMAT, LOG_FILE_FORMAT, REDACTED

console = Console()

ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


class Redactor:
    """Replaces registered secret values with a fixed marker."""

    def __init__(self, secrets: Iterable[str] = ()):
        self._secrets: list[str] = []
        for secret in secrets:
            self.add(secret)

    def add(self, secret: str) -> None:
        if secret and secret not in self._secrets:
            self._secrets.append(secret)
            # Longest first so a URL embedding the token is replaced whole
            self._secrets.sort(key=len, reverse=True)

    def __call__(self, text: str) -> str:
        if not text:
            return text
        for secret in self._secrets:
            text = text.replace(secret, REDACTED)
        return text


class DeployLogger:
    """
    Manages logging for a deployment run
    - Writes every line to the log file in real-time, timestamped
    - Shows clean progress UI in console (unless verbose)
    - Redacts registered secrets from every stream
    """

    def __init__(
        self,
        log_dir: Path,
        secrets: Iterable[str] = (),
        verbose: bool = False,
        console_output: Optional[Console] = None,
    ):
        """
        Initialize logger

        Args:
            log_dir: Directory that receives the log file
            secrets: Values that must never be written anywhere
            verbose: If True, mirror all lines in console
            console_output: Console to render to (defaults to module console)
        """
        self.verbose = verbose
        self.console = console_output or console
        self.redact = Redactor(secrets)
        self.log_file: Optional[TextIO] = None
        self.current_step = ""
        self.has_errors = False
        self.interrupted = False

        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        self.log_path: Path = log_dir / datetime.now().strftime(LOG_FILE_FORMAT)

        # Line buffered so the file is readable while the run is in progress
        self.log_file = open(self.log_path, "w", buffering=1)
        self._write_log_header()

    def _write_log_header(self):
        """Write log file header"""
        header = f"""
{"=" * 80}
hostdeploy Deployment Log
{"=" * 80}
Started: {datetime.now().isoformat()}
{"=" * 80}

"""
        self._write(header)

    def _write(self, text: str) -> None:
        if self.log_file:
            self.log_file.write(self.redact(text))
            self.log_file.flush()

    def _print(self, markup: str) -> None:
        self.console.print(markup)

    def log(self, message: str, level: str = "INFO"):
        """
        Log a message to file and optionally console

        Args:
            message: Message to log
            level: Log level (INFO, WARNING, ERROR, DEBUG)
        """
        message = self.redact(message)
        timestamp = datetime.now().strftime(LOG_DATETIME_FORMAT)
        self._write(f"[{timestamp}] [{level}] {message}\n")

        if self.verbose:
            if level == "ERROR":
                self._print(f"[red]{escape(message)}[/red]")
            elif level == "WARNING":
                self._print(f"[yellow]{escape(message)}[/yellow]")
            elif level == "DEBUG":
                self._print(f"[dim]{escape(message)}[/dim]")
            else:
                self._print(escape(message))

    def log_command(self, command: str):
        """Log a command being executed"""
        self.log(f"Executing: {command}", "DEBUG")

    def log_output(self, output: str, stream: str = "stdout"):
        """
        Log command output

        Always written to the log file; shown in console only when verbose.
        """
        if not output:
            return

        clean_output = self.redact(ANSI_ESCAPE.sub("", output))
        for line in clean_output.splitlines():
            self._write(f"  [{stream}] {line}\n")

        if self.verbose:
            self._print(escape(clean_output))

    def log_config(self, details: dict):
        """Log the run configuration block"""
        self.log("-" * 35)
        self.log("Configuration:")
        for key, value in details.items():
            self.log(f"{key}: {value}")
        self.log("-" * 35)

    def log_error(self, error: str, context: Optional[str] = None, diagnostics: str = ""):
        """
        Log an error with context and captured diagnostics

        Args:
            error: Error message
            context: Additional context (e.g., command that failed)
            diagnostics: Captured logs attached to the failure
        """
        self.has_errors = True
        error = self.redact(error)

        error_block = f"""
{"!" * 80}
ERROR OCCURRED
{"!" * 80}
{error}
"""
        if context:
            error_block += f"\nContext: {context}\n"
        if diagnostics:
            error_block += f"\nDiagnostics:\n{diagnostics.rstrip()}\n"

        error_block += f"{'!' * 80}\n\n"
        self._write(error_block)

        if not self.verbose:
            self.console.print()

        self._print(f"[bold red]✗ {escape(error)}[/bold red]")
        if context:
            self._print(f"  [color(208)]{escape(self.redact(context))}[/color(208)]")
        if diagnostics:
            self._print(f"[dim]{escape(self.redact(diagnostics.rstrip()))}[/dim]")

    def step(self, step_name: str):
        """
        Start a new step

        Args:
            step_name: Name of the step
        """
        if self.current_step and not self.verbose:
            self.console.print()

        self.current_step = step_name
        self.log(f"Step: {step_name}", "INFO")

        if not self.verbose:
            self._print(f"[color(214)]▶[/color(214)] [white]{escape(self.redact(step_name))}[/white]")

    def success(self, message: str):
        """Log a success message"""
        self.log(message, "INFO")

        if not self.verbose:
            self._print(f"  [dim]✓ {escape(self.redact(message))}[/dim]")

    def warning(self, message: str):
        """Log a warning message"""
        self.log(message, "WARNING")

        if not self.verbose:
            self._print(f"  [yellow]⚠[/yellow] [dim]{escape(self.redact(message))}[/dim]")

    def close(self):
        """Close log file"""
        if self.log_file:
            if self.interrupted:
                status = "INTERRUPTED"
            else:
                status = "FAILED" if self.has_errors else "SUCCESS"
            footer = f"""
{"=" * 80}
Completed: {datetime.now().isoformat()}
Status: {status}
{"=" * 80}
"""
            self._write(footer)
            self.log_file.close()
            self.log_file = None

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, _exc_tb):
        """Context manager exit"""
        if exc_type is KeyboardInterrupt:
            self.interrupted = True
        elif exc_type is not None and exc_type is not SystemExit:
            self.has_errors = True
        self.close()
        return False


def run_with_progress(
    logger: DeployLogger,
    command: list[str],
    description: str,
    cwd: Optional[Path] = None,
    timeout: Optional[float] = None,
    env: Optional[dict] = None,
) -> subprocess.CompletedProcess:
    """
    Run a local command with a progress indicator

    Output is captured, redacted and logged. Returns the CompletedProcess.
    """
    logger.log_command(" ".join(command))

    if logger.verbose:
        result = subprocess.run(
            command, cwd=cwd, capture_output=True, text=True, timeout=timeout, env=env
        )
        logger.log_output(result.stdout, "stdout")
        logger.log_output(result.stderr, "stderr")
        return result

    spinner = Spinner("dots", text=f"[cyan]{escape(description)}...[/cyan]")
    padded_spinner = Padding(spinner, (0, 0, 0, 2))

    with Live(padded_spinner, console=logger.console, refresh_per_second=10) as live:
        result = subprocess.run(
            command, cwd=cwd, capture_output=True, text=True, timeout=timeout, env=env
        )

        logger.log_output(result.stdout, "stdout")
        logger.log_output(result.stderr, "stderr")

        if result.returncode == 0:
            mark = Text("  ✓ ", style="dim")
            mark.append(description, style="dim")
        else:
            mark = Text("  ✗ ", style="red")
            mark.append(description, style="dim")
        live.update(mark)

    return result
