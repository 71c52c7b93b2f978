"""
hostdeploy Exception Hierarchy

Every fatal pipeline condition maps to exactly one exception class, and every
class carries the process exit code other tooling relies on.
"""

from typing import Optional

from hostdeploy.models.results import ExitCode


class HostDeployError(Exception):
    """Base exception for all hostdeploy errors."""

    exit_code: ExitCode = ExitCode.SOURCE

    def __init__(
        self,
        message: str,
        context: Optional[str] = None,
        diagnostics: str = "",
    ):
        self.message = message
        self.context = context
        self.diagnostics = diagnostics
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with optional context."""
        if self.context:
            return f"{self.message}\nContext: {self.context}"
        return self.message


class ConfigurationError(HostDeployError):
    """Raised when run inputs are invalid or missing."""

    exit_code = ExitCode.SOURCE


class SourceError(HostDeployError):
    """Raised when the source cannot be synchronized or has no descriptor."""

    exit_code = ExitCode.SOURCE


class RemotePreparationError(HostDeployError):
    """Raised when the remote host cannot be bootstrapped or receive the source."""

    exit_code = ExitCode.REMOTE_PREPARATION


class ComposeStartError(HostDeployError):
    """Raised when the compose stack does not reach a running state."""

    exit_code = ExitCode.COMPOSE_START


class ComposeHealthError(HostDeployError):
    """Raised when the compose stack fails the application check."""

    exit_code = ExitCode.COMPOSE_HEALTH


class ContainerStartError(HostDeployError):
    """Raised when the single container does not reach a running state."""

    exit_code = ExitCode.CONTAINER_START


class ContainerHealthError(HostDeployError):
    """Raised when the single container fails the application check."""

    exit_code = ExitCode.CONTAINER_HEALTH


class ProxyError(HostDeployError):
    """Raised when the reverse proxy cannot be configured or validated."""

    exit_code = ExitCode.PROXY


class PublicValidationError(HostDeployError):
    """Raised when the public endpoint is unreachable from this machine."""

    exit_code = ExitCode.PUBLIC


class PipelineAborted(HostDeployError):
    """Raised by the orchestrator after the first failing stage."""

    def __init__(self, result, report=None):
        self.result = result
        self.report = report
        self.exit_code = result.exit_code
        super().__init__(
            f"Stage '{result.stage}' failed: {result.message}",
            diagnostics=result.diagnostics,
        )
