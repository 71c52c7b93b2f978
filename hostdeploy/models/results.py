"""
Result Models

Dataclass models for command outputs, stage outcomes and the final report.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Optional, Dict, Any, List


class ExitCode(IntEnum):
    """Process exit codes; a stable contract for calling tooling."""

    SUCCESS = 0
    SOURCE = 1
    COMPOSE_START = 2
    COMPOSE_HEALTH = 3
    CONTAINER_START = 4
    CONTAINER_HEALTH = 5
    PROXY = 6
    PUBLIC = 7
    REMOTE_PREPARATION = 8
    INTERRUPTED = 130


class DeleteOutcome(Enum):
    """Outcome of an idempotent teardown of a prior instance."""

    DELETED = "deleted"
    ALREADY_ABSENT = "already-absent"
    FAILED = "failed-unexpectedly"

    @property
    def is_success(self) -> bool:
        """Deleted and already-absent both leave no stale instance."""
        return self is not DeleteOutcome.FAILED


@dataclass
class ExecutionResult:
    """Result of a local command execution (git, rsync, etc.)."""

    returncode: int
    stdout: str = ""
    stderr: str = ""
    command: str = ""

    @property
    def is_success(self) -> bool:
        """Check if execution succeeded."""
        return self.returncode == 0

    @property
    def is_failure(self) -> bool:
        """Check if execution failed."""
        return self.returncode != 0

    @property
    def output(self) -> str:
        """Get combined output (stdout + stderr)."""
        return f"{self.stdout}\n{self.stderr}".strip()

    def __repr__(self) -> str:
        return f"ExecutionResult(returncode={self.returncode}, command='{self.command[:50]}...')"


@dataclass
class SSHResult:
    """Result of an SSH command execution."""

    returncode: int
    stdout: str = ""
    stderr: str = ""
    host: str = ""
    command: str = ""
    duration_seconds: float = 0.0

    @property
    def is_success(self) -> bool:
        """Check if SSH command succeeded."""
        return self.returncode == 0

    @property
    def is_failure(self) -> bool:
        """Check if SSH command failed."""
        return self.returncode != 0

    @property
    def output(self) -> str:
        """Get combined output (stdout + stderr)."""
        return f"{self.stdout}\n{self.stderr}".strip()

    def __repr__(self) -> str:
        return f"SSHResult(host={self.host}, returncode={self.returncode}, duration={self.duration_seconds:.2f}s)"


@dataclass
class StageResult:
    """Outcome of one pipeline stage. Never retried automatically."""

    stage: str
    success: bool
    exit_code: int = ExitCode.SUCCESS
    message: str = ""
    diagnostics: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "stage": self.stage,
            "success": self.success,
            "exit_code": int(self.exit_code),
            "message": self.message,
            "diagnostics": self.diagnostics,
        }

    def __repr__(self) -> str:
        status = "ok" if self.success else f"failed({int(self.exit_code)})"
        return f"StageResult(stage={self.stage}, {status})"


@dataclass
class DeploymentReport:
    """Aggregated outcome of a pipeline run."""

    repository: str
    branch: str
    server: str
    url: str
    mode: Optional[str] = None
    commit: Optional[str] = None
    identity: Optional[str] = None
    log_path: Optional[str] = None
    stages: List[StageResult] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        """True when every recorded stage succeeded."""
        return bool(self.stages) and all(stage.success for stage in self.stages)

    @property
    def exit_code(self) -> int:
        """Exit code of the first failing stage, or success."""
        for stage in self.stages:
            if not stage.success:
                return int(stage.exit_code)
        return int(ExitCode.SUCCESS)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "repository": self.repository,
            "branch": self.branch,
            "server": self.server,
            "url": self.url,
            "mode": self.mode,
            "commit": self.commit,
            "identity": self.identity,
            "log_path": self.log_path,
            "exit_code": self.exit_code,
            "stages": [stage.to_dict() for stage in self.stages],
        }
