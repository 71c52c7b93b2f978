"""Capability interfaces the pipeline calls as opaque collaborators.

Protocols use structural typing: the SSH/rsync/git implementations in
``hostdeploy.services`` satisfy them without inheritance, and tests pass
in-memory fakes.
"""

from pathlib import Path
from typing import Optional, Protocol, Tuple

from hostdeploy.models.results import ExecutionResult, SSHResult


class RemoteExecutor(Protocol):
    """Runs one shell command on the target host per call."""

    def run(
        self,
        command: str,
        timeout: Optional[float] = None,
        input: Optional[str] = None,
        description: Optional[str] = None,
    ) -> SSHResult:
        ...


class FileTransfer(Protocol):
    """Mirrors a local directory onto the target host."""

    def push(self, local_dir: Path, remote_dir: str) -> ExecutionResult:
        ...


class GitClient(Protocol):
    """Clone/pull primitive of the version-control client."""

    def clone(self, url: str, branch: str, dest: Path) -> ExecutionResult:
        ...

    def fetch(self, repo: Path, url: str, branch: str) -> ExecutionResult:
        ...

    def checkout(self, repo: Path, branch: str) -> ExecutionResult:
        ...

    def merge_ff_only(self, repo: Path, ref: str) -> ExecutionResult:
        ...

    def set_remote_url(self, repo: Path, url: str) -> ExecutionResult:
        ...

    def head(self, repo: Path) -> Optional[str]:
        ...


class Clock(Protocol):
    """Time source for settle waits; tests inject a fake."""

    def monotonic(self) -> float:
        ...

    def sleep(self, seconds: float) -> None:
        ...


class HttpProbe(Protocol):
    """Single bounded-time reachability probe from the operator's machine."""

    def __call__(
        self, url: str, connect_timeout: float, total_timeout: float
    ) -> Tuple[bool, str]:
        ...
