"""File transfer service: mirrors the working copy onto the remote host."""

import subprocess
from pathlib import Path

from hostdeploy.logger import DeployLogger, run_with_progress
from hostdeploy.models.results import ExecutionResult
from hostdeploy.models.ssh import SSHConnection


class RsyncTransfer:
    """rsync over ssh, deleting remote files that no longer exist locally."""

    def __init__(self, connection: SSHConnection, logger: DeployLogger):
        self.connection = connection
        self.logger = logger

    def build_command(self, local_dir: Path, remote_dir: str) -> list[str]:
        # Trailing slash on the source copies the directory's contents
        source = f"{str(local_dir).rstrip('/')}/"
        dest = f"{self.connection.connection_string}:{remote_dir.rstrip('/')}/"
        return [
            "rsync",
            "-az",
            "--delete",
            "--exclude",
            ".git",
            "-e",
            self.connection.transport_command,
            source,
            dest,
        ]

    def push(self, local_dir: Path, remote_dir: str) -> ExecutionResult:
        command = self.build_command(local_dir, remote_dir)
        try:
            result = run_with_progress(
                self.logger, command, "Transferring source code to remote server"
            )
        except (OSError, subprocess.SubprocessError) as e:
            return ExecutionResult(returncode=127, stderr=str(e), command=" ".join(command))

        return ExecutionResult(
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            command=" ".join(command),
        )
