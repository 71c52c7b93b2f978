"""SSH service for executing commands on the remote host."""

import subprocess
import time
from typing import Optional

from hostdeploy.logger import DeployLogger
from hostdeploy.models.results import SSHResult
from hostdeploy.models.ssh import SSHConnection


class SSHService:
    """Runs remote commands over one ssh invocation per call."""

    def __init__(self, connection: SSHConnection, logger: Optional[DeployLogger] = None):
        """
        Initialize SSH service.

        Args:
            connection: Target host and SSH identity
            logger: Receives the command line and its captured output
        """
        self.connection = connection
        self.logger = logger

    def run(
        self,
        command: str,
        timeout: Optional[float] = None,
        input: Optional[str] = None,
        description: Optional[str] = None,
    ) -> SSHResult:
        """
        Execute command on the remote host via SSH.

        Args:
            command: Shell command to execute remotely
            timeout: Command timeout in seconds (None inherits the session's)
            input: Text fed to the remote command's stdin
            description: Human-readable label for the log

        Returns:
            SSHResult with execution details. A timeout is reported as a
            failed result rather than raised.
        """
        ssh_cmd = self.connection.build_command(command)

        if self.logger:
            if description:
                self.logger.log(description, "DEBUG")
            self.logger.log_command(f"ssh {self.connection.connection_string} {command}")

        start_time = time.time()

        try:
            result = subprocess.run(
                ssh_cmd,
                capture_output=True,
                text=True,
                timeout=timeout,
                input=input,
            )
        except subprocess.TimeoutExpired:
            duration = time.time() - start_time
            if self.logger:
                self.logger.log(f"SSH command timed out after {timeout}s", "WARNING")
            return SSHResult(
                returncode=124,
                stderr=f"SSH command timed out after {timeout}s",
                host=self.connection.host,
                command=command,
                duration_seconds=duration,
            )

        duration = time.time() - start_time

        if self.logger:
            self.logger.log_output(result.stdout, "stdout")
            self.logger.log_output(result.stderr, "stderr")

        return SSHResult(
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            host=self.connection.host,
            command=command,
            duration_seconds=duration,
        )
