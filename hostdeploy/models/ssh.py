"""
SSH Configuration Models

Dataclass models for SSH operations.
"""

import shlex
from dataclasses import dataclass
from pathlib import Path

from hostdeploy.constants import SSH_OPTIONS


@dataclass(frozen=True)
class SSHConfig:
    """SSH identity used to reach the remote host."""

    key_path: str
    user: str

    @property
    def key_path_expanded(self) -> Path:
        """Get expanded key path (resolves ~)."""
        return Path(self.key_path).expanduser()

    @property
    def key_exists(self) -> bool:
        """Check if private key file exists."""
        return self.key_path_expanded.exists()

    def __repr__(self) -> str:
        return f"SSHConfig(user={self.user}, key={self.key_path})"


@dataclass(frozen=True)
class SSHConnection:
    """SSH connection details for a specific host."""

    host: str
    config: SSHConfig
    port: int = 22

    @property
    def connection_string(self) -> str:
        """Get SSH connection string (user@host)."""
        return f"{self.config.user}@{self.host}"

    @property
    def transport_command(self) -> str:
        """SSH invocation for tools that tunnel over ssh (rsync -e)."""
        parts = ["ssh", "-i", str(self.config.key_path_expanded), "-p", str(self.port)]
        parts.extend(SSH_OPTIONS)
        return shlex.join(parts)

    @property
    def ssh_command_prefix(self) -> list[str]:
        """Get SSH command prefix for subprocess."""
        return [
            "ssh",
            "-i",
            str(self.config.key_path_expanded),
            "-p",
            str(self.port),
            *SSH_OPTIONS,
            self.connection_string,
        ]

    def build_command(self, remote_command: str) -> list[str]:
        """Build full SSH command with remote command."""
        return self.ssh_command_prefix + [remote_command]

    def __repr__(self) -> str:
        return f"SSHConnection(host={self.host}, user={self.config.user})"
