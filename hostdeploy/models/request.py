"""
Deployment Request Models

The immutable input of a run, threaded explicitly through every stage.
"""

from dataclasses import dataclass, field
from typing import Dict, Any
from urllib.parse import urlsplit, urlunsplit

from hostdeploy.constants import DEFAULT_BRANCH, HIDDEN
from hostdeploy.models.ssh import SSHConfig, SSHConnection


@dataclass(frozen=True)
class RepositoryRef:
    """Repository URL plus the branch to deploy."""

    url: str
    branch: str = DEFAULT_BRANCH

    @property
    def name(self) -> str:
        """Local directory name of the working copy (basename without .git)."""
        path = self.url.rstrip("/").rsplit("/", 1)[-1]
        path = path.rsplit(":", 1)[-1]
        if path.endswith(".git"):
            path = path[: -len(".git")]
        return path

    def authenticated_url(self, token: str) -> str:
        """
        Embed the token as a short-lived credential in an https URL.

        Non-http(s) URLs (e.g. git@host:org/repo) and empty tokens are
        returned unchanged.
        """
        parts = urlsplit(self.url)
        if not token or parts.scheme not in ("http", "https"):
            return self.url
        host = parts.hostname or ""
        if parts.port:
            host = f"{host}:{parts.port}"
        return urlunsplit(
            (parts.scheme, f"oauth2:{token}@{host}", parts.path, parts.query, parts.fragment)
        )


@dataclass(frozen=True)
class DeploymentRequest:
    """Everything a run needs, collected once and never mutated."""

    repository: RepositoryRef
    token: str = field(repr=False)
    host: str
    ssh: SSHConfig
    app_port: int

    @property
    def connection(self) -> SSHConnection:
        """SSH connection to the target host."""
        return SSHConnection(host=self.host, config=self.ssh)

    @property
    def server(self) -> str:
        """user@host label for reports."""
        return self.connection.connection_string

    @property
    def public_url(self) -> str:
        """Public endpoint served by the reverse proxy."""
        return f"http://{self.host}"

    @property
    def secrets(self) -> list[str]:
        """Values that must never appear in any output stream."""
        if not self.token:
            return []
        return [self.token, self.repository.authenticated_url(self.token)]

    def describe(self) -> Dict[str, Any]:
        """Loggable configuration, token hidden."""
        return {
            "Repo URL": self.repository.url,
            "Branch": self.repository.branch,
            "SSH User": self.ssh.user,
            "Server IP": self.host,
            "SSH Key": self.ssh.key_path,
            "App Port": self.app_port,
            "PAT": HIDDEN,
        }
