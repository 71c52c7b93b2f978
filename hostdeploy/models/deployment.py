"""
Deployment State Models

Runtime state produced by the pipeline stages of a single run.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Dict

from hostdeploy.constants import BUILD_DESCRIPTOR, COMPOSE_DESCRIPTOR


class DeploymentMode(Enum):
    """Deployment strategy, chosen once per run."""

    COMPOSE = "compose"
    SINGLE_CONTAINER = "single-container"

    @property
    def descriptor(self) -> str:
        """Descriptor file that selects this mode."""
        if self is DeploymentMode.COMPOSE:
            return COMPOSE_DESCRIPTOR
        return BUILD_DESCRIPTOR


@dataclass(frozen=True)
class WorkingCopy:
    """Local checkout of the requested branch."""

    path: Path
    branch: str
    commit: Optional[str] = None

    @property
    def has_compose_descriptor(self) -> bool:
        return (self.path / COMPOSE_DESCRIPTOR).is_file()

    @property
    def has_build_descriptor(self) -> bool:
        return (self.path / BUILD_DESCRIPTOR).is_file()

    @property
    def short_commit(self) -> Optional[str]:
        return self.commit[:7] if self.commit else None


@dataclass
class Capabilities:
    """Capabilities present on the remote host, probed once per run."""

    docker: bool = False
    compose: bool = False
    proxy: bool = False
    fetch: bool = False
    compose_command: str = "docker-compose"

    @property
    def missing(self) -> list[str]:
        """Names of capabilities that are absent."""
        flags = {
            "docker": self.docker,
            "compose": self.compose,
            "proxy": self.proxy,
            "fetch": self.fetch,
        }
        return [name for name, present in flags.items() if not present]

    def to_dict(self) -> Dict[str, bool]:
        return {
            "docker": self.docker,
            "compose": self.compose,
            "proxy": self.proxy,
            "fetch": self.fetch,
        }


@dataclass
class RemoteHost:
    """Target host plus its cached capability flags."""

    address: str
    user: str
    capabilities: Optional[Capabilities] = None

    @property
    def is_probed(self) -> bool:
        return self.capabilities is not None

    @property
    def compose_command(self) -> str:
        if self.capabilities is None:
            return "docker-compose"
        return self.capabilities.compose_command


@dataclass(frozen=True)
class RunningDeployment:
    """The remote runtime's view of the deployed application."""

    mode: DeploymentMode
    identity: str
    port: int

    def __repr__(self) -> str:
        return f"RunningDeployment(mode={self.mode.value}, identity={self.identity}, port={self.port})"


@dataclass(frozen=True)
class ProxyRule:
    """The single reverse-proxy site mapping port 80 to the application."""

    app_port: int
    server_name: str
    listen_port: int = 80

    @property
    def upstream(self) -> str:
        return f"http://localhost:{self.app_port}"
