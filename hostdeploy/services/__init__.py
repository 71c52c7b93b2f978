"""
hostdeploy Services Layer

One service per pipeline component, plus the SSH/rsync/git adapters that
implement the capability interfaces.
"""

from .ssh_service import SSHService
from .transfer_service import RsyncTransfer
from .git_service import GitCLI
from .source_sync import SourceSynchronizer, verify_structure
from .mode_selector import select_mode
from .bootstrapper import RemoteBootstrapper
from .container_deployer import ContainerDeployer, idempotent_delete
from .proxy_configurator import ProxyConfigurator, render_site
from .health_validator import HealthValidator, http_probe

__all__ = [
    "SSHService",
    "RsyncTransfer",
    "GitCLI",
    "SourceSynchronizer",
    "verify_structure",
    "select_mode",
    "RemoteBootstrapper",
    "ContainerDeployer",
    "idempotent_delete",
    "ProxyConfigurator",
    "render_site",
    "HealthValidator",
    "http_probe",
]
