"""
hostdeploy Domain Models

Clean dataclass-based models for type-safe data handling.
"""

from .results import (
    ExitCode,
    DeleteOutcome,
    ExecutionResult,
    SSHResult,
    StageResult,
    DeploymentReport,
)
from .deployment import (
    DeploymentMode,
    WorkingCopy,
    Capabilities,
    RemoteHost,
    RunningDeployment,
    ProxyRule,
)
from .request import (
    RepositoryRef,
    DeploymentRequest,
)
from .ssh import (
    SSHConfig,
    SSHConnection,
)

__all__ = [
    # Results
    "ExitCode",
    "DeleteOutcome",
    "ExecutionResult",
    "SSHResult",
    "StageResult",
    "DeploymentReport",
    # Deployment
    "DeploymentMode",
    "WorkingCopy",
    "Capabilities",
    "RemoteHost",
    "RunningDeployment",
    "ProxyRule",
    # Request
    "RepositoryRef",
    "DeploymentRequest",
    # SSH
    "SSHConfig",
    "SSHConnection",
]
