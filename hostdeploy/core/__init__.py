"""
hostdeploy Core

Capability interfaces and run configuration loading.
"""

from .protocols import RemoteExecutor, FileTransfer, GitClient, Clock, HttpProbe
from .config_loader import RequestLoader

__all__ = [
    "RemoteExecutor",
    "FileTransfer",
    "GitClient",
    "Clock",
    "HttpProbe",
    "RequestLoader",
]
