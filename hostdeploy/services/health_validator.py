"""Health validator: the three-tier gate for declaring success."""

from typing import Callable, Optional, Tuple, Type

import requests

from hostdeploy.constants import (
    HEALTH_CONNECT_TIMEOUT,
    HEALTH_TOTAL_TIMEOUT,
    NGINX_ERROR_LOG,
    NGINX_ERROR_LOG_LINES,
    PROXY_PUBLIC_PORT,
)
from hostdeploy.core.protocols import HttpProbe, RemoteExecutor
from hostdeploy.exceptions import HostDeployError, ProxyError, PublicValidationError
from hostdeploy.logger import DeployLogger


def http_probe(url: str, connect_timeout: float, total_timeout: float) -> Tuple[bool, str]:
    """
    Single GET against url; any 2xx/3xx answer counts as reachable.

    Returns:
        (reachable, detail)
    """
    try:
        response = requests.get(url, timeout=(connect_timeout, total_timeout))
        response.raise_for_status()
    except requests.RequestException as e:
        return False, str(e)
    return True, f"HTTP {response.status_code}"


class HealthValidator:
    """
    One probe per tier, each bounded by a connect and a total timeout.

    Tiers 1 and 2 run curl on the remote host; tier 3 runs from this
    machine. A failing tier raises the error class that carries its exit
    code, with captured logs for the host-local tiers.
    """

    def __init__(
        self,
        executor: RemoteExecutor,
        logger: DeployLogger,
        probe: Optional[HttpProbe] = None,
        connect_timeout: float = HEALTH_CONNECT_TIMEOUT,
        total_timeout: float = HEALTH_TOTAL_TIMEOUT,
    ):
        self.executor = executor
        self.logger = logger
        self.probe = probe or http_probe
        self.connect_timeout = connect_timeout
        self.total_timeout = total_timeout

    def _remote_curl(self, url: str) -> bool:
        result = self.executor.run(
            f"curl -fsS -o /dev/null --connect-timeout {self.connect_timeout:g} "
            f"--max-time {self.total_timeout:g} {url}",
            description=f"Probing {url}",
        )
        return result.is_success

    def check_application(
        self,
        port: int,
        error_cls: Type[HostDeployError],
        capture_logs: Callable[[], str],
    ) -> None:
        url = f"http://localhost:{port}"
        if not self._remote_curl(url):
            raise error_cls(
                f"Health check failed for app at {url}",
                diagnostics=capture_logs(),
            )
        self.logger.success(f"Application responded at {url}")

    def check_proxy(self) -> None:
        url = f"http://localhost:{PROXY_PUBLIC_PORT}"
        if not self._remote_curl(url):
            logs = self.executor.run(
                f"sudo tail -n {NGINX_ERROR_LOG_LINES} {NGINX_ERROR_LOG}",
                description="Dumping Nginx error log",
            )
            raise ProxyError(
                "Nginx proxy validation failed. Could not reach app via proxy.",
                context=url,
                diagnostics=logs.output,
            )
        self.logger.success(f"Proxy responded at {url}")

    def check_public(self, url: str) -> None:
        reachable, detail = self.probe(url, self.connect_timeout, self.total_timeout)
        if not reachable:
            raise PublicValidationError(
                f"The site {url} is not accessible",
                context=detail,
            )
        self.logger.success(f"Application is LIVE at {url} ({detail})")
