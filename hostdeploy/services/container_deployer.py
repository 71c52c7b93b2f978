"""Container deployer: replaces the running workload with a fresh build."""

import re
from typing import Optional

from hostdeploy.constants import (
    ABSENT_MARKERS,
    COMPOSE_PROJECT_NAME,
    CONTAINER_NAME,
    DIAGNOSTIC_LOG_LINES,
    IMAGE_NAME,
    REMOTE_APP_DIR,
    SETTLE_CEILING_SECONDS,
)
from hostdeploy.core.protocols import Clock, RemoteExecutor
from hostdeploy.exceptions import ComposeStartError, ContainerStartError
from hostdeploy.logger import DeployLogger
from hostdeploy.models.deployment import DeploymentMode, RemoteHost, RunningDeployment
from hostdeploy.models.results import DeleteOutcome
from hostdeploy.utils import SystemClock, settle

COMPOSE_UP = re.compile(r"\bUp\b")


def idempotent_delete(
    executor: RemoteExecutor, command: str, description: Optional[str] = None
) -> DeleteOutcome:
    """
    Run a teardown command and classify its outcome.

    An error that only says the target does not exist means the desired
    postcondition already holds.
    """
    result = executor.run(command, description=description)
    if result.is_success:
        return DeleteOutcome.DELETED

    output = result.output.lower()
    if any(marker in output for marker in ABSENT_MARKERS):
        return DeleteOutcome.ALREADY_ABSENT
    return DeleteOutcome.FAILED


class ContainerDeployer:
    """
    Executes the selected deployment mode under a fixed identity.

    Compose mode uses the project name ``app``; single-container mode uses
    the image ``app-deployment`` and container ``app-container``. Reusing
    the identity on every run keeps at most one instance on the host.
    """

    def __init__(
        self,
        executor: RemoteExecutor,
        logger: DeployLogger,
        clock: Optional[Clock] = None,
        settle_ceiling: float = SETTLE_CEILING_SECONDS,
        remote_dir: str = REMOTE_APP_DIR,
    ):
        self.executor = executor
        self.logger = logger
        self.clock = clock or SystemClock()
        self.settle_ceiling = settle_ceiling
        self.remote_dir = remote_dir

    def deploy(self, mode: DeploymentMode, host: RemoteHost, app_port: int) -> RunningDeployment:
        if mode is DeploymentMode.COMPOSE:
            return self.deploy_compose(host, app_port)
        return self.deploy_single(app_port)

    def _compose(self, host: RemoteHost, args: str) -> str:
        return f"cd {self.remote_dir} && {host.compose_command} -p {COMPOSE_PROJECT_NAME} {args}"

    # Compose mode

    def deploy_compose(self, host: RemoteHost, app_port: int) -> RunningDeployment:
        self.logger.log("Using docker-compose for deployment...")
        self.logger.warning(f"Make sure your docker-compose.yml maps its service to port {app_port}")

        deployment = RunningDeployment(
            mode=DeploymentMode.COMPOSE,
            identity=COMPOSE_PROJECT_NAME,
            port=app_port,
        )

        outcome = idempotent_delete(
            self.executor,
            self._compose(host, "down"),
            description="Stopping existing docker-compose containers",
        )
        if not outcome.is_success:
            raise ComposeStartError(
                "Failed to stop the existing compose stack",
                diagnostics=self.capture_logs(deployment, host),
            )
        self.logger.log(f"Previous stack: {outcome.value}")

        result = self.executor.run(
            self._compose(host, "up --build -d"),
            description="Building and starting new containers",
        )
        if result.is_failure:
            raise ComposeStartError(
                "Failed to build and start the compose stack",
                diagnostics=result.output,
            )

        self.logger.log("Waiting for containers to start...")
        if not settle(lambda: self._compose_running(host), self.clock, self.settle_ceiling):
            raise ComposeStartError(
                "Containers failed to start properly",
                diagnostics=self.capture_logs(deployment, host),
            )

        self.logger.success("Application deployed successfully with docker-compose")
        return deployment

    def _compose_running(self, host: RemoteHost) -> bool:
        result = self.executor.run(self._compose(host, "ps"), description="Checking stack status")
        return result.is_success and bool(COMPOSE_UP.search(result.stdout))

    # Single-container mode

    def deploy_single(self, app_port: int) -> RunningDeployment:
        self.logger.log("Using Dockerfile for deployment...")

        deployment = RunningDeployment(
            mode=DeploymentMode.SINGLE_CONTAINER,
            identity=CONTAINER_NAME,
            port=app_port,
        )

        result = self.executor.run(
            f"cd {self.remote_dir} && docker build -t {IMAGE_NAME} .",
            description="Building the Docker image",
        )
        if result.is_failure:
            raise ContainerStartError("Docker image build failed", diagnostics=result.output)

        for action in ("stop", "rm"):
            outcome = idempotent_delete(
                self.executor,
                f"docker {action} {CONTAINER_NAME}",
                description=f"Running docker {action} on the existing container",
            )
            if not outcome.is_success:
                raise ContainerStartError(
                    f"Failed to {action} the existing container '{CONTAINER_NAME}'",
                    diagnostics=self.capture_logs(deployment),
                )

        self.logger.log(f"Running new container on {app_port}:{app_port}...")
        result = self.executor.run(
            f"docker run -d --name {CONTAINER_NAME} -p {app_port}:{app_port} {IMAGE_NAME}",
            description="Starting container",
        )
        if result.is_failure:
            raise ContainerStartError("Failed to start the container", diagnostics=result.output)

        self.logger.log("Waiting for container to start...")
        if not settle(self._container_running, self.clock, self.settle_ceiling):
            raise ContainerStartError(
                "Container failed to start properly",
                diagnostics=self.capture_logs(deployment),
            )

        self.logger.success("Application deployed successfully with Docker")
        return deployment

    def _container_running(self) -> bool:
        result = self.executor.run(
            f"docker ps --filter 'name=^/{CONTAINER_NAME}$' --format '{{{{.Names}}}}'",
            description="Checking container status",
        )
        return result.is_success and CONTAINER_NAME in result.stdout.split()

    # Diagnostics

    def capture_logs(self, deployment: RunningDeployment, host: Optional[RemoteHost] = None) -> str:
        """Captured workload logs, attached to start and health failures."""
        if deployment.mode is DeploymentMode.COMPOSE:
            host = host or RemoteHost(address="", user="")
            command = self._compose(host, f"logs --no-color --tail {DIAGNOSTIC_LOG_LINES}")
        else:
            command = f"docker logs --tail {DIAGNOSTIC_LOG_LINES} {CONTAINER_NAME}"

        result = self.executor.run(command, description="Capturing logs")
        return result.output
