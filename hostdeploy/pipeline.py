"""
Pipeline orchestrator

Runs the deployment stages strictly in order. The first failing stage
aborts the run; the host is left in whatever state it reached.
"""

from pathlib import Path
from typing import Any, Callable, Optional

from hostdeploy.constants import REMOTE_APP_DIR, SETTLE_CEILING_SECONDS
from hostdeploy.core.protocols import Clock, FileTransfer, GitClient, HttpProbe, RemoteExecutor
from hostdeploy.exceptions import (
    ComposeHealthError,
    ContainerHealthError,
    HostDeployError,
    PipelineAborted,
    RemotePreparationError,
)
from hostdeploy.logger import DeployLogger
from hostdeploy.models.deployment import (
    DeploymentMode,
    ProxyRule,
    RemoteHost,
    RunningDeployment,
    WorkingCopy,
)
from hostdeploy.models.request import DeploymentRequest
from hostdeploy.models.results import DeploymentReport, ExitCode, StageResult
from hostdeploy.services import (
    ContainerDeployer,
    GitCLI,
    HealthValidator,
    ProxyConfigurator,
    RemoteBootstrapper,
    RsyncTransfer,
    SSHService,
    SourceSynchronizer,
    select_mode,
    verify_structure,
)


class Stage:
    """Stage names as they appear in stage results and reports."""

    SOURCE = "source"
    STRUCTURE = "structure"
    BOOTSTRAP = "bootstrap"
    TRANSFER = "transfer"
    DEPLOY = "deploy"
    PROXY = "proxy"
    HEALTH_APPLICATION = "health:application"
    HEALTH_PROXY = "health:proxy"
    HEALTH_PUBLIC = "health:public"

    ORDER = [
        SOURCE,
        STRUCTURE,
        BOOTSTRAP,
        TRANSFER,
        DEPLOY,
        PROXY,
        HEALTH_APPLICATION,
        HEALTH_PROXY,
        HEALTH_PUBLIC,
    ]


class PipelineOrchestrator:
    """
    Sequences source sync, bootstrap, deploy, proxy and health validation.

    Collaborators default to the SSH/rsync/git implementations; tests inject
    fakes through the same keyword arguments.
    """

    def __init__(
        self,
        request: DeploymentRequest,
        logger: DeployLogger,
        workdir: Path,
        executor: Optional[RemoteExecutor] = None,
        transfer: Optional[FileTransfer] = None,
        git: Optional[GitClient] = None,
        clock: Optional[Clock] = None,
        probe: Optional[HttpProbe] = None,
        settle_ceiling: float = SETTLE_CEILING_SECONDS,
        remote_dir: str = REMOTE_APP_DIR,
    ):
        self.request = request
        self.logger = logger
        self.remote_dir = remote_dir

        for secret in request.secrets:
            logger.redact.add(secret)

        self.executor = executor or SSHService(request.connection, logger)
        self.transfer = transfer or RsyncTransfer(request.connection, logger)

        self.synchronizer = SourceSynchronizer(git or GitCLI(logger), logger, workdir)
        self.bootstrapper = RemoteBootstrapper(self.executor, logger)
        self.deployer = ContainerDeployer(
            self.executor,
            logger,
            clock=clock,
            settle_ceiling=settle_ceiling,
            remote_dir=remote_dir,
        )
        self.proxy = ProxyConfigurator(self.executor, logger)
        self.validator = HealthValidator(self.executor, logger, probe=probe)

        self.report = DeploymentReport(
            repository=request.repository.name,
            branch=request.repository.branch,
            server=request.server,
            url=request.public_url,
            log_path=str(logger.log_path),
        )

    def run(self) -> DeploymentReport:
        """
        Execute every stage in order.

        Returns:
            The report of a fully successful run

        Raises:
            PipelineAborted: On the first failing stage
            KeyboardInterrupt: When the operator interrupts the run
        """
        request = self.request
        self.logger.log("Script started. Logging to " + str(self.logger.log_path))
        self.logger.log_config(request.describe())

        working_copy: WorkingCopy = self._run_stage(
            Stage.SOURCE,
            "Preparing source code",
            ExitCode.SOURCE,
            lambda: self.synchronizer.synchronize(request),
        )
        self.report.commit = working_copy.commit
        self.logger.log(f"Deploying commit {working_copy.short_commit}")

        self._run_stage(
            Stage.STRUCTURE,
            "Verifying project structure",
            ExitCode.SOURCE,
            lambda: verify_structure(working_copy),
        )
        mode = select_mode(working_copy)
        self.report.mode = mode.value
        self.logger.success(f"Found {mode.descriptor}. Project is deployable ({mode.value} mode)")

        host = RemoteHost(address=request.host, user=request.ssh.user)
        self._run_stage(
            Stage.BOOTSTRAP,
            f"Preparing remote server {request.server}",
            ExitCode.REMOTE_PREPARATION,
            lambda: self.bootstrapper.bootstrap(host),
        )

        self._run_stage(
            Stage.TRANSFER,
            "Transferring source code to remote server",
            ExitCode.REMOTE_PREPARATION,
            lambda: self._transfer(working_copy),
        )

        compose = mode is DeploymentMode.COMPOSE
        deployment: RunningDeployment = self._run_stage(
            Stage.DEPLOY,
            f"Deploying application ({mode.value})",
            ExitCode.COMPOSE_START if compose else ExitCode.CONTAINER_START,
            lambda: self.deployer.deploy(mode, host, request.app_port),
        )
        self.report.identity = deployment.identity

        self._run_stage(
            Stage.PROXY,
            "Configuring Nginx proxy",
            ExitCode.PROXY,
            lambda: self.proxy.configure(ProxyRule(app_port=request.app_port, server_name=request.host)),
        )

        health_error = ComposeHealthError if compose else ContainerHealthError
        self._run_stage(
            Stage.HEALTH_APPLICATION,
            f"Validating app health (http://localhost:{request.app_port})",
            health_error.exit_code,
            lambda: self.validator.check_application(
                request.app_port,
                health_error,
                lambda: self.deployer.capture_logs(deployment, host),
            ),
        )

        self._run_stage(
            Stage.HEALTH_PROXY,
            "Validating Nginx proxy (localhost:80)",
            ExitCode.PROXY,
            self.validator.check_proxy,
        )

        self._run_stage(
            Stage.HEALTH_PUBLIC,
            "Performing final validation from local machine",
            ExitCode.PUBLIC,
            lambda: self.validator.check_public(request.public_url),
        )

        self.logger.success(f"Deployment finished successfully: {request.public_url}")
        return self.report

    def _transfer(self, working_copy: WorkingCopy) -> None:
        result = self.transfer.push(working_copy.path, self.remote_dir)
        if result.is_failure:
            raise RemotePreparationError(
                "Failed to transfer source code to the remote server",
                context=f"Destination: {self.request.server}:{self.remote_dir}",
                diagnostics=result.output,
            )
        self.logger.success("Source code transferred")

    def _run_stage(
        self,
        name: str,
        title: str,
        default_code: int,
        action: Callable[[], Any],
    ) -> Any:
        self.logger.step(title)

        try:
            value = action()
        except HostDeployError as e:
            self._abort(
                StageResult(name, False, e.exit_code, e.format_message(), e.diagnostics), e
            )
        except KeyboardInterrupt:
            self.report.stages.append(
                StageResult(name, False, ExitCode.INTERRUPTED, "Run interrupted by operator")
            )
            self.logger.interrupted = True
            self.logger.log(f"Run interrupted by operator during stage '{name}'", "WARNING")
            raise
        except Exception as e:
            self._abort(StageResult(name, False, default_code, f"{type(e).__name__}: {e}"), e)

        self.report.stages.append(StageResult(name, True))
        return value

    def _abort(self, result: StageResult, cause: Exception) -> None:
        redact = self.logger.redact
        result.message = redact(result.message)
        result.diagnostics = redact(result.diagnostics)
        self.report.stages.append(result)

        self.logger.log_error(result.message, diagnostics=result.diagnostics)
        self.logger.log(f"Deployment FAILED at stage '{result.stage}' (exit code {int(result.exit_code)})", "ERROR")
        raise PipelineAborted(result, self.report) from cause
