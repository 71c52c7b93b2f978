"""Deploy command - Git reference to a served application on one host"""

from pathlib import Path
from typing import Any, Dict, Optional

import click

from hostdeploy.base import BaseCommand
from hostdeploy.constants import (
    DEFAULT_LOG_DIR,
    ENV_APP_PORT,
    ENV_BRANCH,
    ENV_HOST,
    ENV_REPO_URL,
    ENV_SSH_KEY,
    ENV_SSH_USER,
    ENV_TOKEN,
    REMOTE_APP_DIR,
    SETTLE_CEILING_SECONDS,
)
from hostdeploy.core.config_loader import RequestLoader
from hostdeploy.exceptions import PipelineAborted
from hostdeploy.pipeline import PipelineOrchestrator
from hostdeploy.ui_components import show_summary


class DeployCommand(BaseCommand):
    """Run the full deployment pipeline against one host."""

    def __init__(
        self,
        options: Dict[str, Any],
        env_file: Optional[Path] = None,
        interactive: bool = True,
        workdir: Path = Path("."),
        log_dir: Path = Path(DEFAULT_LOG_DIR),
        settle_seconds: float = SETTLE_CEILING_SECONDS,
        remote_dir: str = REMOTE_APP_DIR,
        verbose: bool = False,
        json_output: bool = False,
        **collaborators,
    ):
        super().__init__(verbose=verbose, json_output=json_output)
        self.loader = RequestLoader(options, env_file=env_file, interactive=interactive)
        self.workdir = workdir
        self.log_dir = log_dir
        self.settle_seconds = settle_seconds
        self.remote_dir = remote_dir
        # Executor/transfer/git/clock/probe overrides, used by tests
        self.collaborators = collaborators

    def execute(self) -> None:
        """Execute deploy command."""
        request = self.loader.load()

        self.show_header(
            title="Deploy",
            subtitle=f"{request.repository.url} ({request.repository.branch})",
            details={"Server": request.server, "App Port": request.app_port},
        )

        logger = self.init_logger(self.log_dir, secrets=request.secrets)

        with logger:
            orchestrator = PipelineOrchestrator(
                request,
                logger,
                self.workdir,
                settle_ceiling=self.settle_seconds,
                remote_dir=self.remote_dir,
                **self.collaborators,
            )

            try:
                report = orchestrator.run()
            except PipelineAborted as e:
                if self.json_output:
                    data = e.report.to_dict() if e.report else {}
                    data["error"] = e.result.message
                    self.output_json(data, exit_code=int(e.exit_code))
                self._show_log_path()
                raise SystemExit(int(e.exit_code))

        if self.json_output:
            self.output_json(report.to_dict())
            return

        show_summary(report, console=self.console)
        self.print_success("Deployment completed!")


@click.command(name="deploy")
@click.option("--repo-url", envvar=ENV_REPO_URL, help="Git repository URL")
@click.option("--token", envvar=ENV_TOKEN, help="Git access token (prefer the env var)")
@click.option("--branch", "-b", envvar=ENV_BRANCH, help="Branch to deploy (default: main)")
@click.option("--ssh-user", "-u", envvar=ENV_SSH_USER, help="Remote SSH username")
@click.option("--host", "-H", envvar=ENV_HOST, help="Remote host address")
@click.option("--ssh-key", "-i", envvar=ENV_SSH_KEY, help="Path to the SSH private key")
@click.option("--app-port", "-p", envvar=ENV_APP_PORT, type=int, help="Application container port")
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Read missing inputs from a .env file",
)
@click.option("--no-input", is_flag=True, help="Fail instead of prompting for missing inputs")
@click.option(
    "--workdir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Directory holding the local working copy",
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path(DEFAULT_LOG_DIR),
    show_default=True,
    help="Directory for run logs",
)
@click.option(
    "--settle-seconds",
    type=float,
    default=SETTLE_CEILING_SECONDS,
    show_default=True,
    help="Ceiling for the wait after starting containers",
)
@click.option(
    "--remote-dir",
    default=REMOTE_APP_DIR,
    show_default=True,
    help="Directory on the host that receives the source",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
def deploy(
    repo_url,
    token,
    branch,
    ssh_user,
    host,
    ssh_key,
    app_port,
    env_file,
    no_input,
    workdir,
    log_dir,
    settle_seconds,
    remote_dir,
    verbose,
    json_output,
):
    """
    Deploy a Git branch to a host behind an Nginx reverse proxy

    This command will:
    1. Clone or fast-forward the repository locally
    2. Install Docker, Docker Compose, Nginx and curl on the host if missing
    3. Transfer the source and (re)start the containers
    4. Point Nginx port 80 at the application port
    5. Validate the app, the proxy and the public endpoint

    \b
    Exit codes:
      0  success              4  container not running
      1  source/config error  5  container health check failed
      2  stack not running    6  proxy validation failed
      3  stack health failed  7  public validation failed
      8  remote preparation   130 interrupted

    Examples:
        hostdeploy deploy --repo-url https://github.com/acme/shop.git -H 203.0.113.10 -u deploy -p 3000
        hostdeploy deploy --env-file deploy.env --no-input --json
    """
    options = {
        "repo_url": repo_url,
        "token": token,
        "branch": branch,
        "ssh_user": ssh_user,
        "host": host,
        "ssh_key": ssh_key,
        "app_port": app_port,
    }
    cmd = DeployCommand(
        options,
        env_file=env_file,
        interactive=not no_input,
        workdir=workdir,
        log_dir=log_dir,
        settle_seconds=settle_seconds,
        remote_dir=remote_dir,
        verbose=verbose,
        json_output=json_output,
    )
    cmd.run()
