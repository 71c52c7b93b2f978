"""Run configuration: collects the deployment inputs once, then freezes them."""

from pathlib import Path
from typing import Any, Callable, Dict, Optional

import click
from dotenv import dotenv_values

from hostdeploy.constants import (
    DEFAULT_BRANCH,
    DEFAULT_SSH_KEY_PATH,
    ENV_APP_PORT,
    ENV_BRANCH,
    ENV_HOST,
    ENV_REPO_URL,
    ENV_SSH_KEY,
    ENV_SSH_USER,
    ENV_TOKEN,
)
from hostdeploy.exceptions import ConfigurationError
from hostdeploy.models.request import DeploymentRequest, RepositoryRef
from hostdeploy.models.ssh import SSHConfig

# field name -> (env key, prompt text, prompt default, hide input)
FIELDS = {
    "repo_url": (ENV_REPO_URL, "Enter the Git repository URL", None, False),
    "token": (ENV_TOKEN, "Enter your Git Personal Access Token (input will be hidden)", "", True),
    "branch": (ENV_BRANCH, "Enter the branch name", DEFAULT_BRANCH, False),
    "ssh_user": (ENV_SSH_USER, "Enter the remote server's SSH username", None, False),
    "host": (ENV_HOST, "Enter the remote server's IP address", None, False),
    "ssh_key": (ENV_SSH_KEY, "Enter the path to your SSH private key", DEFAULT_SSH_KEY_PATH, False),
    "app_port": (ENV_APP_PORT, "Enter the application's internal container port (e.g., 3000)", None, False),
}


class RequestLoader:
    """
    Builds a DeploymentRequest from, in order of precedence: explicit
    options (which already include environment variables), a dotenv file,
    and interactive prompts.
    """

    def __init__(
        self,
        values: Dict[str, Any],
        env_file: Optional[Path] = None,
        interactive: bool = True,
        prompt: Callable[..., Any] = click.prompt,
    ):
        self.values = values
        self.env_file = env_file
        self.interactive = interactive
        self.prompt = prompt

    def _file_values(self) -> Dict[str, Optional[str]]:
        if self.env_file is None:
            return {}
        if not Path(self.env_file).is_file():
            raise ConfigurationError(f"Env file not found: {self.env_file}")
        return dotenv_values(self.env_file)

    def collect(self) -> Dict[str, Any]:
        file_values = self._file_values()
        collected: Dict[str, Any] = {}

        for name, (env_key, text, default, hidden) in FIELDS.items():
            value = self.values.get(name)
            if value in (None, ""):
                value = file_values.get(env_key)
            if value in (None, ""):
                if self.interactive:
                    value = self.prompt(
                        text,
                        default=default,
                        hide_input=hidden,
                        show_default=not hidden,
                    )
                elif default is not None:
                    value = default
                else:
                    raise ConfigurationError(
                        f"Missing required input '{name}'",
                        context=f"Pass --{name.replace('_', '-')} or set {env_key}",
                    )
            collected[name] = value

        return collected

    def load(self) -> DeploymentRequest:
        values = self.collect()

        repo_url = str(values["repo_url"]).strip()
        if not repo_url:
            raise ConfigurationError("Repository URL must not be empty")

        host = str(values["host"]).strip()
        user = str(values["ssh_user"]).strip()
        if not host or not user:
            raise ConfigurationError("Remote host and SSH username are required")

        try:
            port = int(values["app_port"])
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid application port: {values['app_port']}")
        if not 1 <= port <= 65535:
            raise ConfigurationError(f"Application port out of range: {port}")

        ssh = SSHConfig(key_path=str(values["ssh_key"]).strip(), user=user)
        if not ssh.key_exists:
            raise ConfigurationError(f"SSH private key not found: {ssh.key_path}")

        branch = str(values["branch"] or DEFAULT_BRANCH).strip() or DEFAULT_BRANCH

        return DeploymentRequest(
            repository=RepositoryRef(url=repo_url, branch=branch),
            token=str(values["token"] or ""),
            host=host,
            ssh=ssh,
            app_port=port,
        )
