"""Remote bootstrapper: brings the host to a state the pipeline can deploy on."""

from hostdeploy.constants import (
    CAPABILITY_PACKAGES,
    CONTAINER_GROUP,
    REQUIRED_SERVICES,
)
from hostdeploy.core.protocols import RemoteExecutor
from hostdeploy.exceptions import RemotePreparationError
from hostdeploy.logger import DeployLogger
from hostdeploy.models.deployment import Capabilities, RemoteHost

# Probe commands per capability; any successful alternative means present
PROBES = {
    "docker": ["command -v docker"],
    "compose": ["command -v docker-compose", "docker compose version"],
    "proxy": ["command -v nginx"],
    "fetch": ["command -v curl"],
}


class RemoteBootstrapper:
    """
    Installs missing capabilities in one batch, starts the runtime and proxy
    services, and grants the SSH user container access.
    """

    def __init__(self, executor: RemoteExecutor, logger: DeployLogger):
        self.executor = executor
        self.logger = logger

    def bootstrap(self, host: RemoteHost) -> Capabilities:
        capabilities = self.probe(host)
        self.install_missing(host, capabilities)
        self.start_services()
        self.ensure_group_membership(host)
        self.logger.success("Server preparation complete")
        return capabilities

    def probe(self, host: RemoteHost) -> Capabilities:
        """Probe every capability once per run; later calls reuse the cache."""
        if host.capabilities is not None:
            return host.capabilities

        capabilities = Capabilities()
        for name, commands in PROBES.items():
            present = False
            for command in commands:
                result = self.executor.run(
                    f"{command} > /dev/null 2>&1", description=f"Probing {name}"
                )
                if result.is_success:
                    present = True
                    if name == "compose":
                        capabilities.compose_command = (
                            "docker compose" if command.startswith("docker compose") else "docker-compose"
                        )
                    break
            setattr(capabilities, name, present)
            self.logger.log(f"{name}: {'present' if present else 'missing'}")

        host.capabilities = capabilities
        return capabilities

    def install_missing(self, host: RemoteHost, capabilities: Capabilities) -> None:
        missing = capabilities.missing
        if not missing:
            self.logger.success("All required packages are already present")
            return

        packages = [CAPABILITY_PACKAGES[name] for name in missing]
        self.logger.log(f"Installing: {' '.join(packages)}")
        result = self.executor.run(
            "sudo apt-get update -y && "
            f"sudo DEBIAN_FRONTEND=noninteractive apt-get install -y {' '.join(packages)}",
            description="Installing missing packages",
        )
        if result.is_failure:
            raise RemotePreparationError(
                f"Failed to install packages: {', '.join(packages)}",
                context=f"Host: {host.address}",
                diagnostics=result.output,
            )

        for name in missing:
            setattr(capabilities, name, True)
        if "compose" in missing:
            capabilities.compose_command = "docker-compose"
        self.logger.success(f"Installed {', '.join(packages)}")

    def start_services(self) -> None:
        for service in REQUIRED_SERVICES:
            self.executor.run(
                f"sudo systemctl enable {service} && sudo systemctl start {service}",
                description=f"Enabling and starting {service}",
            )

        for service in REQUIRED_SERVICES:
            result = self.executor.run(
                f"sudo systemctl is-active --quiet {service}",
                description=f"Validating {service} is active",
            )
            if result.is_failure:
                raise RemotePreparationError(
                    f"Service '{service}' is not active",
                    context=f"Run: sudo systemctl status {service}",
                    diagnostics=result.output,
                )
            self.logger.success(f"{service} service is active")

    def ensure_group_membership(self, host: RemoteHost) -> None:
        result = self.executor.run('id -nG "$USER"', description="Checking group membership")
        if CONTAINER_GROUP in result.stdout.split():
            self.logger.log(f"User '{host.user}' is already in the '{CONTAINER_GROUP}' group")
            return

        added = self.executor.run(
            f'sudo usermod -aG {CONTAINER_GROUP} "$USER"',
            description=f"Adding user to the '{CONTAINER_GROUP}' group",
        )
        if added.is_failure:
            self.logger.warning(
                f"Could not add '{host.user}' to the '{CONTAINER_GROUP}' group: {added.output}"
            )
            return

        self.logger.warning(
            f"Added '{host.user}' to the '{CONTAINER_GROUP}' group. "
            "Group changes may require a new login session to take effect."
        )
