"""Unit tests for the container deployer and idempotent teardown."""

import pytest

from hostdeploy.exceptions import ComposeStartError, ContainerStartError
from hostdeploy.models.deployment import Capabilities, DeploymentMode, RemoteHost
from hostdeploy.models.results import DeleteOutcome, SSHResult
from hostdeploy.services.container_deployer import ContainerDeployer, idempotent_delete


@pytest.fixture
def host():
    return RemoteHost(address="203.0.113.10", user="deploy", capabilities=Capabilities(
        docker=True, compose=True, proxy=True, fetch=True
    ))


@pytest.fixture
def deployer(executor, logger, clock):
    return ContainerDeployer(executor, logger, clock=clock)


class TestIdempotentDelete:
    def test_deleted(self, executor):
        assert idempotent_delete(executor, "docker rm app-container") is DeleteOutcome.DELETED

    def test_already_absent(self, executor):
        executor.respond(
            "docker rm",
            returncode=1,
            stderr="Error response from daemon: No such container: app-container",
        )
        outcome = idempotent_delete(executor, "docker rm app-container")
        assert outcome is DeleteOutcome.ALREADY_ABSENT
        assert outcome.is_success

    def test_unexpected_failure(self, executor):
        executor.respond("docker rm", returncode=1, stderr="Cannot connect to the Docker daemon")
        outcome = idempotent_delete(executor, "docker rm app-container")
        assert outcome is DeleteOutcome.FAILED
        assert not outcome.is_success


class TestComposeMode:
    def test_replaces_stack_under_fixed_project(self, deployer, executor, host):
        deployment = deployer.deploy(DeploymentMode.COMPOSE, host, 3000)

        assert deployment.identity == "app"
        assert deployment.mode is DeploymentMode.COMPOSE
        down = executor.index_of("docker-compose -p app down")
        up = executor.index_of("docker-compose -p app up --build -d")
        assert down < up
        assert executor.commands[down].startswith("cd ~/app && ")

    def test_uses_detected_plugin_form(self, deployer, executor, host):
        host.capabilities.compose_command = "docker compose"
        executor.respond("docker compose -p app ps", stdout="app-web-1  Up 1 second\n")

        deployer.deploy(DeploymentMode.COMPOSE, host, 3000)

        assert executor.ran("docker compose -p app up --build -d")

    def test_never_running_fails_with_logs(self, deployer, executor, host, clock):
        executor.respond("-p app ps", stdout="NAME  STATUS\napp-web-1  Exited (1)\n")
        executor.respond("logs --no-color", stdout="web  | Error: Cannot find module 'express'")

        with pytest.raises(ComposeStartError) as excinfo:
            deployer.deploy(DeploymentMode.COMPOSE, host, 3000)

        assert "Cannot find module" in excinfo.value.diagnostics
        assert excinfo.value.exit_code == 2
        assert sum(clock.sleeps) == 15

    def test_up_failure(self, deployer, executor, host):
        executor.respond("up --build -d", returncode=1, stderr="yaml: line 3: mapping values")

        with pytest.raises(ComposeStartError) as excinfo:
            deployer.deploy(DeploymentMode.COMPOSE, host, 3000)

        assert "mapping values" in excinfo.value.diagnostics

    def test_compose_port_warning(self, deployer, host, logger):
        deployer.deploy(DeploymentMode.COMPOSE, host, 8080)
        assert "port 8080" in logger.log_path.read_text()


class TestSingleContainerMode:
    def test_build_then_replace_then_run(self, deployer, executor, host):
        deployment = deployer.deploy(DeploymentMode.SINGLE_CONTAINER, host, 8000)

        assert deployment.identity == "app-container"
        build = executor.index_of("docker build -t app-deployment .")
        stop = executor.index_of("docker stop app-container")
        remove = executor.index_of("docker rm app-container")
        run = executor.index_of("docker run -d --name app-container -p 8000:8000 app-deployment")
        assert build < stop < remove < run

    def test_first_deploy_tolerates_absent_container(self, deployer, executor, host):
        executor.respond("docker stop", returncode=1, stderr="Error: No such container: app-container")
        executor.respond("docker rm", returncode=1, stderr="Error: No such container: app-container")

        deployer.deploy(DeploymentMode.SINGLE_CONTAINER, host, 8000)

        assert executor.ran("docker run -d")

    def test_teardown_failure_is_fatal(self, deployer, executor, host):
        executor.respond("docker stop", returncode=1, stderr="permission denied")

        with pytest.raises(ContainerStartError):
            deployer.deploy(DeploymentMode.SINGLE_CONTAINER, host, 8000)

        assert executor.ran("docker run") == []

    def test_build_failure(self, deployer, executor, host):
        executor.respond("docker build", returncode=1, stderr="failed to solve: dockerfile parse error")

        with pytest.raises(ContainerStartError) as excinfo:
            deployer.deploy(DeploymentMode.SINGLE_CONTAINER, host, 8000)

        assert excinfo.value.exit_code == 4
        assert "dockerfile parse error" in excinfo.value.diagnostics

    def test_exited_container_fails_with_logs(self, deployer, executor, host):
        executor.respond("docker ps --filter", stdout="")
        executor.respond("docker logs --tail 200 app-container", stdout="panic: bind: address in use")

        with pytest.raises(ContainerStartError) as excinfo:
            deployer.deploy(DeploymentMode.SINGLE_CONTAINER, host, 8000)

        assert "address in use" in excinfo.value.diagnostics

    def _listing(self, executor, answers):
        """Answer successive `docker ps` checks from answers."""
        original = executor.run
        pending = iter(answers)

        def run(command, timeout=None, input=None, description=None):
            if "docker ps --filter" in command:
                executor.commands.append(command)
                return SSHResult(returncode=0, stdout=next(pending), command=command)
            return original(command, timeout=timeout, input=input, description=description)

        executor.run = run

    def test_slow_start_gets_full_settle_interval(self, deployer, executor, host, clock):
        self._listing(executor, ["", "", "app-container\n", "app-container\n"])

        deployer.deploy(DeploymentMode.SINGLE_CONTAINER, host, 8000)

        assert clock.sleeps == [1.0, 2.0, 4.0, 8.0]

    def test_crash_after_start_fails_early(self, deployer, executor, host, clock):
        self._listing(executor, ["app-container\n", ""])
        executor.respond("docker logs --tail 200 app-container", stdout="Killed")

        with pytest.raises(ContainerStartError) as excinfo:
            deployer.deploy(DeploymentMode.SINGLE_CONTAINER, host, 8000)

        assert clock.sleeps == [1.0, 2.0]
        assert "Killed" in excinfo.value.diagnostics
