"""Source synchronizer: makes the requested branch available locally."""

from pathlib import Path

from hostdeploy.constants import BUILD_DESCRIPTOR, COMPOSE_DESCRIPTOR
from hostdeploy.core.protocols import GitClient
from hostdeploy.exceptions import SourceError
from hostdeploy.logger import DeployLogger
from hostdeploy.models.deployment import WorkingCopy
from hostdeploy.models.request import DeploymentRequest


class SourceSynchronizer:
    """
    Clones or fast-forwards the working copy.

    The token only ever travels inside a transient URL handed to git; the
    persisted origin remote is always the token-free URL.
    """

    def __init__(self, git: GitClient, logger: DeployLogger, workdir: Path):
        self.git = git
        self.logger = logger
        self.workdir = Path(workdir)

    def synchronize(self, request: DeploymentRequest) -> WorkingCopy:
        repo = request.repository
        path = self.workdir / repo.name
        auth_url = repo.authenticated_url(request.token)

        if path.is_dir():
            self.logger.log(f"Repository '{repo.name}' already exists. Pulling latest changes...")
            self._update(path, auth_url, repo.branch)
        else:
            self.logger.log(f"Cloning repository '{repo.name}'")
            self._clone(path, auth_url, repo.url, repo.branch)

        commit = self.git.head(path)
        self.logger.success(f"Successfully checked out branch '{repo.branch}'")
        return WorkingCopy(path=path, branch=repo.branch, commit=commit)

    def _clone(self, path: Path, auth_url: str, plain_url: str, branch: str) -> None:
        self.workdir.mkdir(parents=True, exist_ok=True)
        result = self.git.clone(auth_url, branch, path)
        if result.is_failure:
            raise SourceError(
                f"Failed to clone branch '{branch}'",
                context=result.stderr.strip() or None,
            )

        if auth_url != plain_url:
            reset = self.git.set_remote_url(path, plain_url)
            if reset.is_failure:
                raise SourceError(
                    "Failed to strip credentials from the origin remote",
                    context=reset.stderr.strip() or None,
                )

    def _update(self, path: Path, auth_url: str, branch: str) -> None:
        steps = [
            (lambda: self.git.fetch(path, auth_url, branch), f"Failed to fetch branch '{branch}'"),
            (lambda: self.git.checkout(path, branch), f"Failed to check out branch '{branch}'"),
            (
                lambda: self.git.merge_ff_only(path, f"origin/{branch}"),
                f"Branch '{branch}' has diverged from the remote; refusing to force-resolve",
            ),
        ]
        for run_step, failure in steps:
            result = run_step()
            if result.is_failure:
                raise SourceError(failure, context=result.stderr.strip() or None)


def verify_structure(working_copy: WorkingCopy) -> None:
    """
    Fail closed unless the repository root has a deployment descriptor.

    Raises:
        SourceError: If neither descriptor is present
    """
    if not (working_copy.has_compose_descriptor or working_copy.has_build_descriptor):
        raise SourceError(
            f"Neither {BUILD_DESCRIPTOR} nor {COMPOSE_DESCRIPTOR} found in the repository root",
            context=str(working_copy.path),
        )
