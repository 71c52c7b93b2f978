"""Git client: the clone/pull primitive used by the source synchronizer."""

import os
import subprocess
from pathlib import Path
from typing import Optional

from hostdeploy.logger import DeployLogger, run_with_progress
from hostdeploy.models.results import ExecutionResult


class GitCLI:
    """Thin wrapper over the git executable with prompts disabled."""

    def __init__(self, logger: DeployLogger):
        self.logger = logger
        # Never block on a credential prompt; a bad token must fail fast
        self.env = {**os.environ, "GIT_TERMINAL_PROMPT": "0"}

    def _git(self, args: list[str], description: str, cwd: Optional[Path] = None) -> ExecutionResult:
        command = ["git", *args]
        try:
            result = run_with_progress(self.logger, command, description, cwd=cwd, env=self.env)
        except (OSError, subprocess.SubprocessError) as e:
            return ExecutionResult(returncode=127, stderr=str(e), command=" ".join(command))

        return ExecutionResult(
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            command=" ".join(command),
        )

    def clone(self, url: str, branch: str, dest: Path) -> ExecutionResult:
        return self._git(
            ["clone", "--branch", branch, url, str(dest)],
            f"Cloning branch '{branch}'",
        )

    def fetch(self, repo: Path, url: str, branch: str) -> ExecutionResult:
        refspec = f"+refs/heads/{branch}:refs/remotes/origin/{branch}"
        return self._git(["fetch", url, refspec], f"Fetching branch '{branch}'", cwd=repo)

    def checkout(self, repo: Path, branch: str) -> ExecutionResult:
        return self._git(["checkout", branch], f"Checking out '{branch}'", cwd=repo)

    def merge_ff_only(self, repo: Path, ref: str) -> ExecutionResult:
        return self._git(["merge", "--ff-only", ref], "Fast-forwarding", cwd=repo)

    def set_remote_url(self, repo: Path, url: str) -> ExecutionResult:
        return self._git(["remote", "set-url", "origin", url], "Resetting origin URL", cwd=repo)

    def head(self, repo: Path) -> Optional[str]:
        result = self._git(["rev-parse", "HEAD"], "Reading commit", cwd=repo)
        if result.is_failure:
            return None
        return result.stdout.strip() or None
