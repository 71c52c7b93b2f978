"""Unit tests for source synchronization and structure verification."""

import pytest

from hostdeploy.exceptions import SourceError
from hostdeploy.models.deployment import WorkingCopy
from hostdeploy.services.source_sync import SourceSynchronizer, verify_structure

from conftest import REPO_URL, TOKEN, FakeGit


class TestSourceSynchronizer:
    def test_fresh_clone_uses_token_then_strips_it(self, tmp_path, logger, request_factory):
        git = FakeGit()
        sync = SourceSynchronizer(git, logger, tmp_path / "work")

        working_copy = sync.synchronize(request_factory())

        clone = git.calls[0]
        assert clone[0] == "clone"
        assert f"oauth2:{TOKEN}@github.com" in clone[1]
        assert git.calls[1] == ("set-url", REPO_URL)
        assert working_copy.path == tmp_path / "work" / "shop"
        assert working_copy.commit == "abc1234def5678"

    def test_public_repository_clones_without_credentials(self, tmp_path, logger, request_factory):
        git = FakeGit()
        sync = SourceSynchronizer(git, logger, tmp_path)

        sync.synchronize(request_factory(token=""))

        assert git.calls[0][1] == REPO_URL
        assert not [call for call in git.calls if call[0] == "set-url"]

    def test_existing_copy_is_fast_forwarded(self, tmp_path, logger, request_factory):
        (tmp_path / "shop").mkdir()
        git = FakeGit()
        sync = SourceSynchronizer(git, logger, tmp_path)

        sync.synchronize(request_factory(branch="release"))

        names = [call[0] for call in git.calls]
        assert names == ["fetch", "checkout", "merge"]
        assert git.calls[0][2] == "release"
        assert git.calls[2] == ("merge", "origin/release")

    def test_diverged_branch_is_refused(self, tmp_path, logger, request_factory):
        (tmp_path / "shop").mkdir()
        git = FakeGit()
        git.failures["merge"] = "fatal: Not possible to fast-forward, aborting."
        sync = SourceSynchronizer(git, logger, tmp_path)

        with pytest.raises(SourceError) as excinfo:
            sync.synchronize(request_factory())

        assert "diverged" in excinfo.value.message
        assert excinfo.value.exit_code == 1

    def test_missing_branch_fails_clone(self, tmp_path, logger, request_factory):
        git = FakeGit()
        git.failures["clone"] = "fatal: Remote branch nope not found in upstream origin"
        sync = SourceSynchronizer(git, logger, tmp_path)

        with pytest.raises(SourceError) as excinfo:
            sync.synchronize(request_factory(branch="nope"))

        assert "nope" in excinfo.value.message
        assert "not found" in excinfo.value.context


class TestVerifyStructure:
    def test_dockerfile_is_enough(self, tmp_path):
        (tmp_path / "Dockerfile").write_text("FROM alpine\n")
        verify_structure(WorkingCopy(path=tmp_path, branch="main"))

    def test_compose_is_enough(self, tmp_path):
        (tmp_path / "docker-compose.yml").write_text("services: {}\n")
        verify_structure(WorkingCopy(path=tmp_path, branch="main"))

    def test_nested_descriptor_does_not_count(self, tmp_path):
        (tmp_path / "app").mkdir()
        (tmp_path / "app" / "Dockerfile").write_text("FROM alpine\n")

        with pytest.raises(SourceError):
            verify_structure(WorkingCopy(path=tmp_path, branch="main"))
