"""Unit tests for collecting and validating run configuration."""

import pytest

from hostdeploy.core.config_loader import RequestLoader
from hostdeploy.exceptions import ConfigurationError

from conftest import REPO_URL, TOKEN


@pytest.fixture
def complete(ssh_key):
    return {
        "repo_url": REPO_URL,
        "token": TOKEN,
        "branch": "main",
        "ssh_user": "deploy",
        "host": "203.0.113.10",
        "ssh_key": str(ssh_key),
        "app_port": 3000,
    }


class RecordingPrompt:
    def __init__(self, answers):
        self.answers = answers
        self.asked = []

    def __call__(self, text, default=None, hide_input=False, show_default=True):
        self.asked.append((text, hide_input))
        return self.answers.pop(0)


def test_options_only(complete):
    request = RequestLoader(complete, interactive=False).load()

    assert request.repository.url == REPO_URL
    assert request.token == TOKEN
    assert request.app_port == 3000
    assert request.server == "deploy@203.0.113.10"


def test_env_file_fills_gaps(tmp_path, complete):
    env_file = tmp_path / ".env"
    env_file.write_text("HOSTDEPLOY_HOST=198.51.100.7\nHOSTDEPLOY_APP_PORT=8080\n")
    complete.update(host=None, app_port=None)

    request = RequestLoader(complete, env_file=env_file, interactive=False).load()

    assert request.host == "198.51.100.7"
    assert request.app_port == 8080


def test_option_beats_env_file(tmp_path, complete):
    env_file = tmp_path / ".env"
    env_file.write_text("HOSTDEPLOY_BRANCH=develop\n")

    request = RequestLoader(complete, env_file=env_file, interactive=False).load()

    assert request.repository.branch == "main"


def test_missing_env_file(tmp_path, complete):
    with pytest.raises(ConfigurationError):
        RequestLoader(complete, env_file=tmp_path / "nope.env", interactive=False).load()


def test_prompts_for_missing_values_with_hidden_token(complete):
    complete.update(token=None, app_port=None)
    prompt = RecordingPrompt([TOKEN, "5000"])

    request = RequestLoader(complete, prompt=prompt).load()

    assert request.app_port == 5000
    assert prompt.asked[0][1] is True
    assert prompt.asked[1][1] is False


def test_non_interactive_uses_defaults(complete):
    complete.update(branch=None, token=None)

    request = RequestLoader(complete, interactive=False).load()

    assert request.repository.branch == "main"
    assert request.token == ""
    assert request.secrets == []


def test_non_interactive_missing_required(complete):
    complete["host"] = None

    with pytest.raises(ConfigurationError) as excinfo:
        RequestLoader(complete, interactive=False).load()

    assert "host" in excinfo.value.message
    assert "HOSTDEPLOY_HOST" in excinfo.value.context


@pytest.mark.parametrize("port", ["abc", "0", "70000"])
def test_invalid_port(complete, port):
    complete["app_port"] = port
    with pytest.raises(ConfigurationError):
        RequestLoader(complete, interactive=False).load()


def test_missing_ssh_key(tmp_path, complete):
    complete["ssh_key"] = str(tmp_path / "absent_key")
    with pytest.raises(ConfigurationError) as excinfo:
        RequestLoader(complete, interactive=False).load()
    assert "SSH private key" in excinfo.value.message
