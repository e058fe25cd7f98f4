import logging

import pytest

from dockerpipe.errors import ExecutionFailed
from dockerpipe.models import CommandResult, DeploymentConfig


class FakeExecutor:
    """Records commands and answers them from scripted rules.

    A rule matches when its fragment occurs in the command. The first
    matching rule wins; one-shot rules are dropped after use. Unmatched
    commands succeed with empty output.
    """

    def __init__(self):
        self.commands = []
        self.descriptions = []
        self.rules = []

    def on(self, fragment, stdout="", fail=False, exit_code=1, once=False, error=None):
        self.rules.append({
            "fragment": fragment,
            "stdout": stdout,
            "fail": fail,
            "exit_code": exit_code,
            "once": once,
            "error": error,
        })
        return self

    def execute(self, command, description):
        self.commands.append(command)
        self.descriptions.append(description)
        for rule in self.rules:
            if rule["fragment"] in command:
                if rule["once"]:
                    self.rules.remove(rule)
                if rule["error"] is not None:
                    raise rule["error"]
                if rule["fail"]:
                    raise ExecutionFailed(
                        f"command failed with exit code {rule['exit_code']}",
                        exit_code=rule["exit_code"],
                    )
                return CommandResult(stdout=rule["stdout"], stderr="")
        return CommandResult(stdout="", stderr="")

    def count(self, fragment):
        return len([c for c in self.commands if fragment in c])


@pytest.fixture
def executor():
    return FakeExecutor()


@pytest.fixture
def logger():
    return logging.getLogger("dockerpipe_tests")


@pytest.fixture
def make_config():
    def _make(**overrides):
        values = {
            "host": "example.com",
            "user": "deploy",
            "image": "myapp",
            "tag": "v7",
            "container_name": "myapp",
            "container_port": "3000",
            "host_port": "80",
        }
        values.update(overrides)
        return DeploymentConfig(**values)
    return _make


@pytest.fixture
def dockerfile(tmp_path, monkeypatch):
    """Work in a temporary directory holding a Dockerfile."""
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "Dockerfile"
    path.write_text("FROM alpine\n")
    return path
