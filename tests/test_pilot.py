import io

import pytest
from rich.console import Console

from dockerpipe.pilot import DockerPipe


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=120, color_system=None)


@pytest.fixture
def make_pilot(tmp_path, console, executor):
    def _make(config):
        pilot = DockerPipe(config, log_file=str(tmp_path / "deploy.log"), console=console)
        pilot.executor = executor
        return pilot
    return _make


def test_successful_deploy_exits_zero(make_config, make_pilot, executor, dockerfile, console):
    executor.on("docker ps", stdout="Up 3 seconds")

    assert make_pilot(make_config()).run() == 0
    assert "COMPLETED SUCCESSFULLY" in console.file.getvalue()


def test_validation_failure_exits_non_zero_and_is_logged(make_config, make_pilot, executor, tmp_path):
    assert make_pilot(make_config(host="")).run() == 1

    assert executor.commands == []
    log = (tmp_path / "deploy.log").read_text()
    assert "ERROR: missing required configuration: host and user must be provided" in log


def test_rollback_mode_runs_rollback(make_config, make_pilot, executor, tmp_path):
    executor.on("docker inspect", stdout="myapp:v2")
    executor.on("{{.CreatedAt}}", stdout=(
        "myapp:v2___2024-05-02 10:00:00 +0000 UTC\n"
        "myapp:v1___2024-05-01 10:00:00 +0000 UTC\n"
    ))
    executor.on("docker ps", stdout="Up 1 second")

    assert make_pilot(make_config(rollback=True)).run() == 0
    assert executor.count("docker rename myapp myapp_backup") == 1
    assert executor.count("docker build") == 0
    assert "Rollback completed successfully" in (tmp_path / "deploy.log").read_text()


def test_restored_rollback_still_fails_the_run(make_config, make_pilot, executor, tmp_path):
    executor.on("docker inspect", stdout="myapp:v2")
    executor.on("{{.CreatedAt}}", stdout=(
        "myapp:v2___2024-05-02 10:00:00 +0000 UTC\n"
        "myapp:v1___2024-05-01 10:00:00 +0000 UTC\n"
    ))
    executor.on("docker rename myapp myapp_backup", fail=True)

    assert make_pilot(make_config(rollback=True)).run() == 1

    log = (tmp_path / "deploy.log").read_text()
    assert "ERROR: rollback failed, restored previous version" in log
    assert "Original error: command failed with exit code 1" in log
