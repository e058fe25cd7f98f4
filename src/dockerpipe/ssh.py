"""Remote transport: the SSH invocation wrapping every remote command."""
from .models import CommandResult, DeploymentConfig


def key_flag(cfg: DeploymentConfig) -> str:
    """Return the `-i <key>` flag, or an empty string without a key."""
    if cfg.ssh_key:
        return f"-i {cfg.ssh_key}"
    return ""


def remote_command(cfg: DeploymentConfig) -> str:
    """Return `ssh [-i <key>] <user>@<host>`.

    Not cached: callers build it fresh for every command they compose.
    """
    flag = key_flag(cfg)
    if flag:
        return f"ssh {flag} {cfg.user}@{cfg.host}"
    return f"ssh {cfg.user}@{cfg.host}"


def wrap_remote(cfg: DeploymentConfig, inner: str) -> str:
    """Wrap an inner shell command so it runs on the remote host."""
    return f"{remote_command(cfg)} \"{inner}\""


def ssh_check_command(cfg: DeploymentConfig) -> str:
    return f"{remote_command(cfg)} echo \"SSH connection successful\""


def copy_env_file_command(cfg: DeploymentConfig) -> str:
    """Copy the env file to the same relative path under the remote home."""
    parts = ["scp"]
    flag = key_flag(cfg)
    if flag:
        parts.append(flag)
    parts.extend([cfg.env_file, f"{cfg.user}@{cfg.host}:~/{cfg.env_file}"])
    return " ".join(parts)


def check(cfg: DeploymentConfig, executor) -> CommandResult:
    """Check the SSH connection to the remote host."""
    return executor.execute(ssh_check_command(cfg), "Checking SSH connection")


def copy_env_file(cfg: DeploymentConfig, executor) -> CommandResult:
    """Copy the configured environment file to the remote host."""
    return executor.execute(copy_env_file_command(cfg), "Copying environment file to server")
