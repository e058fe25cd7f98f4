"""
Shell command templates.

Every docker command line dockerpipe runs is composed here (the SSH and scp
templates live in `ssh.py`), by plain string substitution of configuration
values. Values are not escaped; keep new templates in this module so they
can be reviewed together.
"""
from typing import List

from .models import DeploymentConfig
from .ssh import remote_command, wrap_remote

KEEP_RELEASES = 5
HISTORY_SEPARATOR = "___"
# Tag and repository placeholder docker prints for dangling images
DANGLING_REFERENCE = "<none>"


def env_file_flag(cfg: DeploymentConfig) -> str:
    if cfg.env_file:
        return f"--env-file ~/{cfg.env_file}"
    return ""


# ==================== PRE-FLIGHT ====================

def local_docker_info_command() -> str:
    return "docker info"


def remote_docker_info_command(cfg: DeploymentConfig) -> str:
    return wrap_remote(cfg, "docker info")


# ==================== BUILD & TRANSFER ====================

def build_command(cfg: DeploymentConfig) -> str:
    """Compose the local `docker build` command."""
    parts = ["docker", "build", "--platform", cfg.platform]
    for key, value in cfg.build_args.items():
        parts.extend(["--build-arg", f"{key}={value}"])
    parts.extend(["-f", cfg.dockerfile, "-t", cfg.image_ref, "."])
    return " ".join(parts)


def transfer_command(cfg: DeploymentConfig) -> str:
    """Stream the local image, gzip compressed, into `docker load` remotely."""
    return f"docker save {cfg.image_ref} | gzip | {remote_command(cfg)} docker load"


# ==================== CONTAINER LIFECYCLE ====================

def run_options(cfg: DeploymentConfig) -> List[str]:
    """Options for `docker run` when deploying the configured image."""
    options = [
        "-d",
        "--name", cfg.container_name,
        "--restart", "unless-stopped",
        "-p", f"{cfg.host_port}:{cfg.container_port}",
    ]
    if cfg.network:
        options.extend(["--network", cfg.network])
    if cfg.cpus:
        options.extend(["--cpus", cfg.cpus])
    if cfg.memory:
        options.extend(["--memory", cfg.memory])
    for volume in cfg.volumes:
        options.extend(["-v", volume])
    if cfg.env_file:
        options.append(env_file_flag(cfg))
    return options


def deploy_command(cfg: DeploymentConfig) -> str:
    """Replace the remote container with one running the new image."""
    run = " ".join(["docker", "run"] + run_options(cfg) + [cfg.image_ref])
    return wrap_remote(cfg, " && ".join([
        f"docker stop {cfg.container_name} || true",
        f"docker rm {cfg.container_name} || true",
        run,
    ]))


def verify_command(cfg: DeploymentConfig) -> str:
    return wrap_remote(
        cfg, f"docker ps --filter name={cfg.container_name} --format '{{{{.Status}}}}'"
    )


def list_release_tags_command(cfg: DeploymentConfig) -> str:
    return wrap_remote(cfg, f"docker images '{cfg.image}' --format '{{{{.Tag}}}}'")


def remove_release_command(cfg: DeploymentConfig, tag: str) -> str:
    return wrap_remote(cfg, f"docker rmi {cfg.image}:{tag}")


# ==================== ROLLBACK ====================

def current_image_command(cfg: DeploymentConfig) -> str:
    return wrap_remote(
        cfg, f"docker inspect --format='{{{{.Config.Image}}}}' {cfg.container_name}"
    )


def image_history_command(cfg: DeploymentConfig) -> str:
    return wrap_remote(
        cfg,
        f"docker images {cfg.image} --format "
        f"'{{{{.Repository}}}}:{{{{.Tag}}}}{HISTORY_SEPARATOR}{{{{.CreatedAt}}}}'",
    )


def swap_command(cfg: DeploymentConfig, previous_image: str) -> str:
    """Back up the live container by renaming it, then start the previous image."""
    run = " ".join(["docker", "run"] + run_options(cfg) + [previous_image])
    return wrap_remote(cfg, " && ".join([
        f"docker stop {cfg.container_name}",
        f"docker rename {cfg.container_name} {cfg.backup_name}",
        run,
    ]))


def restore_command(cfg: DeploymentConfig) -> str:
    """Put the backup container back under the live name and start it."""
    return wrap_remote(cfg, " && ".join([
        f"docker stop {cfg.container_name} || true",
        f"docker rm {cfg.container_name} || true",
        f"docker rename {cfg.backup_name} {cfg.container_name}",
        f"docker start {cfg.container_name}",
    ]))


def remove_backup_command(cfg: DeploymentConfig) -> str:
    return wrap_remote(cfg, f"docker rm {cfg.backup_name}")
