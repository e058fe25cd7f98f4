"""Docker operations on the local machine and the remote host."""
from pathlib import Path
from typing import List

from . import commands
from .errors import ContainerNotRunning, DockerfileNotFound, ExecutionFailed
from .models import CommandResult, DeploymentConfig
from .utils import normalize_image_reference


class DockerOperations:
    """One operation per deployment phase, each delegating to the executor."""

    def __init__(self, config: DeploymentConfig, executor, logger):
        """Initialize docker operations."""
        self.config = config
        self.executor = executor
        self.logger = logger

    def check_availability(self):
        """Check that Docker answers locally, then on the remote host."""
        try:
            self.executor.execute(commands.local_docker_info_command(),
                                  "Checking local Docker installation")
        except ExecutionFailed as e:
            raise ExecutionFailed(f"local Docker check failed: {e.message}",
                                  exit_code=e.exit_code, context=e.context) from e

        try:
            self.executor.execute(commands.remote_docker_info_command(self.config),
                                  "Checking remote Docker installation")
        except ExecutionFailed as e:
            raise ExecutionFailed(
                f"remote Docker check failed - please ensure Docker is installed on "
                f"{self.config.host}: {e.message}",
                exit_code=e.exit_code, context=e.context,
            ) from e

    def build(self) -> CommandResult:
        """Build the image locally for the configured platform."""
        if not Path(self.config.dockerfile).exists():
            raise DockerfileNotFound(self.config.dockerfile)
        return self.executor.execute(commands.build_command(self.config),
                                     "Building Docker image")

    def transfer(self) -> CommandResult:
        """Save, compress and load the image on the remote host in one pipe."""
        return self.executor.execute(commands.transfer_command(self.config),
                                     "Transferring Docker image to server")

    def restart_container(self) -> CommandResult:
        """Stop and remove the live container, then run the new image."""
        return self.executor.execute(commands.deploy_command(self.config),
                                     "Restarting container on server")

    def deploy(self) -> str:
        """Restart the remote container, verify it and prune old releases.

        Returns:
            The container status reported by the verification step
        """
        self.restart_container()
        status = self.verify()

        try:
            self.cleanup_old_releases()
        except ExecutionFailed as e:
            self.logger.warning(f"Failed to cleanup old releases: {e}")

        return status

    def cleanup_old_releases(self) -> List[str]:
        """Keep only the most recent releases of the image on the remote host.

        Docker lists tags most recent first. Dangling `<none>` entries are not
        releases and are skipped. A failed removal is logged and the
        remaining tags are still processed.

        Returns:
            Tags that were removed
        """
        result = self.executor.execute(commands.list_release_tags_command(self.config),
                                       "Listing existing releases")
        tags = [line.strip() for line in result.stdout.splitlines()]
        tags = [tag for tag in tags if tag and tag != commands.DANGLING_REFERENCE]

        if len(tags) <= commands.KEEP_RELEASES:
            return []

        removed = []
        for tag in tags[commands.KEEP_RELEASES:]:
            try:
                self.executor.execute(commands.remove_release_command(self.config, tag),
                                      f"Removing old release {tag}")
                removed.append(tag)
            except ExecutionFailed as e:
                self.logger.warning(f"Failed to remove old release {tag}: {e}")

        return removed

    def verify(self) -> str:
        """Check that the remote container reports an `Up` status."""
        result = self.executor.execute(commands.verify_command(self.config),
                                       "Verifying container status")
        status = result.stdout.strip()
        if "Up" not in status:
            raise ContainerNotRunning(self.config.container_name, status)
        return status

    def current_image(self) -> str:
        """Image reference the live container was started from."""
        result = self.executor.execute(commands.current_image_command(self.config),
                                       "Getting current container information")
        return normalize_image_reference(result.stdout)

    def image_history(self) -> str:
        """Raw `reference___created-at` lines for every local tag of the image."""
        result = self.executor.execute(commands.image_history_command(self.config),
                                       "Getting image history")
        return result.stdout
