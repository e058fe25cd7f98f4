"""Forward-only deployment pipeline."""
from typing import Optional

from . import ssh
from .docker_ops import DockerOperations
from .models import DeploymentConfig


class DeploymentPipeline:
    """Build locally, ship the image over SSH and restart the remote container.

    Stages run in order and the first failure propagates unchanged; nothing
    is undone. Only cleanup of old releases is allowed to fail.
    """

    def __init__(self, config: DeploymentConfig, executor, logger, docker: Optional[DockerOperations] = None):
        self.config = config
        self.executor = executor
        self.logger = logger
        self.docker = docker or DockerOperations(config, executor, logger)

    def run(self) -> str:
        """Run the deployment and return the verified container status."""
        self.config.validate()
        self.logger.info("Starting deployment process")

        self.docker.check_availability()
        ssh.check(self.config, self.executor)

        self.docker.build()
        self.docker.transfer()

        if self.config.env_file:
            ssh.copy_env_file(self.config, self.executor)

        status = self.docker.deploy()

        self.logger.info("Deployment completed successfully! 🚀")
        return status
