"""
dockerpipe - build a Docker image locally, ship it over SSH and restart the remote container
"""

__version__ = "0.1.0"

from .pilot import DockerPipe
from .models import DeploymentConfig, LogLevel

__all__ = ["DockerPipe", "DeploymentConfig", "LogLevel", "__version__"]
