"""Data models for dockerpipe."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Tuple

from .errors import ValidationFailed


class LogLevel(Enum):
    """Logging level enumeration."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass(frozen=True)
class DeploymentConfig:
    """Deployment configuration, immutable for the whole run."""
    host: str = ""
    user: str = ""
    ssh_key: str = ""
    image: str = "app"
    tag: str = "latest"
    platform: str = "linux/amd64"
    dockerfile: str = "Dockerfile"
    container_name: str = "app"
    container_port: str = "3000"
    host_port: str = "3000"
    env_file: str = ""
    network: str = ""
    cpus: str = ""
    memory: str = ""
    volumes: Tuple[str, ...] = ()
    build_args: Dict[str, str] = field(default_factory=dict)
    rollback: bool = False
    version: str = ""

    @property
    def image_ref(self) -> str:
        return f"{self.image}:{self.tag}"

    @property
    def backup_name(self) -> str:
        return f"{self.container_name}_backup"

    @property
    def target(self) -> str:
        return f"{self.user}@{self.host}"

    def validate(self):
        """Fail before any side effect when the remote target is incomplete."""
        if not self.host or not self.user:
            raise ValidationFailed(
                "missing required configuration: host and user must be provided"
            )


@dataclass(frozen=True)
class CommandResult:
    """Captured output of one finished command."""
    stdout: str
    stderr: str


@dataclass(frozen=True)
class RemoteImageRecord:
    """One `repository:tag` entry from the remote image list."""
    reference: str
    created_at: datetime


@dataclass(frozen=True)
class RollbackPlan:
    """Images involved in one rollback run."""
    current_image: str
    previous_image: str
