"""
dockerpipe exception hierarchy.

Every pipeline stage raises one of these; the facade turns them into a
logged failure and a non-zero exit status.
"""

from typing import Optional


class DockerPipeError(Exception):
    """Base exception for all dockerpipe errors."""

    def __init__(self, message: str, context: Optional[str] = None):
        self.message = message
        self.context = context
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with optional context."""
        if self.context:
            return f"{self.message}\nContext: {self.context}"
        return self.message


class ValidationFailed(DockerPipeError):
    """Raised when the configuration is incomplete."""

    pass


class ExecutionFailed(DockerPipeError):
    """Raised when a command exits non-zero or cannot be started."""

    def __init__(self, message: str, exit_code: Optional[int] = None,
                 context: Optional[str] = None):
        self.exit_code = exit_code
        super().__init__(message, context)


class DockerfileNotFound(DockerPipeError):
    """Raised when the configured Dockerfile does not exist locally."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"{path} not found")


class ContainerNotRunning(DockerPipeError):
    """Raised when the remote container status does not report `Up`."""

    def __init__(self, container_name: str, status: str = ""):
        self.container_name = container_name
        self.status = status
        context = f"Status: {status}" if status else "Container not listed"
        super().__init__(f"container {container_name} failed to start properly", context)


class NoPreviousVersion(DockerPipeError):
    """Raised when the remote host holds fewer than two images."""

    pass


class PreviousVersionNotFound(DockerPipeError):
    """Raised when the running image has no older entry in the history."""

    pass


class RollbackFailedRestored(DockerPipeError):
    """Raised when the swap failed but the backup container was restored."""

    def __init__(self, original: Exception):
        self.original = original
        super().__init__(
            "rollback failed, restored previous version",
            f"Original error: {original}",
        )


class RollbackFailedRestoreFailed(DockerPipeError):
    """Raised when both the swap and the restore of the backup failed."""

    def __init__(self, original: Exception, restore_error: Exception):
        self.original = original
        self.restore_error = restore_error
        super().__init__(
            "rollback failed and restore failed",
            f"Restore error: {restore_error}; original error: {original}",
        )
