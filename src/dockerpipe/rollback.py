"""Rollback to the previous image version, with restore on failure."""
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from . import commands, ssh
from .docker_ops import DockerOperations
from .errors import (
    DockerPipeError,
    NoPreviousVersion,
    PreviousVersionNotFound,
    RollbackFailedRestored,
    RollbackFailedRestoreFailed,
)
from .models import DeploymentConfig, RemoteImageRecord, RollbackPlan
from .utils import parse_created_at

# Records with an unreadable creation time sort after every dated record
UNKNOWN_CREATION = datetime.min.replace(tzinfo=timezone.utc)


def parse_image_history(output: str) -> List[RemoteImageRecord]:
    """Parse `reference___created-at` lines into records, most recent first."""
    records = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        reference, _, created = line.partition(commands.HISTORY_SEPARATOR)
        reference = reference.strip()
        if commands.DANGLING_REFERENCE in reference:
            continue
        created_at = parse_created_at(created) or UNKNOWN_CREATION
        records.append(RemoteImageRecord(reference=reference, created_at=created_at))
    return sort_by_creation(records)


def sort_by_creation(records: Sequence[RemoteImageRecord]) -> List[RemoteImageRecord]:
    """Order records by creation time, descending. Ties keep their order."""
    return sorted(records, key=lambda record: record.created_at, reverse=True)


def resolve_previous_image(records: Sequence[RemoteImageRecord], current_image: str) -> RollbackPlan:
    """Pick the record created right before the current image.

    Args:
        records: image records ordered most recent first
        current_image: reference the live container runs

    Raises:
        NoPreviousVersion: fewer than two records exist
        PreviousVersionNotFound: the current image is absent or is the oldest
    """
    if len(records) < 2:
        raise NoPreviousVersion("no previous version found to rollback to")

    for index, record in enumerate(records):
        if record.reference == current_image:
            if index + 1 < len(records):
                return RollbackPlan(current_image=current_image,
                                    previous_image=records[index + 1].reference)
            break

    raise PreviousVersionNotFound(
        "could not find previous version to rollback to",
        f"Current image: {current_image or 'unknown'}",
    )


class RollbackPipeline:
    """Swap the live container for the previous image version.

    The live container is renamed to ``<name>_backup`` before the previous
    image is started. If the swap or its verification fails, the backup is
    renamed back and started again.
    """

    def __init__(self, config: DeploymentConfig, executor, logger, docker: Optional[DockerOperations] = None):
        self.config = config
        self.executor = executor
        self.logger = logger
        self.docker = docker or DockerOperations(config, executor, logger)

    def run(self) -> RollbackPlan:
        """Run the rollback and return the plan that was applied."""
        self.config.validate()
        self.logger.info("Starting rollback process...")

        ssh.check(self.config, self.executor)

        plan = self.plan()
        self.logger.info(f"Found previous version: {plan.previous_image}")

        self.swap(plan)
        self.remove_backup()

        self.logger.info("Rollback completed successfully! 🔄")
        return plan

    def plan(self) -> RollbackPlan:
        """Query the remote host and resolve the previous image version."""
        current_image = self.docker.current_image()
        records = parse_image_history(self.docker.image_history())
        return resolve_previous_image(records, current_image)

    def swap(self, plan: RollbackPlan) -> str:
        """Start the previous image behind a backup, restoring it on failure."""
        try:
            self.executor.execute(commands.swap_command(self.config, plan.previous_image),
                                  "Rolling back to previous version")
            return self.docker.verify()
        except DockerPipeError as e:
            self.logger.warning(f"Rollback to {plan.previous_image} failed: {e.message}")
            self.restore(e)
        except OSError as e:
            # Log write failed mid-swap
            self.restore(e)

    def restore(self, original: Exception):
        """Put the backup container back in place. Always raises."""
        try:
            self.executor.execute(commands.restore_command(self.config),
                                  "Restoring previous version after failed rollback")
        except (DockerPipeError, OSError) as restore_error:
            raise RollbackFailedRestoreFailed(original, restore_error) from restore_error
        raise RollbackFailedRestored(original) from original

    def remove_backup(self):
        try:
            self.executor.execute(commands.remove_backup_command(self.config),
                                  "Cleaning up backup container")
        except DockerPipeError as e:
            self.logger.warning(f"Failed to remove backup container {self.config.backup_name}: {e}")
