#!/usr/bin/env python3
# -*- coding: utf-8 -*-


from datetime import datetime
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from .deployment import DeploymentPipeline
from .errors import DockerPipeError
from .executor import CommandExecutor
from .logger import close_logging, log_error, setup_logging
from .models import DeploymentConfig, LogLevel, RollbackPlan
from .rollback import RollbackPipeline

DEFAULT_LOG_FILE = "deploy.log"


class DockerPipe:
    """Registry-less deployment of a Docker image to a remote host over SSH."""

    def __init__(self, config: DeploymentConfig, log_level: LogLevel = LogLevel.INFO,
                 log_file: str = DEFAULT_LOG_FILE, console: Optional[Console] = None):
        self.console = console or Console()
        self.config = config
        self.log_file = log_file

        # Setup logging
        self.logger = setup_logging(log_file, log_level)

        self.executor = CommandExecutor(self.logger, self.console)

    def _show_banner(self):
        """Display run information"""
        mode = "rollback" if self.config.rollback else "deploy"
        target = self.config.target if self.config.host else "not configured"
        info = (
            f"Target: [bold]{target}[/bold]\n"
            f"Image: {self.config.image_ref}  Container: {self.config.container_name}\n"
            f"Mode: {mode}"
        )
        self.console.print(Panel(info, title=f"[bold blue]dockerpipe {self.config.version}[/bold blue]",
                                 title_align="center", border_style="blue"))

    def deploy(self) -> str:
        """Build, transfer and restart the container on the remote host."""
        return DeploymentPipeline(self.config, self.executor, self.logger).run()

    def rollback(self) -> RollbackPlan:
        """Roll the remote container back to the previous image version."""
        return RollbackPipeline(self.config, self.executor, self.logger).run()

    def run(self) -> int:
        """Run the configured pipeline and return the process exit status."""
        self._show_banner()
        started = datetime.now()

        try:
            if self.config.rollback:
                self.rollback()
            else:
                self.deploy()
        except DockerPipeError as e:
            duration = datetime.now() - started
            try:
                log_error(self.logger, e.message, e.context)
            except OSError as log_failure:
                self.console.print(f"[bold red]❌ Failed to write {self.log_file}: {escape(str(log_failure))}[/bold red]")
            self.console.print(f"\n[bold red]❌ FAILED after {duration.total_seconds():.1f}s[/bold red]")
            self.console.print(f"[red]See {self.log_file} for the full command trail[/red]")
            return 1
        except OSError as e:
            self.console.print(f"[bold red]❌ Failed to write {self.log_file}: {escape(str(e))}[/bold red]")
            return 1
        finally:
            close_logging(self.logger)

        duration = datetime.now() - started
        self.console.print(f"\n[bold green]🎉 COMPLETED SUCCESSFULLY![/bold green]")
        self.console.print(f"[green]Duration: {duration.total_seconds():.1f}s[/green]")
        return 0
