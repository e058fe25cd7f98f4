import os
import sys

from rich.console import Console
from rich.markup import escape

from .config import create_cli_parser, load_config
from .errors import DockerPipeError
from .models import LogLevel
from .pilot import DEFAULT_LOG_FILE, DockerPipe


def main(argv=None):
    parser = create_cli_parser()
    args = parser.parse_args(argv)
    console = Console(stderr=True)

    try:
        config = load_config(args, os.environ)
    except DockerPipeError as e:
        console.print(f"[bold red]ERROR: {escape(str(e))}[/bold red]")
        sys.exit(1)

    try:
        log_level_enum = LogLevel[args.log_level]
    except KeyError:
        log_level_enum = LogLevel.INFO

    try:
        pilot = DockerPipe(config, log_level=log_level_enum)
    except OSError as e:
        console.print(f"[bold red]ERROR: cannot open {DEFAULT_LOG_FILE}: {escape(str(e))}[/bold red]")
        sys.exit(1)

    sys.exit(pilot.run())

if __name__ == "__main__":
    main()
