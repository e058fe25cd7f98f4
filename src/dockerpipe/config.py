"""Configuration loading from flags, environment variables and YAML files."""
import argparse
import dataclasses
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from . import __version__
from .errors import ValidationFailed
from .models import DeploymentConfig
from .utils import expand_home, parse_key_value_pairs, split_csv

# Config field -> environment variable
ENV_VARS = {
    'host': 'HOST',
    'user': 'HOST_USER',
    'image': 'DOCKER_IMAGE_NAME',
    'tag': 'DOCKER_IMAGE_TAG',
    'platform': 'HOST_PLATFORM',
    'ssh_key': 'SSH_KEY_PATH',
    'container_name': 'DOCKER_CONTAINER_NAME',
    'container_port': 'DOCKER_CONTAINER_PORT',
    'host_port': 'HOST_PORT',
    'env_file': 'DOCKER_CONTAINER_ENV_FILE',
    'network': 'DOCKER_NETWORK',
    'cpus': 'DOCKER_CPUS',
    'memory': 'DOCKER_MEMORY',
}
ENV_BUILD_ARGS = 'DOCKER_BUILD_ARGS'

STRING_FIELDS = (
    'host', 'user', 'image', 'dockerfile', 'tag', 'platform', 'ssh_key',
    'container_name', 'container_port', 'host_port', 'env_file',
    'network', 'cpus', 'memory',
)

HELP_EPILOG = """
Environment Variables:
  HOST                       Remote host to deploy to
  HOST_USER                  SSH user for remote host
  HOST_PORT                  Host port
  HOST_PLATFORM              Docker platform
  SSH_KEY_PATH               Path to SSH key
  DOCKER_IMAGE_NAME          Docker image name
  DOCKER_IMAGE_TAG           Docker image tag
  DOCKER_CONTAINER_NAME      Name for the container
  DOCKER_CONTAINER_PORT      Container port
  DOCKER_BUILD_ARGS          Build arguments (comma-separated KEY=VALUE pairs)
  DOCKER_CONTAINER_ENV_FILE  Environment file
  DOCKER_NETWORK             Docker network to connect to
  DOCKER_CPUS                Number of CPUs
  DOCKER_MEMORY              Memory limit

Examples:
  dockerpipe --host example.com --user deploy
  dockerpipe --host example.com --user deploy --build-arg VERSION=1.0.0 --build-arg ENV=prod
  dockerpipe --env-file .env.production --build-arg GIT_HASH=$(git rev-parse HEAD)
  dockerpipe --host example.com --user deploy --cpus "0.5" --memory "512m"
  dockerpipe --config deploy.yml --rollback
"""


def create_cli_parser() -> argparse.ArgumentParser:
    """Create the command line parser"""
    parser = argparse.ArgumentParser(
        prog='dockerpipe',
        description="Docker Deployment Tool - build locally, ship over SSH, restart remotely",
        epilog=HELP_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument('--config', '-c', type=str, help='YAML configuration file path')
    parser.add_argument('--log-level', '-l', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        default='INFO', help='Console logging level')
    parser.add_argument('--version', action='version', version=f'dockerpipe version {__version__}')

    parser.add_argument('--host', help='Remote host to deploy to')
    parser.add_argument('--user', help='SSH user for remote host')
    parser.add_argument('--image', help='Docker image name (default: app)')
    parser.add_argument('--dockerfile', help='Path to the Dockerfile (default: Dockerfile)')
    parser.add_argument('--tag', help='Docker image tag (default: latest)')
    parser.add_argument('--platform', help='Docker platform (default: linux/amd64)')
    parser.add_argument('--ssh-key', dest='ssh_key', help='Path to SSH key')
    parser.add_argument('--container-name', dest='container_name', help='Name for the container (default: app)')
    parser.add_argument('--container-port', dest='container_port', help='Container port (default: 3000)')
    parser.add_argument('--host-port', dest='host_port', help='Host port (default: 3000)')
    parser.add_argument('--env-file', dest='env_file', help='Environment file copied to the remote home')
    parser.add_argument('--build-arg', dest='build_args', action='append',
                        help='Build argument (format: KEY=VALUE, can be specified multiple times)')
    parser.add_argument('--volume', dest='volumes', action='append',
                        help='Volume mount (format: host:container, can be specified multiple times)')
    parser.add_argument('--network', help='Docker network to connect to')
    parser.add_argument('--cpus', help="Number of CPUs (e.g., '0.5' or '2')")
    parser.add_argument('--memory', help="Memory limit (e.g., '512m' or '2g')")
    parser.add_argument('--rollback', action='store_true', help='Rollback to the previous version')

    return parser


def load_yaml_config(config_file: str) -> Dict[str, Any]:
    """Load configuration values from a YAML mapping keyed by field name."""
    path = Path(config_file)
    if not path.exists():
        raise ValidationFailed(f"Configuration file not found: {config_file}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ValidationFailed(f"Failed to load config: {config_file}", str(e)) from e

    if not isinstance(data, dict):
        raise ValidationFailed(f"Configuration file {config_file} must contain a mapping")

    known = {f.name for f in dataclasses.fields(DeploymentConfig)} - {'version'}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValidationFailed(
            f"Unknown configuration keys in {config_file}: {', '.join(unknown)}",
            f"Allowed keys: {', '.join(sorted(known))}",
        )
    return data


def load_config(args: argparse.Namespace, environ: Optional[Mapping[str, str]] = None) -> DeploymentConfig:
    """Build the deployment configuration.

    Precedence, lowest first: defaults, YAML file, environment, flags.
    """
    environ = environ if environ is not None else {}
    file_values = load_yaml_config(args.config) if getattr(args, 'config', None) else {}

    values: Dict[str, Any] = {}
    for name in STRING_FIELDS:
        value = getattr(args, name, None)
        if value is None and ENV_VARS.get(name) in environ:
            value = environ[ENV_VARS[name]]
        if value is None and name in file_values:
            value = file_values[name]
        if value is not None:
            values[name] = str(value)

    build_args = {str(k): str(v) for k, v in (file_values.get('build_args') or {}).items()}
    build_args.update(parse_key_value_pairs(split_csv(environ.get(ENV_BUILD_ARGS))))
    build_args.update(parse_key_value_pairs(getattr(args, 'build_args', None) or []))
    values['build_args'] = build_args

    volumes = getattr(args, 'volumes', None) or file_values.get('volumes') or []
    values['volumes'] = tuple(str(v) for v in volumes)

    values['rollback'] = bool(getattr(args, 'rollback', False) or file_values.get('rollback', False))
    values['ssh_key'] = expand_home(values.get('ssh_key', ''))
    values['version'] = __version__

    return DeploymentConfig(**values)
