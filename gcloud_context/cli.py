"""
gcloud-context - Instance Bootstrap Command Line Interface

Usage:
    gcloud-context-boot --gcloud --project=my-project
    gcloud-context-boot --json=key.json --project=my-project \\
        --name=web-1 --zone=europe-west1-b --startup=startup.sh
"""

import argparse
import json
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

import yaml
from googleapiclient.errors import HttpError

from gcloud_context.compute import Instance
from gcloud_context.core.auth import get_transport
from gcloud_context.core.config import VERSION, BootConfig, DEFAULT_BOOT_CONFIG
from gcloud_context.core.exceptions import ConfigurationError, GCloudContextError
from gcloud_context.main import boot_instance, load_metadata, stream_console
from gcloud_context.utils.logger import setup_logging


class OutputFormatter:
    """
    Format the instance summary.

    Supports: json, yaml, table
    """

    @staticmethod
    def format_output(data: Dict[str, Any], format_type: str = 'table'):
        """Format output based on format type."""
        if format_type == 'json':
            return json.dumps(data, indent=2)
        elif format_type == 'yaml':
            return yaml.safe_dump(data, default_flow_style=False)
        elif format_type == 'table':
            return OutputFormatter._format_table(data)
        else:
            return str(data)

    @staticmethod
    def _format_table(data: Dict[str, Any]) -> str:
        """Format as a two-column table."""
        width = max((len(k) for k in data), default=0)
        return "\n".join(f"{key:{width}}  {value}" for key, value in data.items())


def instance_summary(instance: Instance) -> Dict[str, Any]:
    """Summary of an instance for display (startup script contents omitted)."""
    data = asdict(instance)
    data['metadata'] = sorted(data['metadata'])
    return data


def create_parser() -> argparse.ArgumentParser:
    """
    Create argument parser.

    Returns:
        Configured ArgumentParser
    """
    defaults = DEFAULT_BOOT_CONFIG

    parser = argparse.ArgumentParser(
        prog='gcloud-context-boot',
        description='Find or create a Compute Engine instance and stream its console output.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
EXAMPLES
    Using gcloud credentials:
        $ gcloud-context-boot --gcloud --project=my-project

    Using a service account key and a startup script:
        $ gcloud-context-boot --json=key.json --project=my-project \\
            --startup=startup.sh
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'gcloud-context v{VERSION}'
    )

    creds = parser.add_argument_group('CREDENTIAL FLAGS (exactly one)')
    creds.add_argument(
        '--json',
        metavar='KEYFILE',
        dest='json_key_file',
        help='A path to your JSON key file for your service account downloaded '
             'from the Cloud Console.'
    )
    creds.add_argument(
        '--gcloud',
        action='store_true',
        help='Reuse gcloud credentials for authorization.'
    )

    instance = parser.add_argument_group('INSTANCE FLAGS')
    instance.add_argument(
        '--project',
        metavar='PROJECT',
        default='',
        help='The ID of your Google Cloud project.'
    )
    instance.add_argument(
        '--name',
        metavar='NAME',
        default=defaults.name,
        help=f'The name of the instance to create. Default: {defaults.name}'
    )
    instance.add_argument(
        '--image',
        metavar='IMAGE',
        default=defaults.image,
        help=f'The image to use for the instance. Default: {defaults.image}'
    )
    instance.add_argument(
        '--zone',
        metavar='ZONE',
        default=defaults.zone,
        help=f'The zone for the instance. Default: {defaults.zone}'
    )
    instance.add_argument(
        '--machine',
        metavar='TYPE',
        dest='machine_type',
        default=defaults.machine_type,
        help=f'The machine type for the instance. Default: {defaults.machine_type}'
    )
    instance.add_argument(
        '--startup',
        metavar='FILE',
        dest='startup_script_path',
        help='The path to the startup script for the instance.'
    )
    instance.add_argument(
        '--timeout',
        type=int,
        metavar='SECONDS',
        default=defaults.create_timeout,
        help=f'Timeout for instance creation in seconds. Default: {defaults.create_timeout}'
    )

    output = parser.add_argument_group('OUTPUT FLAGS')
    output.add_argument(
        '--no-follow',
        dest='follow',
        action='store_false',
        help='Print the console output once instead of following it.'
    )
    output.add_argument(
        '--format',
        metavar='FORMAT',
        choices=['json', 'yaml', 'table', 'disable'],
        default='table',
        help='Instance summary format. One of: json, yaml, table, disable. Default: table'
    )
    output.add_argument(
        '--verbosity',
        metavar='VERBOSITY',
        choices=['debug', 'info', 'warning', 'error', 'critical'],
        default='info',
        help='Logging verbosity. One of: debug, info, warning, error, critical. Default: info'
    )
    output.add_argument(
        '--log-file',
        metavar='LOG_FILE',
        help='Write logs to this file.'
    )

    return parser


def validate_args(args: argparse.Namespace):
    """
    Check flag combinations.

    Raises:
        ConfigurationError: If credential flags are missing or conflict,
            or the project ID is empty
    """
    if bool(args.json_key_file) == bool(args.gcloud):
        raise ConfigurationError(
            "Please specify either gcloud or JSON credentials.",
            fix="Pass exactly one of --gcloud or --json=KEYFILE"
        )

    if not args.project:
        raise ConfigurationError(
            "Please specify a project ID.",
            fix="Pass --project=PROJECT_ID"
        )

    if args.timeout < 1:
        raise ConfigurationError("--timeout must be at least 1 second")


def args_to_boot_config(args: argparse.Namespace) -> BootConfig:
    """Convert arguments to BootConfig."""
    return BootConfig(
        json_key_file=args.json_key_file,
        gcloud=args.gcloud,
        project=args.project,
        name=args.name,
        image=args.image,
        zone=args.zone,
        machine_type=args.machine_type,
        startup_script_path=args.startup_script_path,
        create_timeout=args.timeout,
        follow=args.follow,
        log_level=args.verbosity.upper(),
        log_file=args.log_file,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""

    parser = create_parser()
    args = parser.parse_args(argv)

    logger = setup_logging(
        level=args.verbosity.upper(),
        log_file=args.log_file,
        debug=args.verbosity == 'debug'
    )

    try:
        validate_args(args)
    except ConfigurationError as e:
        parser.print_help(sys.stderr)
        logger.error(str(e))
        return 1

    config = args_to_boot_config(args)

    try:
        metadata = load_metadata(config.startup_script_path)
        http = get_transport(config.json_key_file, config.gcloud)
        ctx, instance = boot_instance(config, http, metadata=metadata)

        if args.format != 'disable':
            print(OutputFormatter.format_output(instance_summary(instance), args.format))

        stream_console(ctx, instance.name, follow=config.follow,
                       poll_interval=config.poll_interval)
        return 0

    except KeyboardInterrupt:
        return 130  # Standard exit code for SIGINT
    except GCloudContextError as e:
        logger.error(str(e))
        return 1
    except HttpError as e:
        logger.error(f"API error: {e}")
        if args.verbosity == 'debug':
            logger.exception("Full traceback:")
        return 1


if __name__ == '__main__':
    sys.exit(main())
