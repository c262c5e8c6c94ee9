"""
gcloud-context - Instance Bootstrap

Finds or creates a Compute Engine instance, then streams its console.
Every API call is parameterized by the context built here.

Usage:
    from gcloud_context.main import boot_instance, stream_console

    http = AuthManager().from_gcloud()
    ctx, instance = boot_instance(BootConfig(project='my-project'), http)
    stream_console(ctx, instance.name)
"""

import sys
from typing import Dict, TextIO, Tuple

from gcloud_context.compute import Instance, get_instance, new_instance
from gcloud_context.core.config import BootConfig, ContextConfig
from gcloud_context.core.context import CloudContext, new_context, with_zone
from gcloud_context.core.exceptions import ConfigurationError, InstanceNotFoundError
from gcloud_context.utils.logger import get_logger


def load_metadata(startup_script_path: str = None) -> Dict[str, str]:
    """
    Build instance metadata from an optional startup script file.

    Raises:
        ConfigurationError: If the script cannot be read
    """
    if not startup_script_path:
        return {}

    try:
        with open(startup_script_path, 'r') as f:
            startup_script = f.read()
    except OSError as e:
        raise ConfigurationError(
            f"Error reading startup script {startup_script_path!r}: {e}"
        ) from e

    get_logger().debug(f"Startup script: {len(startup_script)} bytes from {startup_script_path}")
    return {'startup-script': startup_script}


def boot_instance(config: BootConfig, http, context_config: ContextConfig = None,
                  metadata: Dict[str, str] = None) -> Tuple[CloudContext, Instance]:
    """
    Get the configured instance, creating it if it does not exist.

    Args:
        config: Bootstrap settings (project, zone, name, image, ...)
        http: Authorized transport
        context_config: Optional ContextConfig for the context
        metadata: Metadata for a new instance; read from
            config.startup_script_path when not given

    Returns:
        tuple: (ctx, instance)
            - ctx: Zoned context used for every call
            - instance: The existing or newly created instance
    """
    logger = get_logger()
    if metadata is None:
        metadata = load_metadata(config.startup_script_path)

    ctx = with_zone(new_context(config.project, http, context_config), config.zone)

    try:
        instance = get_instance(ctx, config.name)
        logger.info(f"Found instance {config.name}")
    except InstanceNotFoundError:
        instance = new_instance(
            ctx,
            Instance(
                name=config.name,
                image=config.image,
                machine_type=config.machine_type,
                metadata=metadata,
            ),
            timeout=config.create_timeout,
            poll_interval=config.poll_interval,
        )

    logger.info(f"Instance {instance.name!r} ready: {instance.status}")
    return ctx, instance


def stream_console(ctx: CloudContext, name: str, out: TextIO = None,
                   follow: bool = True, poll_interval: int = 5):
    """Copy an instance's serial port output to `out` (stdout by default)."""
    out = out or sys.stdout
    instance = Instance(name=name)

    for chunk in instance.serial_port_output(ctx, follow=follow, poll_interval=poll_interval):
        out.write(chunk)
        out.flush()
