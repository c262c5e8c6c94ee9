"""
gcloud-context - Compute Module

Helpers for Compute Engine instances that take project, zone and API
handle from a CloudContext.

Usage:
    from gcloud_context.compute import Instance, get_instance, new_instance

    ctx = with_zone(new_context('my-project', http), 'us-central1-f')
    vm = get_instance(ctx, 'my-vm')
"""

from gcloud_context.compute.instance import (
    Instance,
    get_instance,
    new_instance,
    serial_port_output,
)
from gcloud_context.compute.operations import wait_for_zone_operation
from gcloud_context.core.config import SCOPE_COMPUTE

__all__ = [
    'Instance',
    'get_instance',
    'new_instance',
    'serial_port_output',
    'wait_for_zone_operation',
    'SCOPE_COMPUTE',
]
