"""
gcloud-context - Compute Instances

Thin helpers over the Compute Engine API. Project, zone and the compute
handle always come from the context:

    ctx = with_zone(new_context('my-project', http), 'us-central1-f')

    try:
        vm = get_instance(ctx, 'my-vm')
    except InstanceNotFoundError:
        vm = new_instance(ctx, Instance(name='my-vm', image=IMAGE))

    for chunk in vm.serial_port_output(ctx):
        print(chunk, end='')
"""

import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, Optional

from googleapiclient.errors import HttpError

from gcloud_context.compute.operations import wait_for_zone_operation
from gcloud_context.core.context import CloudContext
from gcloud_context.core.exceptions import InstanceNotFoundError
from gcloud_context.utils.logger import get_logger, log_api_call, log_api_response


@dataclass
class Instance:
    """
    A Compute Engine VM instance.

    name, image, machine_type and metadata describe the instance to
    create. The remaining fields are filled in from the API.
    """
    name: str
    image: str = ''
    machine_type: str = 'f1-micro'
    metadata: Dict[str, str] = field(default_factory=dict)
    description: str = ''

    status: Optional[str] = None
    zone: Optional[str] = None
    self_link: Optional[str] = None

    @classmethod
    def from_resource(cls, resource: Dict[str, Any], image: str = '') -> 'Instance':
        """
        Build an Instance from an instances.get response.

        instances.get does not report the image; pass it in when known
        (get_instance() reads it from the boot disk).
        """
        items = resource.get('metadata', {}).get('items', [])

        return cls(
            name=resource['name'],
            image=image,
            machine_type=_last_segment(resource.get('machineType', '')),
            metadata={item['key']: item.get('value', '') for item in items},
            description=resource.get('description', ''),
            status=resource.get('status'),
            zone=_last_segment(resource.get('zone', '')) or None,
            self_link=resource.get('selfLink'),
        )

    def to_resource(self, zone: str) -> Dict[str, Any]:
        """
        Build an instances.insert body.

        The boot disk is created from `image` and deleted with the
        instance. The VM is attached to the default network with an
        ephemeral external IP.
        """
        machine_type = self.machine_type
        if '/' not in machine_type:
            machine_type = f'zones/{zone}/machineTypes/{machine_type}'

        body = {
            'name': self.name,
            'machineType': machine_type,
            'disks': [{
                'boot': True,
                'autoDelete': True,
                'initializeParams': {'sourceImage': self.image},
            }],
            'networkInterfaces': [{
                'network': 'global/networks/default',
                'accessConfigs': [{'type': 'ONE_TO_ONE_NAT', 'name': 'External NAT'}],
            }],
        }

        if self.description:
            body['description'] = self.description
        if self.metadata:
            body['metadata'] = {
                'items': [{'key': k, 'value': v} for k, v in self.metadata.items()]
            }

        return body

    def serial_port_output(self, ctx: CloudContext, port: int = 1,
                           follow: bool = False, poll_interval: int = 5) -> Iterator[str]:
        """Stream this instance's console output. See serial_port_output()."""
        return serial_port_output(ctx, self.name, port=port, follow=follow,
                                  poll_interval=poll_interval)


def get_instance(ctx: CloudContext, name: str) -> Instance:
    """
    Look up an instance in the context's project and zone.

    Raises:
        InstanceNotFoundError: If the API answers 404
        ContextError: If the context has no project, zone or compute handle
        HttpError: Any other API error, unchanged
    """
    logger = get_logger()
    project = ctx.require_base().project_id
    zone = ctx.require_zone()
    compute = ctx.service('compute')

    log_api_call(logger, 'instances.get', project=project, zone=zone, instance=name)
    try:
        resource = compute.instances().get(
            project=project,
            zone=zone,
            instance=name
        ).execute()
    except HttpError as e:
        if e.resp.status == 404:
            raise InstanceNotFoundError(name, zone, project) from e
        raise

    log_api_response(logger, resource)
    image = _boot_disk_image(compute, project, resource)
    return Instance.from_resource(resource, image=image)


def new_instance(ctx: CloudContext, instance: Instance, timeout: int = 300,
                 poll_interval: int = 5) -> Instance:
    """
    Create an instance and wait until the insert operation is DONE.

    Args:
        ctx: Zoned context
        instance: Description of the instance to create
        timeout: Maximum seconds to wait for the operation
        poll_interval: Seconds between operation polls

    Returns:
        The created instance, as reported by the API, with the requested
        image (the boot disk reports the resolved image, not the family)
    """
    logger = get_logger()
    project = ctx.require_base().project_id
    zone = ctx.require_zone()
    compute = ctx.service('compute')

    body = instance.to_resource(zone)
    log_api_call(logger, 'instances.insert', project=project, zone=zone, instance=instance.name)

    operation = compute.instances().insert(
        project=project,
        zone=zone,
        body=body
    ).execute()

    logger.info(f"Creating instance {instance.name} in {zone}...")
    wait_for_zone_operation(ctx, operation, timeout=timeout, poll_interval=poll_interval)

    return replace(get_instance(ctx, instance.name), image=instance.image)


def serial_port_output(ctx: CloudContext, name: str, port: int = 1,
                       follow: bool = False, poll_interval: int = 5) -> Iterator[str]:
    """
    Yield chunks of an instance's serial port output.

    Each call passes the previous response's `next` offset as `start`, so
    no output is repeated. Without follow, a single read is made. With
    follow, polling continues until the caller stops iterating.

    Args:
        ctx: Zoned context
        name: Instance name
        port: Serial port number (1-4)
        follow: Keep polling for new output
        poll_interval: Seconds between polls when following
    """
    logger = get_logger()
    project = ctx.require_base().project_id
    zone = ctx.require_zone()
    compute = ctx.service('compute')

    start = 0
    while True:
        log_api_call(logger, 'instances.getSerialPortOutput',
                     project=project, zone=zone, instance=name, port=port, start=start)
        output = compute.instances().getSerialPortOutput(
            project=project,
            zone=zone,
            instance=name,
            port=port,
            start=start
        ).execute()

        contents = output.get('contents', '')
        if contents:
            yield contents

        start = int(output.get('next', start))

        if not follow:
            return
        time.sleep(poll_interval)


def _boot_disk_image(compute, project: str, resource: Dict[str, Any]) -> str:
    """
    Source image of the instance's boot disk, or '' if it has none.

    Only zonal disks are looked up; the zone comes from the disk URL.
    """
    source = next(
        (disk.get('source', '') for disk in resource.get('disks', []) if disk.get('boot')),
        ''
    )
    segments = source.split('/')
    if 'zones' not in segments or 'disks' not in segments:
        return ''

    if 'projects' in segments:
        project = segments[segments.index('projects') + 1]
    zone = segments[segments.index('zones') + 1]
    disk_name = segments[-1]

    log_api_call(get_logger(), 'disks.get', project=project, zone=zone, disk=disk_name)
    disk = compute.disks().get(
        project=project,
        zone=zone,
        disk=disk_name
    ).execute()
    return disk.get('sourceImage', '')


def _last_segment(url: str) -> str:
    return url.rsplit('/', 1)[-1]
