"""gcloud-context - Context propagation for Google Cloud Platform APIs.

A CloudContext carries the project ID, an authorized transport tagged
with the gcloud-context User-Agent, and ready-built Pub/Sub, Storage and
Compute API handles. Zone and namespace can be scoped per call chain
without touching the parent context.

Example usage:
    >>> from gcloud_context import new_context, with_zone
    >>> ctx = with_zone(new_context('my-project', http), 'us-central1-f')
    >>> ctx.compute_service.instances().list(
    ...     project=ctx.project_id, zone=ctx.zone).execute()
"""

from gcloud_context.core.config import VERSION, ContextConfig
from gcloud_context.core.context import (
    CloudContext,
    ContextBase,
    background,
    new_context,
    with_context,
    with_namespace,
    with_zone,
)
from gcloud_context.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ContextError,
    GCloudContextError,
    InstanceNotFoundError,
    OperationFailedError,
    OperationTimeoutError,
    ServiceConstructionError,
)
from gcloud_context.core.transport import UserAgentTransport, wrap_transport

__version__ = VERSION

__all__ = [
    'CloudContext',
    'ContextBase',
    'ContextConfig',
    'background',
    'new_context',
    'with_context',
    'with_namespace',
    'with_zone',
    'UserAgentTransport',
    'wrap_transport',
    'GCloudContextError',
    'ContextError',
    'ServiceConstructionError',
    'AuthenticationError',
    'ConfigurationError',
    'InstanceNotFoundError',
    'OperationFailedError',
    'OperationTimeoutError',
]
