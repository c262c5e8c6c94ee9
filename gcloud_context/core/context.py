"""
gcloud-context - Context Composer

A CloudContext carries everything an API call needs: the project ID,
the (User-Agent tagged) transport, pre-built service handles for
Pub/Sub, Storage and Compute, and optional zone/namespace overrides.

Contexts are frozen. Every with_*() call returns a new context and
leaves its parent untouched, so several children can be derived from
the same parent:

    ctx = new_context('my-project', http)
    us = with_zone(ctx, 'us-central1-f')
    eu = with_zone(ctx, 'europe-west1-b')

    us.zone   # 'us-central1-f'
    eu.zone   # 'europe-west1-b'
    ctx.zone  # None
"""

from dataclasses import dataclass, field, replace
from typing import Any, Optional

from googleapiclient import discovery

from gcloud_context.core.config import ContextConfig
from gcloud_context.core.exceptions import ContextError, ServiceConstructionError
from gcloud_context.core.transport import UserAgentTransport, wrap_transport
from gcloud_context.utils.logger import get_logger

# Service handles built for every base layer, in build order
SERVICES = ('pubsub', 'storage', 'compute')


@dataclass(frozen=True)
class ContextBase:
    """
    Values installed once per with_context() call.

    Attributes:
        project_id: GCP project ID
        http: Shared, tagged transport
        pubsub_service: Pub/Sub API handle (None if it failed to build)
        storage_service: Storage API handle (None if it failed to build)
        compute_service: Compute API handle (None if it failed to build)
    """
    project_id: str
    http: UserAgentTransport
    pubsub_service: Any = None
    storage_service: Any = None
    compute_service: Any = None


@dataclass(frozen=True)
class CloudContext:
    """
    Immutable carrier of project, transport, service handles and scope.

    Attributes that are not set resolve to None. Use require_base(),
    require_zone() or service() when a missing value is an error.
    """
    base: Optional[ContextBase] = None
    zone: Optional[str] = None
    namespace: Optional[str] = None
    config: ContextConfig = field(default_factory=ContextConfig)

    @property
    def project_id(self) -> Optional[str]:
        return self.base.project_id if self.base else None

    @property
    def http(self) -> Optional[UserAgentTransport]:
        return self.base.http if self.base else None

    @property
    def pubsub_service(self):
        return self.base.pubsub_service if self.base else None

    @property
    def storage_service(self):
        return self.base.storage_service if self.base else None

    @property
    def compute_service(self):
        return self.base.compute_service if self.base else None

    def require_base(self) -> ContextBase:
        """
        Get the base layer or fail.

        Raises:
            ContextError: If the context was not built with new_context()
                or with_context()
        """
        if self.base is None:
            raise ContextError(
                "Context has no project or transport",
                fix="Build the context with new_context(project_id, http)"
            )
        return self.base

    def require_zone(self) -> str:
        """
        Get the zone or fail.

        Raises:
            ContextError: If no zone was set with with_zone()
        """
        if not self.zone:
            raise ContextError(
                "Context has no zone",
                fix="Derive a zoned context with with_zone(ctx, 'us-central1-f')"
            )
        return self.zone

    def service(self, name: str):
        """
        Get a service handle by name ('pubsub', 'storage' or 'compute').

        Raises:
            ContextError: If the name is unknown, the base layer is missing
                or the handle failed to build
        """
        if name not in SERVICES:
            raise ContextError(f"Unknown service '{name}' (expected one of: {', '.join(SERVICES)})")

        handle = getattr(self.require_base(), f'{name}_service')
        if handle is None:
            raise ContextError(
                f"Service handle '{name}' is not available",
                fix="Check the warning logged at context construction, "
                    "or use strict_services=True to fail early"
            )
        return handle


def background() -> CloudContext:
    """Return an empty root context."""
    return CloudContext()


def new_context(project_id: str, http, config: ContextConfig = None) -> CloudContext:
    """
    Create a root context for project_id using the given transport.

    The transport is responsible for authorizing requests (for example a
    google_auth_httplib2.AuthorizedHttp). It is wrapped, not modified:
    use ctx.http to send tagged requests.

    Args:
        project_id: GCP project ID
        http: Authorized httplib2-compatible transport
        config: Optional ContextConfig

    Returns:
        CloudContext with project, transport and service handles set

    Example:
        ctx = new_context('my-project', AuthorizedHttp(credentials))
        ctx.compute_service.instances().list(
            project=ctx.project_id, zone='us-central1-f'
        ).execute()
    """
    return with_context(background(), project_id, http, config)


def with_context(parent: CloudContext, project_id: str, http,
                 config: ContextConfig = None) -> CloudContext:
    """
    Like new_context(), but derives from an existing context.

    The parent's zone and namespace are kept. Its base layer, if any, is
    replaced.

    Args:
        parent: Context to derive from
        project_id: GCP project ID
        http: Authorized httplib2-compatible transport
        config: Optional ContextConfig (defaults to the parent's)

    Returns:
        New CloudContext

    Raises:
        ContextError: If project_id is empty
        ServiceConstructionError: If a service handle fails to build and
            config.strict_services is set
    """
    if not project_id:
        raise ContextError(
            "Project ID is required",
            fix="Find your project ID in the Cloud Console or with: gcloud config get-value project"
        )

    config = config or parent.config
    http = wrap_transport(http, config.user_agent)

    handles = {
        f'{name}_service': _build_service(name, http, config)
        for name in SERVICES
    }

    base = ContextBase(project_id=project_id, http=http, **handles)
    get_logger().debug(f"Context ready for project: {project_id}")

    return replace(parent, base=base, config=config)


def with_zone(parent: CloudContext, zone: str) -> CloudContext:
    """Return a copy of parent that uses the given zone."""
    return replace(parent, zone=zone)


def with_namespace(parent: CloudContext, namespace: str) -> CloudContext:
    """Return a copy of parent that uses the given namespace."""
    return replace(parent, namespace=namespace)


def _build_service(name: str, http: UserAgentTransport, config: ContextConfig):
    """
    Build one service handle on the shared transport.

    Lenient mode logs the failure and returns None; strict mode raises.
    """
    version = config.version_for(name)
    logger = get_logger()

    try:
        logger.debug(f"Building service handle: {name} {version}")
        return discovery.build(
            name,
            version,
            http=http,
            cache_discovery=config.cache_discovery
        )
    except Exception as e:
        if config.strict_services:
            raise ServiceConstructionError(name, str(e)) from e
        logger.warning(f"Service handle '{name}' unavailable: {e}")
        return None
