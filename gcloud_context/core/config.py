"""
gcloud-context - Configuration Management

This module holds the options for building contexts and for the
instance bootstrap example.
"""

from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

# Version for usage tracking
VERSION = '0.1.0'

# Tag appended to the User-Agent of every request sent through a context
USER_AGENT = f'gcloud-context/{VERSION}'

# OAuth2 scopes
SCOPE_COMPUTE = 'https://www.googleapis.com/auth/compute'
SCOPE_CLOUD_PLATFORM = 'https://www.googleapis.com/auth/cloud-platform'

DEFAULT_SERVICE_VERSIONS = {
    'pubsub': 'v1',
    'storage': 'v1',
    'compute': 'v1',
}


@dataclass(frozen=True)
class ContextConfig:
    """
    Configuration for context construction.

    Frozen, since every context derived from a parent shares its config.
    service_versions accepts a dict and is stored as sorted (name, version)
    pairs; use version_for() to look a version up.

    Example:
        config = ContextConfig(strict_services=True)
        ctx = new_context('my-project', http, config=config)
    """

    # Tag injected into outgoing requests
    user_agent: str = USER_AGENT

    # Raise instead of logging when a service handle cannot be built
    strict_services: bool = False

    # API version per service handle
    service_versions: Tuple[Tuple[str, str], ...] = tuple(
        sorted(DEFAULT_SERVICE_VERSIONS.items())
    )

    # Passed through to discovery.build()
    cache_discovery: bool = False

    def __post_init__(self):
        versions = self.service_versions
        if isinstance(versions, Mapping):
            versions = versions.items()
        object.__setattr__(self, 'service_versions', tuple(sorted(versions)))

    def version_for(self, service: str, default: str = 'v1') -> str:
        """API version configured for a service."""
        return dict(self.service_versions).get(service, default)


@dataclass
class BootConfig:
    """
    Configuration for the instance bootstrap example.

    Example:
        config = BootConfig(
            project='my-project',
            gcloud=True,
            zone='europe-west1-b'
        )
    """

    # Credentials (exactly one of these)
    json_key_file: Optional[str] = None
    gcloud: bool = False

    # Target
    project: str = ''
    name: str = 'gcloud-context-instance'
    image: str = 'projects/debian-cloud/global/images/family/debian-12'
    zone: str = 'us-central1-f'
    machine_type: str = 'f1-micro'
    startup_script_path: Optional[str] = None

    # Timeout settings (in seconds)
    create_timeout: int = 300

    # Console output
    follow: bool = True
    poll_interval: int = 5

    # Logging settings
    log_level: str = 'INFO'
    log_file: Optional[str] = None


# Default configurations
DEFAULT_CONTEXT_CONFIG = ContextConfig()
DEFAULT_BOOT_CONFIG = BootConfig()


def create_context_config(**kwargs) -> ContextConfig:
    """
    Create a context configuration with custom options.

    Args:
        **kwargs: Configuration options (any field from ContextConfig)

    Returns:
        ContextConfig: Configuration object

    Example:
        config = create_context_config(strict_services=True)
    """
    return ContextConfig(**kwargs)


def create_boot_config(**kwargs) -> BootConfig:
    """
    Create a bootstrap configuration with custom options.

    Args:
        **kwargs: Configuration options (any field from BootConfig)

    Returns:
        BootConfig: Configuration object
    """
    return BootConfig(**kwargs)
