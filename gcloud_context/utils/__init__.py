"""Utils package."""

from gcloud_context.utils.logger import get_logger, setup_logging

__all__ = [
    'get_logger',
    'setup_logging',
]
