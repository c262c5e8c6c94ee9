"""
gcloud-context - Zone Operations

Waits for Compute Engine zone operations to finish.
"""

import time
from typing import Any, Dict

from gcloud_context.core.context import CloudContext
from gcloud_context.core.exceptions import OperationFailedError, OperationTimeoutError
from gcloud_context.utils.logger import get_logger, log_api_call


def wait_for_zone_operation(ctx: CloudContext, operation: Dict[str, Any],
                            timeout: int = 300, poll_interval: int = 5) -> Dict[str, Any]:
    """
    Poll a zone operation until it is DONE.

    Args:
        ctx: Zoned context the operation was started from
        operation: Operation resource returned by an insert/delete/... call
        timeout: Maximum seconds to wait
        poll_interval: Seconds between polls

    Returns:
        The finished operation resource

    Raises:
        OperationFailedError: If the operation finished with errors
        OperationTimeoutError: If it did not finish within timeout
    """
    logger = get_logger()
    project = ctx.require_base().project_id
    zone = ctx.require_zone()
    compute = ctx.service('compute')
    name = operation['name']

    start_time = time.time()

    while True:
        status = operation.get('status')
        logger.debug(f"Operation {name}: {status}")

        if status == 'DONE':
            error = operation.get('error')
            if error:
                raise OperationFailedError(name, _format_errors(error))
            return operation

        if time.time() - start_time > timeout:
            raise OperationTimeoutError(name, timeout)

        time.sleep(poll_interval)

        log_api_call(logger, 'zoneOperations.get', project=project, zone=zone, operation=name)
        operation = compute.zoneOperations().get(
            project=project,
            zone=zone,
            operation=name
        ).execute()


def _format_errors(error: Dict[str, Any]) -> str:
    errors = error.get('errors') or []
    if not errors:
        return str(error)
    return '; '.join(f"{e.get('code', 'UNKNOWN')}: {e.get('message', '')}" for e in errors)
