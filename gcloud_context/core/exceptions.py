"""
gcloud-context - Custom Exception Classes

This module defines all custom exceptions used in gcloud-context.
Each exception provides clear error messages with troubleshooting steps.
"""


class GCloudContextError(Exception):
    """
    Base exception for all gcloud-context errors.

    All custom exceptions inherit from this, making it easy to catch
    any gcloud-context error with a single except clause.
    """
    pass


class ContextError(GCloudContextError):
    """
    Raised when a required context value is missing or invalid.

    Common causes:
    - Using a context that was never passed through new_context()
    - Calling a zonal helper on a context without with_zone()
    - Empty project ID
    """

    def __init__(self, message: str, fix: str = None):
        """
        Args:
            message: Error description
            fix: Suggested fix
        """
        self.fix = fix
        full_message = f"{message}"
        if fix:
            full_message += f"\n\nFix: {fix}"
        super().__init__(full_message)


class ServiceConstructionError(GCloudContextError):
    """
    Raised when a service handle cannot be built and strict mode is on.
    """

    def __init__(self, service: str, reason: str):
        """
        Args:
            service: Service name (e.g., 'compute')
            reason: Why it failed
        """
        self.service = service
        self.reason = reason

        message = f"Failed to build '{service}' service handle: {reason}"
        message += "\n\nSet strict_services=False to continue without it."

        super().__init__(message)


class AuthenticationError(GCloudContextError):
    """
    Raised when authentication fails.

    Common causes:
    - No credentials configured
    - Credentials expired
    - Malformed service account key file
    """

    def __init__(self, message: str, fix: str = None):
        """
        Args:
            message: Error description
            fix: Suggested fix command (e.g., "gcloud auth login")
        """
        self.fix = fix
        full_message = f"{message}"
        if fix:
            full_message += f"\n\nFix: {fix}"
        super().__init__(full_message)


class ConfigurationError(GCloudContextError):
    """
    Raised when command line flags are missing or conflict.
    """

    def __init__(self, message: str, fix: str = None):
        self.fix = fix
        full_message = f"{message}"
        if fix:
            full_message += f"\n\nFix: {fix}"
        super().__init__(full_message)


class InstanceNotFoundError(GCloudContextError):
    """
    Raised when the specified instance doesn't exist.
    """

    def __init__(self, name: str, zone: str, project: str):
        """
        Args:
            name: Name of the instance that wasn't found
            zone: Zone where we looked
            project: Project where we looked
        """
        self.name = name
        self.zone = zone
        self.project = project

        message = f"Instance '{name}' not found in zone '{zone}' (project: {project})"
        message += f"\n\nList instances in this zone:"
        message += f"\n  gcloud compute instances list --zone={zone} --project={project}"

        super().__init__(message)


class OperationFailedError(GCloudContextError):
    """
    Raised when a GCP operation fails.
    """

    def __init__(self, operation_name: str, reason: str):
        """
        Args:
            operation_name: Name of the operation (e.g., 'insert my-vm')
            reason: Why it failed
        """
        self.operation_name = operation_name
        self.reason = reason

        message = f"Operation '{operation_name}' failed: {reason}"
        super().__init__(message)


class OperationTimeoutError(OperationFailedError):
    """
    Raised when a GCP operation does not finish in time.
    """

    def __init__(self, operation_name: str, timeout: int):
        self.timeout = timeout
        super().__init__(operation_name, f"not DONE after {timeout}s")
