"""
gcloud-context - Authentication Manager

This module turns credentials into an authorized httplib2 transport that
can be handed to new_context(). Two credential sources are supported:

1. A service account JSON key file
2. Locally cached gcloud / Application Default Credentials
"""

from typing import Optional, Sequence

import google.auth
from google.auth.exceptions import DefaultCredentialsError, GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2 import service_account
import google_auth_httplib2
import httplib2

from gcloud_context.core.config import SCOPE_CLOUD_PLATFORM, SCOPE_COMPUTE
from gcloud_context.core.exceptions import AuthenticationError
from gcloud_context.utils.logger import get_logger

DEFAULT_SCOPES = (SCOPE_COMPUTE, SCOPE_CLOUD_PLATFORM)


class AuthManager:
    """
    Loads Google Cloud credentials and builds authorized transports.

    Usage:
        auth = AuthManager()
        http = auth.from_gcloud()
        ctx = new_context('my-project', http)
    """

    def __init__(self, scopes: Sequence[str] = DEFAULT_SCOPES):
        """
        Args:
            scopes: OAuth2 scopes to request
        """
        self.scopes = list(scopes)
        self._credentials = None
        self._project: Optional[str] = None

    @property
    def credentials(self):
        return self._credentials

    @property
    def project(self) -> Optional[str]:
        """Project ID attached to the loaded credentials, if any."""
        return self._project

    def from_json_key(self, path: str) -> google_auth_httplib2.AuthorizedHttp:
        """
        Authorize with a service account key file.

        Args:
            path: Path to the JSON key downloaded from the Cloud Console

        Returns:
            AuthorizedHttp transport

        Raises:
            AuthenticationError: If the file is missing or malformed
        """
        try:
            credentials = service_account.Credentials.from_service_account_file(
                path,
                scopes=self.scopes
            )
        except (OSError, ValueError) as e:
            raise AuthenticationError(
                f"Failed to load service account key {path!r}: {e}",
                fix="Download a new JSON key from IAM & Admin > Service Accounts"
            ) from e

        self._credentials = credentials
        self._project = credentials.project_id
        get_logger().debug(f"Loaded service account: {credentials.service_account_email}")

        return self._authorize(credentials)

    def from_gcloud(self) -> google_auth_httplib2.AuthorizedHttp:
        """
        Authorize with locally cached gcloud credentials.

        This uses Application Default Credentials (ADC), which searches for
        credentials in this order:
        1. GOOGLE_APPLICATION_CREDENTIALS environment variable
        2. User credentials from gcloud auth application-default login
        3. GCE metadata service (if running on Google Cloud)

        The token is refreshed immediately so bad credentials fail here
        rather than on the first API call.

        Returns:
            AuthorizedHttp transport

        Raises:
            AuthenticationError: If no credentials are found or refresh fails
        """
        try:
            credentials, project = google.auth.default(scopes=self.scopes)
        except DefaultCredentialsError as e:
            raise AuthenticationError(
                "No credentials found. You need to authenticate first.",
                fix="gcloud auth application-default login"
            ) from e

        try:
            get_logger().debug("Refreshing gcloud credentials...")
            credentials.refresh(Request())
        except GoogleAuthError as e:
            raise AuthenticationError(
                f"Failed to refresh token: {e}",
                fix="gcloud auth application-default login"
            ) from e

        self._credentials = credentials
        self._project = project

        return self._authorize(credentials)

    def _authorize(self, credentials) -> google_auth_httplib2.AuthorizedHttp:
        return google_auth_httplib2.AuthorizedHttp(credentials, http=httplib2.Http())


def get_transport(json_key_file: Optional[str] = None, gcloud: bool = False,
                  scopes: Sequence[str] = DEFAULT_SCOPES):
    """
    Get an authorized transport from exactly one credential source.

    Args:
        json_key_file: Path to a service account JSON key
        gcloud: If True, reuse gcloud credentials
        scopes: OAuth2 scopes to request

    Returns:
        AuthorizedHttp transport

    Raises:
        AuthenticationError: If both or neither source is given, or
            authentication fails
    """
    if bool(json_key_file) == bool(gcloud):
        raise AuthenticationError(
            "Specify exactly one credential source",
            fix="Pass either --json KEYFILE or --gcloud"
        )

    auth = AuthManager(scopes)
    if gcloud:
        return auth.from_gcloud()
    return auth.from_json_key(json_key_file)
