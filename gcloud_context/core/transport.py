"""
gcloud-context - Transport Decoration

Wraps an httplib2-compatible transport so every outgoing request carries
the gcloud-context User-Agent tag.

The caller's transport is never modified. wrap_transport() returns a new
wrapper, or the same object if it is already wrapped:

    http = wrap_transport(authorized_http)
    assert wrap_transport(http) is http
"""

from typing import Dict, Optional

from gcloud_context.core.config import USER_AGENT


def add_user_agent(headers: Dict[str, str], user_agent: str) -> Dict[str, str]:
    """
    Append user_agent to the User-Agent header, at most once.

    Header names are matched case-insensitively since googleapiclient
    sends 'user-agent' while other callers send 'User-Agent'.

    Args:
        headers: Request headers (modified in place)
        user_agent: Tag to add

    Returns:
        The same headers dict
    """
    key = next((k for k in headers if k.lower() == 'user-agent'), None)

    if key is None:
        headers['user-agent'] = user_agent
    elif user_agent not in headers[key].split():
        headers[key] = f'{headers[key]} {user_agent}'

    return headers


class UserAgentTransport:
    """
    httplib2-style transport that tags requests with a User-Agent.

    Anything other than request() is delegated to the wrapped transport,
    so attributes such as `credentials` (google_auth_httplib2.AuthorizedHttp)
    stay visible to googleapiclient.

    Example:
        http = UserAgentTransport(AuthorizedHttp(credentials))
        compute = discovery.build('compute', 'v1', http=http)
    """

    def __init__(self, base, user_agent: str = USER_AGENT):
        """
        Args:
            base: Transport to wrap (anything with a request() method)
            user_agent: Tag injected into outgoing requests
        """
        self.base = base
        self.user_agent = user_agent

    def request(self, uri, method='GET', body=None,
                headers: Optional[Dict[str, str]] = None, **kwargs):
        """Send a request through the wrapped transport with the tag added."""
        headers = add_user_agent(dict(headers or {}), self.user_agent)
        return self.base.request(uri, method=method, body=body,
                                 headers=headers, **kwargs)

    def __getattr__(self, name):
        # Only reached for attributes not set in __init__
        if name == 'base':
            raise AttributeError(name)
        return getattr(self.base, name)

    def __repr__(self):
        return f'UserAgentTransport(base={self.base!r}, user_agent={self.user_agent!r})'


def wrap_transport(http, user_agent: str = USER_AGENT) -> UserAgentTransport:
    """
    Decorate a transport with the User-Agent tag.

    Idempotent: a transport that is already a UserAgentTransport is
    returned unchanged, whatever its tag.

    Args:
        http: Transport to wrap
        user_agent: Tag injected into outgoing requests

    Returns:
        UserAgentTransport wrapping http
    """
    if isinstance(http, UserAgentTransport):
        return http
    return UserAgentTransport(http, user_agent)
