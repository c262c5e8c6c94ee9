import json
from unittest import mock

import httplib2

from gcloud_context.core.context import CloudContext, ContextBase
from gcloud_context.core.transport import wrap_transport


class FakeHttp:
    """httplib2.Http stand-in that records requests and answers 200."""

    def __init__(self, body=None):
        self.body = body if body is not None else {}
        self.requests = []

    def request(self, uri, method="GET", body=None, headers=None, **kwargs):
        self.requests.append({"uri": uri, "method": method, "body": body, "headers": dict(headers or {})})
        resp = httplib2.Response({"status": "200", "content-type": "application/json"})
        return resp, json.dumps(self.body).encode("utf-8")

    @property
    def last_headers(self):
        return self.requests[-1]["headers"]


def zoned_context(compute=None, project_id="proj-1", zone="us-central1-f"):
    """A context with a mock compute handle, no discovery involved."""
    base = ContextBase(
        project_id=project_id,
        http=wrap_transport(FakeHttp()),
        pubsub_service=mock.MagicMock(),
        storage_service=mock.MagicMock(),
        compute_service=compute if compute is not None else mock.MagicMock(),
    )
    return CloudContext(base=base, zone=zone)


def http_error(status):
    from googleapiclient.errors import HttpError

    content = json.dumps({"error": {"code": status, "message": f"status {status}"}}).encode("utf-8")
    return HttpError(httplib2.Response({"status": str(status)}), content)
