import dataclasses
from unittest import TestCase, mock

from fakes import FakeHttp

from gcloud_context import (
    CloudContext,
    ContextConfig,
    ContextError,
    ServiceConstructionError,
    background,
    new_context,
    with_context,
    with_namespace,
    with_zone,
)
from gcloud_context.core.config import USER_AGENT


def fake_build(name, version, **kwargs):
    handle = mock.MagicMock(name=f"{name}-{version}")
    handle.service_name = name
    handle.http = kwargs["http"]
    return handle


@mock.patch("gcloud_context.core.context.discovery.build", side_effect=fake_build)
class TestContext(TestCase):
    def setUp(self):
        self.http = FakeHttp()

    def test_project_id_resolves(self, _build):
        for project_id in ["proj-1", "my-project-123456", "p"]:
            self.assertEqual(new_context(project_id, self.http).project_id, project_id)

    def test_empty_project_id_is_rejected(self, _build):
        with self.assertRaises(ContextError):
            new_context("", self.http)

    def test_service_handles_present(self, build):
        ctx = new_context("proj-1", self.http)

        self.assertEqual(ctx.pubsub_service.service_name, "pubsub")
        self.assertEqual(ctx.storage_service.service_name, "storage")
        self.assertEqual(ctx.compute_service.service_name, "compute")
        self.assertEqual(build.call_count, 3)

        # All handles share the tagged transport
        for handle in (ctx.pubsub_service, ctx.storage_service, ctx.compute_service):
            self.assertIs(handle.http, ctx.http)

    def test_service_versions_come_from_config(self, build):
        config = ContextConfig(service_versions={"pubsub": "v1beta2", "storage": "v1", "compute": "beta"})
        new_context("proj-1", self.http, config)

        called = {c.args[0]: c.args[1] for c in build.call_args_list}
        self.assertEqual(called, {"pubsub": "v1beta2", "storage": "v1", "compute": "beta"})

    def test_zone_shadowing(self, _build):
        ctx = new_context("proj-1", self.http)
        first = with_zone(ctx, "us-central1-f")
        second = with_zone(first, "europe-west1-b")

        self.assertEqual(second.zone, "europe-west1-b")
        self.assertEqual(first.zone, "us-central1-f")
        self.assertIsNone(ctx.zone)

    def test_siblings_are_independent(self, _build):
        ctx = new_context("proj-1", self.http)
        us = with_zone(ctx, "us-central1-f")
        eu = with_zone(ctx, "europe-west1-b")

        self.assertEqual(us.zone, "us-central1-f")
        self.assertEqual(eu.zone, "europe-west1-b")
        self.assertIs(us.base, eu.base)

    def test_zone_and_namespace_are_independent(self, _build):
        ctx = new_context("proj-1", self.http)

        zoned = with_zone(ctx, "us-central1-f")
        self.assertIsNone(zoned.namespace)

        named = with_namespace(zoned, "ns-a")
        self.assertEqual(named.zone, "us-central1-f")

        rezoned = with_zone(named, "us-east1-b")
        self.assertEqual(rezoned.namespace, "ns-a")

    def test_end_to_end_scenario(self, _build):
        ctx = new_context("proj-1", self.http)
        ctx2 = with_zone(ctx, "us-central1-f")
        ctx3 = with_namespace(ctx2, "ns-a")

        self.assertEqual(ctx3.project_id, "proj-1")
        self.assertEqual(ctx3.zone, "us-central1-f")
        self.assertEqual(ctx3.namespace, "ns-a")
        self.assertIsNone(ctx.zone)

    def test_with_context_keeps_parent_scope(self, _build):
        parent = with_namespace(with_zone(background(), "us-central1-f"), "ns-a")
        ctx = with_context(parent, "proj-1", self.http)

        self.assertEqual(ctx.project_id, "proj-1")
        self.assertEqual(ctx.zone, "us-central1-f")
        self.assertEqual(ctx.namespace, "ns-a")
        self.assertIsNone(parent.project_id)

    def test_contexts_are_frozen(self, _build):
        ctx = new_context("proj-1", self.http)
        with self.assertRaises(dataclasses.FrozenInstanceError):
            ctx.zone = "us-central1-f"

    def test_derived_config_cannot_be_mutated(self, _build):
        parent = new_context("proj-1", self.http)
        child = with_zone(parent, "us-central1-f")

        with self.assertRaises(dataclasses.FrozenInstanceError):
            child.config.strict_services = True
        self.assertFalse(parent.config.strict_services)
        self.assertIs(child.config, parent.config)

    def test_contexts_are_hashable(self, _build):
        ctx = new_context("proj-1", self.http)
        zoned = with_zone(ctx, "us-central1-f")

        self.assertEqual(len({ctx, zoned, with_zone(ctx, "us-central1-f")}), 2)

    def test_service_lookup(self, _build):
        ctx = new_context("proj-1", self.http)
        self.assertIs(ctx.service("compute"), ctx.compute_service)
        with self.assertRaises(ContextError):
            ctx.service("datastore")


class TestBackground(TestCase):
    def test_values_are_absent(self):
        ctx = background()
        self.assertIsInstance(ctx, CloudContext)
        for attr in ["project_id", "http", "pubsub_service", "storage_service", "compute_service", "zone", "namespace"]:
            self.assertIsNone(getattr(ctx, attr), attr)

    def test_require_fails(self):
        ctx = background()
        with self.assertRaises(ContextError):
            ctx.require_base()
        with self.assertRaises(ContextError):
            ctx.require_zone()
        with self.assertRaises(ContextError):
            ctx.service("compute")


class TestServiceConstructionErrors(TestCase):
    def setUp(self):
        def build(name, version, **kwargs):
            if name == "storage":
                raise ValueError("bad client options")
            return fake_build(name, version, **kwargs)

        patcher = mock.patch("gcloud_context.core.context.discovery.build", side_effect=build)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_lenient_logs_and_continues(self):
        with self.assertLogs("gcloud_context", level="WARNING") as logs:
            ctx = new_context("proj-1", FakeHttp())

        self.assertIsNone(ctx.storage_service)
        self.assertIsNotNone(ctx.pubsub_service)
        self.assertIsNotNone(ctx.compute_service)
        self.assertIn("storage", logs.output[0])

        with self.assertRaises(ContextError):
            ctx.service("storage")

    def test_strict_raises(self):
        with self.assertRaises(ServiceConstructionError) as cm:
            new_context("proj-1", FakeHttp(), ContextConfig(strict_services=True))
        self.assertEqual(cm.exception.service, "storage")

    def test_derived_context_keeps_strict_config(self):
        config = ContextConfig(strict_services=True)
        parent = with_zone(CloudContext(config=config), "us-central1-f")
        with self.assertRaises(ServiceConstructionError):
            with_context(parent, "proj-1", FakeHttp())


class TestStaticDiscovery(TestCase):
    """Builds real handles from the discovery documents bundled with googleapiclient."""

    def test_handles_built_and_requests_tagged(self):
        http = FakeHttp(body={"name": "vm-1", "status": "RUNNING"})
        ctx = with_zone(new_context("proj-1", http), "us-central1-f")

        self.assertIsNotNone(ctx.pubsub_service)
        self.assertIsNotNone(ctx.storage_service)
        self.assertIsNotNone(ctx.compute_service)

        result = ctx.compute_service.instances().get(
            project=ctx.project_id, zone=ctx.zone, instance="vm-1"
        ).execute()

        self.assertEqual(result["name"], "vm-1")
        self.assertIn("/projects/proj-1/zones/us-central1-f/instances/vm-1", http.requests[-1]["uri"])
        self.assertEqual(http.last_headers["user-agent"].split().count(USER_AGENT), 1)


class TestContextConfig(TestCase):
    def test_service_versions_are_read_only(self):
        versions = {"compute": "beta"}
        config = ContextConfig(service_versions=versions)
        versions["compute"] = "alpha"

        self.assertEqual(config.version_for("compute"), "beta")
        self.assertEqual(config.version_for("pubsub"), "v1")
        self.assertEqual(ContextConfig().version_for("storage"), "v1")
        hash(config)
