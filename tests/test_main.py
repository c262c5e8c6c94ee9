import io
import os
import tempfile
from unittest import TestCase, mock

from fakes import FakeHttp, http_error

from gcloud_context import ConfigurationError
from gcloud_context.core.config import BootConfig
from gcloud_context.main import boot_instance, load_metadata, stream_console

RESOURCE = {"name": "vm-1", "status": "RUNNING", "zone": "zones/europe-west1-b"}


class TestLoadMetadata(TestCase):
    def test_no_script(self):
        self.assertEqual(load_metadata(None), {})

    def test_script(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "startup.sh")
            with open(path, "w") as f:
                f.write("#!/bin/sh\necho hello\n")
            self.assertEqual(load_metadata(path), {"startup-script": "#!/bin/sh\necho hello\n"})

    def test_missing_script(self):
        with self.assertRaises(ConfigurationError):
            load_metadata("/does/not/exist.sh")


class TestBootInstance(TestCase):
    def setUp(self):
        self.compute = mock.MagicMock()
        self.instances = self.compute.instances.return_value

        def build(name, version, **kwargs):
            return self.compute if name == "compute" else mock.MagicMock()

        patcher = mock.patch("gcloud_context.core.context.discovery.build", side_effect=build)
        patcher.start()
        self.addCleanup(patcher.stop)

        self.config = BootConfig(project="proj-1", gcloud=True, name="vm-1", zone="europe-west1-b")

    def test_existing_instance(self):
        self.instances.get.return_value.execute.return_value = RESOURCE

        ctx, instance = boot_instance(self.config, FakeHttp())

        self.assertEqual(ctx.project_id, "proj-1")
        self.assertEqual(ctx.zone, "europe-west1-b")
        self.assertEqual(instance.name, "vm-1")
        self.instances.get.assert_called_once_with(project="proj-1", zone="europe-west1-b", instance="vm-1")
        self.instances.insert.assert_not_called()

    def test_creates_missing_instance(self):
        self.instances.get.return_value.execute.side_effect = [http_error(404), RESOURCE]
        self.instances.insert.return_value.execute.return_value = {"name": "op-1", "status": "DONE"}

        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "startup.sh")
            with open(path, "w") as f:
                f.write("echo hello")
            self.config.startup_script_path = path

            ctx, instance = boot_instance(self.config, FakeHttp())

        self.assertEqual(instance.status, "RUNNING")
        body = self.instances.insert.call_args.kwargs["body"]
        self.assertEqual(body["name"], "vm-1")
        self.assertEqual(body["machineType"], "zones/europe-west1-b/machineTypes/f1-micro")
        self.assertEqual(body["disks"][0]["initializeParams"]["sourceImage"], self.config.image)
        self.assertEqual(body["metadata"]["items"], [{"key": "startup-script", "value": "echo hello"}])
        self.assertEqual(instance.image, self.config.image)

    def test_given_metadata_skips_startup_script(self):
        self.instances.get.return_value.execute.side_effect = [http_error(404), RESOURCE]
        self.instances.insert.return_value.execute.return_value = {"name": "op-1", "status": "DONE"}
        self.config.startup_script_path = "/does/not/exist.sh"

        boot_instance(self.config, FakeHttp(), metadata={"startup-script": "echo given"})

        body = self.instances.insert.call_args.kwargs["body"]
        self.assertEqual(body["metadata"]["items"], [{"key": "startup-script", "value": "echo given"}])

    def test_missing_startup_script_fails_before_api_calls(self):
        self.config.startup_script_path = "/does/not/exist.sh"

        with self.assertRaises(ConfigurationError):
            boot_instance(self.config, FakeHttp())
        self.instances.get.assert_not_called()


class TestStreamConsole(TestCase):
    def test_writes_output(self):
        from fakes import zoned_context

        compute = mock.MagicMock()
        compute.instances.return_value.getSerialPortOutput.return_value.execute.return_value = {
            "contents": "login: ",
            "next": "7",
        }
        out = io.StringIO()

        stream_console(zoned_context(compute), "vm-1", out=out, follow=False)

        self.assertEqual(out.getvalue(), "login: ")
