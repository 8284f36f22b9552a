import os
import subprocess
from unittest import mock

import pytest

from aabexport.Config import StepConfig
from aabexport.Controllers.ExportController import APK_PATH_KEY, ExportController
from aabexport.Lib.Export.APKExporter import APKExporter
from aabexport.Lib.Export.BundleTool import BundleTool, bundletool_sources
from aabexport.Lib.Export.Errors import ConfigError, ToolInvocationFailed
from aabexport.Lib.Output.emitter import StepOutput


@pytest.fixture
def output():
    return mock.Mock(spec=StepOutput)


def test_uses_preinstalled_bundletool(tmp_path, output):
    config = StepConfig(aab_path="app.aab", deploy_dir=str(tmp_path), bundletool_path="/opt/bundletool.jar",
                        tool_timeout=60)

    tool = ExportController(config, output).bundletool()

    assert tool.jar_path == "/opt/bundletool.jar"
    assert tool.runner.timeout == 60


def test_downloads_bundletool(tmp_path, output, fake_session, ok):
    sources = bundletool_sources("1.2.3", "https://mirror")
    session = fake_session({sources[0]: ok(b"jar")})
    config = StepConfig(aab_path="app.aab", deploy_dir=str(tmp_path), bundletool_version="1.2.3",
                        bundletool_base_url="https://mirror", http_timeout=5)

    tool = ExportController(config, output, session=session).bundletool()

    assert os.path.isfile(tool.jar_path)
    assert session.requested == [(sources[0], True, 5)]


def test_run_exports_deployed_apk_path(tmp_path, output):
    config = StepConfig(aab_path="/path/to/app.aab", deploy_dir=str(tmp_path), bundletool_path="bt.jar")
    controller = ExportController(config, output)
    exporter = mock.Mock(spec=APKExporter)
    exporter.export.return_value = "/tmp/universal_apkXYZ/app.apk"

    with mock.patch.object(ExportController, "exporter", return_value=exporter):
        apk_path = controller.run()

    job = exporter.export.call_args[0][0]
    assert job.bundle_path == "/path/to/app.aab"
    assert job.keystore_config is None
    assert apk_path == os.path.join(str(tmp_path), "app.apk")
    output.emit.assert_called_once_with(APK_PATH_KEY, apk_path)


def test_run_failure_emits_nothing(tmp_path, output):
    config = StepConfig(aab_path="app.aab", deploy_dir=str(tmp_path), bundletool_path="bt.jar")
    exporter = mock.Mock(spec=APKExporter)
    exporter.export.side_effect = ToolInvocationFailed("java", 1, "signing failed")

    with mock.patch.object(ExportController, "exporter", return_value=exporter):
        with pytest.raises(ToolInvocationFailed):
            ExportController(config, output).run()

    output.emit.assert_not_called()


def test_run_validates_config(output):
    with pytest.raises(ConfigError):
        ExportController(StepConfig(aab_path="", deploy_dir=""), output).run()


def test_exporter_wires_bundletool(tmp_path, output):
    config = StepConfig(aab_path="app.aab", deploy_dir=str(tmp_path), bundletool_path="bt.jar")

    exporter = ExportController(config, output).exporter()

    assert isinstance(exporter.bundletool, BundleTool)
    assert exporter.keystore_resolver.downloader is not None


def test_step_output_uses_envman():
    completed = subprocess.CompletedProcess(["envman"], 0, stdout="")
    with mock.patch("aabexport.Lib.Output.emitter.subprocess.run", return_value=completed) as run:
        assert StepOutput().emit("APK_PATH", "/deploy/app.apk") is True

    run.assert_called_once()
    assert run.call_args[0][0] == ["envman", "add", "--key", "APK_PATH"]
    assert run.call_args[1]["input"] == "/deploy/app.apk"


def test_step_output_is_write_once():
    sink = StepOutput(envman="envman-not-installed-here")

    assert sink.emit("APK_PATH", "/a.apk") is False
    with pytest.raises(ValueError):
        sink.emit("APK_PATH", "/b.apk")


def test_step_output_envman_failure():
    completed = subprocess.CompletedProcess(["envman"], 2, stdout="bad key")
    with mock.patch("aabexport.Lib.Output.emitter.subprocess.run", return_value=completed):
        with pytest.raises(ToolInvocationFailed) as excinfo:
            StepOutput().emit("APK_PATH", "/a.apk")

    assert excinfo.value.status == 2


def test_step_output_failure_quotes_command():
    completed = subprocess.CompletedProcess(["envman"], 1, stdout="")
    with mock.patch("aabexport.Lib.Output.emitter.subprocess.run", return_value=completed):
        with pytest.raises(ToolInvocationFailed) as excinfo:
            StepOutput(envman="/opt/my tools/envman").emit("APK_PATH", "/a.apk")

    assert excinfo.value.command == "'/opt/my tools/envman' add --key APK_PATH"


def test_step_output_unexecutable_envman():
    with mock.patch("aabexport.Lib.Output.emitter.subprocess.run", side_effect=PermissionError("Permission denied")):
        with pytest.raises(ToolInvocationFailed) as excinfo:
            StepOutput().emit("APK_PATH", "/a.apk")

    assert excinfo.value.status is None
    assert "Permission denied" in excinfo.value.output
