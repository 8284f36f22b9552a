import os
from typing import Optional

import requests

from aabexport.Config import StepConfig
from aabexport.Lib.Export.APKExporter import APKExporter
from aabexport.Lib.Export.BundleTool import BundleTool
from aabexport.Lib.Export.CommandRunner import CommandRunner
from aabexport.Lib.Export.FileDownloader import FileDownloader
from aabexport.Lib.Export.Job import ExportJob
from aabexport.Lib.Export.KeystoreResolver import KeystoreResolver
from aabexport.Lib.Output.emitter import StepOutput

APK_PATH_KEY = "APK_PATH"


class ExportController:
    def __init__(self, config: StepConfig, output: Optional[StepOutput] = None,
                 session: Optional[requests.Session] = None):
        self.config = config
        self.output = output or StepOutput()
        self.downloader = FileDownloader(session, timeout=config.http_timeout)
        self.runner = CommandRunner(timeout=config.tool_timeout)

    def bundletool(self) -> BundleTool:
        if self.config.bundletool_path:
            print(f"[BUNDLETOOL] Using pre-installed bundletool: {self.config.bundletool_path}")
            return BundleTool(self.config.bundletool_path, self.runner)
        print(f"[BUNDLETOOL] Downloading bundletool {self.config.bundletool_version}")
        return BundleTool.download(
            self.config.bundletool_version,
            self.downloader,
            self.config.bundletool_base_url,
            self.runner,
        )

    def exporter(self) -> APKExporter:
        return APKExporter(self.bundletool(), KeystoreResolver(self.downloader))

    def job(self) -> ExportJob:
        return ExportJob(
            bundle_path=self.config.aab_path,
            destination_dir=self.config.deploy_dir,
            keystore_config=self.config.keystore_config(),
        )

    def run(self) -> str:
        """Runs the export and publishes the absolute path of the deployed APK."""
        self.config.validate()
        job = self.job()

        work_apk_path = self.exporter().export(job)
        apk_path = os.path.abspath(os.path.join(job.destination_dir, os.path.basename(work_apk_path)))

        self.output.emit(APK_PATH_KEY, apk_path)
        return apk_path
