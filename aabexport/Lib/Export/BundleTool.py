import os
import sys
import tempfile
from typing import List, Optional

from aabexport.Lib.Export.CommandRunner import CommandRunner
from aabexport.Lib.Export.Errors import FilesystemError
from aabexport.Lib.Export.FileDownloader import FileDownloader
from aabexport.Lib.Export.KeystoreConfig import KeystoreConfig

GITHUB_RELEASE_BASE_URL = "https://github.com/google/bundletool/releases/download"
BUNDLETOOL_ALL_JAR_NAME = "bundletool-all.jar"


def bundletool_sources(version: str, base_url: str = GITHUB_RELEASE_BASE_URL) -> List[str]:
    base_url = base_url.rstrip("/")
    return [
        f"{base_url}/{version}/bundletool-all-{version}.jar",
        f"{base_url}/{version}/{BUNDLETOOL_ALL_JAR_NAME}",
    ]


class BundleTool:
    def __init__(self, jar_path: str, runner: Optional[CommandRunner] = None):
        if sys.platform.startswith("win"):
            self.jar_path = os.path.abspath(jar_path)
        else:
            self.jar_path = jar_path
        self.runner = runner or CommandRunner()

    @classmethod
    def download(cls, version: str, downloader: FileDownloader, base_url: str = GITHUB_RELEASE_BASE_URL,
                 runner: Optional[CommandRunner] = None) -> "BundleTool":
        """Fetches the bundletool jar of `version` into a fresh temp dir."""
        try:
            tmp_dir = tempfile.mkdtemp(prefix="tool")
        except OSError as e:
            raise FilesystemError(f"Failed to create bundletool temp dir: {e}") from e

        jar_path = os.path.join(tmp_dir, BUNDLETOOL_ALL_JAR_NAME)
        downloader.get_with_fallback(jar_path, bundletool_sources(version, base_url))
        print(f"[BUNDLETOOL] bundletool path created at: {jar_path}")
        return cls(jar_path, runner)

    def command(self, cmd: str, *args: str) -> List[str]:
        return ["java", "-jar", self.jar_path, cmd, *args]

    def build_apks_command(self, bundle_path: str, apks_path: str,
                           keystore_config: Optional[KeystoreConfig] = None) -> List[str]:
        args = [
            "--mode=universal",
            "--bundle", bundle_path,
            "--output", apks_path,
        ]
        if keystore_config is not None:
            args += [
                "--ks", keystore_config.path,
                "--ks-pass", keystore_config.keystore_password,
                "--ks-key-alias", keystore_config.key_alias,
                "--key-pass", keystore_config.key_password,
            ]
        return self.command("build-apks", *args)

    def build_apks(self, bundle_path: str, apks_path: str, keystore_config: Optional[KeystoreConfig] = None) -> None:
        print(f"[BUNDLETOOL] Building universal APKs: {bundle_path} -> {apks_path} "
              f"({'signed' if keystore_config else 'unsigned'})")
        # Success is defined by the exit status alone
        self.runner.run(self.build_apks_command(bundle_path, apks_path, keystore_config))
