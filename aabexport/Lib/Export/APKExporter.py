import os
import shutil
import tempfile
from functools import partial
from typing import Callable, Optional

from aabexport.Lib.Export.BundleTool import BundleTool
from aabexport.Lib.Export.CommandRunner import CommandRunner
from aabexport.Lib.Export.Errors import FilesystemError, MissingExpectedOutput
from aabexport.Lib.Export.Job import ExportJob
from aabexport.Lib.Export.KeystoreConfig import KeystoreConfig
from aabexport.Lib.Export.KeystoreResolver import KeystoreResolver

UNIVERSAL_APK_NAME = "universal.apk"


def filename_with_extension(base_path: str, extension: str) -> str:
    filename = os.path.basename(base_path)
    stem, _ = os.path.splitext(filename)
    return stem + extension


def apks_filename(bundle_path: str) -> str:
    return filename_with_extension(bundle_path, ".apks")


def apk_filename(apks_path: str) -> str:
    return filename_with_extension(apks_path, ".apk")


def universal_apk_name(bundle_path: str) -> str:
    # "app-.aab" style names would otherwise end up as "app-.apk"
    stem, extension = os.path.splitext(apk_filename(bundle_path))
    return stem.strip("-") + extension


def unzip_archive(archive: str, dest_dir: str, runner: Optional[CommandRunner] = None) -> None:
    (runner or CommandRunner()).run(["unzip", "-o", archive, "-d", dest_dir])


class APKExporter:

    def __init__(self, bundletool: BundleTool, keystore_resolver: KeystoreResolver,
                 extractor: Optional[Callable[[str, str], None]] = None):
        self.bundletool = bundletool
        self.keystore_resolver = keystore_resolver
        self.extractor = extractor or partial(unzip_archive, runner=bundletool.runner)

    def _work_dir(self) -> str:
        try:
            return tempfile.mkdtemp(prefix="universal_apk")
        except OSError as e:
            raise FilesystemError(f"Failed to create working dir: {e}") from e

    def _export_apks(self, bundle_path: str, work_dir: str, keystore_config: Optional[KeystoreConfig]) -> str:
        apks_path = os.path.join(work_dir, apks_filename(bundle_path))
        self.bundletool.build_apks(bundle_path, apks_path, keystore_config)
        return apks_path

    def _extract_universal_apk(self, apks_path: str, work_dir: str) -> str:
        self.extractor(apks_path, work_dir)

        universal_apk_path = os.path.join(work_dir, UNIVERSAL_APK_NAME)
        if not os.path.isfile(universal_apk_path):
            raise MissingExpectedOutput(universal_apk_path)
        return universal_apk_path

    def export_universal_apk(self, bundle_path: str, destination_dir: str,
                             keystore_config: Optional[KeystoreConfig] = None) -> str:
        """
        Generates the universal APK of `bundle_path` and copies it into
        `destination_dir`. Returns the path of the renamed APK inside the job's
        working dir; the copy in `destination_dir` carries the same file name.
        """
        work_dir = self._work_dir()
        print(f"[EXPORT] Working dir: {work_dir}")

        keystore_config = self.keystore_resolver.resolve(keystore_config)
        apks_path = self._export_apks(bundle_path, work_dir, keystore_config)
        universal_apk_path = self._extract_universal_apk(apks_path, work_dir)

        apk_name = universal_apk_name(bundle_path)
        renamed_apk_path = os.path.join(work_dir, apk_name)
        try:
            os.replace(universal_apk_path, renamed_apk_path)
        except OSError as e:
            raise FilesystemError(f"Failed to rename {universal_apk_path} to {renamed_apk_path}: {e}") from e

        destination_path = os.path.join(destination_dir, apk_name)
        try:
            shutil.copyfile(renamed_apk_path, destination_path)
        except OSError as e:
            raise FilesystemError(f"Failed to copy {renamed_apk_path} to {destination_path}: {e}") from e

        print(f"[EXPORT] Universal APK copied to: {destination_path}")
        return renamed_apk_path

    def export(self, job: ExportJob) -> str:
        return self.export_universal_apk(job.bundle_path, job.destination_dir, job.keystore_config)
