import os
import tempfile
from typing import Optional
from urllib.parse import urlparse

from aabexport.Lib.Export.Errors import FilesystemError
from aabexport.Lib.Export.FileDownloader import FileDownloader
from aabexport.Lib.Export.KeystoreConfig import KeystoreConfig

FILE_SCHEME = "file://"
DEFAULT_KEYSTORE_NAME = "keystore"


def keystore_name(url: str) -> str:
    name = os.path.basename(urlparse(url).path)
    return name or DEFAULT_KEYSTORE_NAME


class KeystoreResolver:
    def __init__(self, downloader: FileDownloader):
        self.downloader = downloader

    def _local_path(self, location: str) -> str:
        pth = location[len(FILE_SCHEME):]
        if not pth:
            raise FilesystemError(f"Invalid keystore location: {location}")
        try:
            return os.path.abspath(os.path.expanduser(pth))
        except (OSError, ValueError) as e:
            raise FilesystemError(f"Failed to normalize keystore path {pth}: {e}") from e

    def _download(self, url: str) -> str:
        try:
            tmp_dir = tempfile.mkdtemp(prefix="keystore")
        except OSError as e:
            raise FilesystemError(f"Failed to create keystore temp dir: {e}") from e

        keystore_path = os.path.join(tmp_dir, keystore_name(url))
        print(f"[KEYSTORE] Downloading keystore from: {url}")
        self.downloader.get_with_fallback(keystore_path, [url])
        return keystore_path

    def resolve(self, raw: Optional[KeystoreConfig]) -> Optional[KeystoreConfig]:
        if raw is None:
            # unsigned build, nothing to prepare
            return None

        if raw.path.startswith(FILE_SCHEME):
            keystore_path = self._local_path(raw.path)
        else:
            keystore_path = self._download(raw.path)

        print(f"[KEYSTORE] Using keystore at: {keystore_path}")
        return raw.normalized(keystore_path)
