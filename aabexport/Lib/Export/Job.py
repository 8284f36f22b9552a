from dataclasses import dataclass
from typing import Optional

from aabexport.Lib.Export.KeystoreConfig import KeystoreConfig


@dataclass(frozen=True)
class ExportJob:
    """
    Encapsulates all parameters of one AAB -> universal APK export.
    Built once per invocation and consumed by APKExporter in a single pass.
    """
    bundle_path: str
    destination_dir: str
    keystore_config: Optional[KeystoreConfig] = None
