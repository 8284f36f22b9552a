import os
from dataclasses import dataclass, fields
from typing import Mapping, Optional

from aabexport.Lib.Export.BundleTool import GITHUB_RELEASE_BASE_URL
from aabexport.Lib.Export.Errors import ConfigError
from aabexport.Lib.Export.KeystoreConfig import KeystoreConfig

DEFAULT_BUNDLETOOL_VERSION = "0.15.0"
SECRET_FIELDS = ("keystore_password", "key_password")


def _first(env: Mapping[str, str], *keys: str, default: str = "", strip: bool = True) -> str:
    for key in keys:
        value = env.get(key)
        if value:
            return value.strip() if strip else value
    return default


def _seconds(env: Mapping[str, str], key: str) -> Optional[float]:
    value = _first(env, key)
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        raise ConfigError(f"{key} must be a number of seconds, got {value!r}")
    if seconds <= 0:
        raise ConfigError(f"{key} must be a positive number of seconds, got {value!r}")
    return seconds


@dataclass(frozen=True)
class StepConfig:
    aab_path: str
    deploy_dir: str
    keystore_url: str = ""
    keystore_password: str = ""
    key_alias: str = ""
    key_password: str = ""
    bundletool_version: str = DEFAULT_BUNDLETOOL_VERSION
    bundletool_base_url: str = GITHUB_RELEASE_BASE_URL
    bundletool_path: str = ""
    http_timeout: Optional[float] = None
    tool_timeout: Optional[float] = None

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "StepConfig":
        env = os.environ if env is None else env
        return cls(
            aab_path=_first(env, "aab_path"),
            deploy_dir=_first(env, "BITRISE_DEPLOY_DIR", "deploy_dir"),
            keystore_url=_first(env, "keystore_url", "keystore_path"),
            keystore_password=_first(env, "keystore_password", strip=False),
            key_alias=_first(env, "keystore_alias", "key_alias"),
            key_password=_first(env, "private_key_password", "key_password", strip=False),
            bundletool_version=_first(env, "bundletool_version", default=DEFAULT_BUNDLETOOL_VERSION),
            bundletool_base_url=_first(env, "bundletool_base_url", default=GITHUB_RELEASE_BASE_URL),
            bundletool_path=_first(env, "bundletool_path"),
            http_timeout=_seconds(env, "http_timeout"),
            tool_timeout=_seconds(env, "tool_timeout"),
        )

    def validate(self) -> None:
        if not self.aab_path:
            raise ConfigError("aab_path is required")
        if not self.deploy_dir:
            raise ConfigError("BITRISE_DEPLOY_DIR is required")
        if not os.path.isdir(self.deploy_dir):
            raise ConfigError(f"Deploy dir does not exist: {self.deploy_dir}")

    def keystore_config(self) -> Optional[KeystoreConfig]:
        # Signing needs all four inputs, anything less means an unsigned export
        if not (self.keystore_url and self.keystore_password and self.key_alias and self.key_password):
            return None
        return KeystoreConfig(
            path=self.keystore_url,
            keystore_password=self.keystore_password,
            key_alias=self.key_alias,
            key_password=self.key_password,
        )

    def describe(self) -> str:
        lines = ["Configs:"]
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in SECRET_FIELDS and value:
                value = "***"
            lines.append(f"- {f.name}: {value}")
        return "\n".join(lines)
