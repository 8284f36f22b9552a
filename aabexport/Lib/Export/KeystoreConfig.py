from dataclasses import dataclass, replace

PASSWORD_PREFIXES = ("pass:", "file:")


def normalize_password(value: str) -> str:
    """
    bundletool expects `pass:<literal>` or `file:<path to file holding it>`.
    Untagged values are treated as literals.
    """
    if value.startswith(PASSWORD_PREFIXES):
        return value
    return f"pass:{value}"


@dataclass(frozen=True)
class KeystoreConfig:
    """Parameters bundletool needs to sign the generated APKs."""
    # file:// URI or remote URL until resolved, absolute local path afterwards
    path: str
    keystore_password: str
    key_alias: str
    key_password: str

    def normalized(self, path: str) -> "KeystoreConfig":
        return replace(
            self,
            path=path,
            keystore_password=normalize_password(self.keystore_password),
            key_password=normalize_password(self.key_password),
        )

    def __repr__(self):
        return f"KeystoreConfig(path={self.path!r}, key_alias={self.key_alias!r})"
