from typing import List, Optional, Tuple


class ExportError(Exception):
    """Base class for every failure that aborts an export job."""


class ConfigError(ExportError):
    pass


class FilesystemError(ExportError):
    pass


class FetchExhausted(ExportError):
    def __init__(self, sources: List[str], failures: List[Tuple[str, str]]):
        self.sources = list(sources)
        self.failures = list(failures)
        details = "; ".join(f"{url}: {reason}" for url, reason in self.failures)
        super().__init__(f"None of the sources returned a 2xx status ({details})")


class ToolInvocationFailed(ExportError):
    """
    Raised when an external command exits non-zero.
    Message layout: `<cmd> failed (status: <code>): <output>`, where the status
    is left out when unknown and the output when empty.
    """
    def __init__(self, command: str, status: Optional[int] = None, output: str = ""):
        self.command = command
        self.status = status
        self.output = output

        msg = f"{command} failed"
        if status is not None:
            msg += f" (status: {status})"
        if output:
            msg += f": {output}"
        super().__init__(msg)


class MissingExpectedOutput(ExportError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Expected output not found: {path}")
