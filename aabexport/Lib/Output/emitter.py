import shlex
import subprocess
import sys

from aabexport.Lib.Export.Errors import ToolInvocationFailed


class StepOutput:
    """Write-once key/value sink backed by `envman`, the host's step-output store."""

    def __init__(self, envman: str = "envman"):
        self.envman = envman
        self.exported = {}

    def emit(self, key: str, value: str) -> bool:
        if key in self.exported:
            raise ValueError(f"Output {key} was already exported")

        cmd = [self.envman, "add", "--key", key]
        try:
            result = subprocess.run(cmd, input=value, text=True, stdout=subprocess.PIPE, stderr=subprocess.STDOUT)
        except FileNotFoundError:
            print(f"[OUTPUT] Warning: {self.envman} not found, {key}={value}", file=sys.stderr)
            self.exported[key] = value
            return False
        except OSError as e:
            raise ToolInvocationFailed(shlex.join(cmd), None, str(e)) from e

        if result.returncode != 0:
            raise ToolInvocationFailed(shlex.join(cmd), result.returncode, (result.stdout or "").strip())

        self.exported[key] = value
        print(f"[OUTPUT] Exported '{key}': {value}")
        return True
