import shlex
import subprocess
from typing import List, Optional

from aabexport.Lib.Export.Errors import ToolInvocationFailed


class CommandRunner:
    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    def run(self, command: List[str]) -> str:
        """Runs `command` and returns its trimmed combined stdout+stderr."""
        printable = shlex.join(command)
        try:
            result = subprocess.run(
                command,
                shell=False,
                text=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ToolInvocationFailed(printable, None, f"timed out after {e.timeout} seconds") from e
        except OSError as e:
            raise ToolInvocationFailed(printable, None, str(e)) from e

        output = (result.stdout or "").strip()
        if result.returncode != 0:
            raise ToolInvocationFailed(printable, result.returncode, output)
        return output
