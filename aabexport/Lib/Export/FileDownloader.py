import os
import sys
from typing import Callable, List, Optional, Sequence, TypeVar

import requests

from aabexport.Lib.Export.Errors import FetchExhausted

T = TypeVar("T")


def first_success(sources: Sequence[str], attempt: Callable[[str], T]) -> T:
    """
    Calls `attempt` with each source in order and returns the first result that
    does not raise. Every failure is logged and collected; when no source works
    a FetchExhausted carrying all of them is raised.
    """
    if not sources:
        raise ValueError("At least one source is required")

    failures = []
    for source in sources:
        try:
            return attempt(source)
        except (requests.RequestException, OSError) as e:
            print(f"[DOWNLOAD] Could not download file from {source}: {e}", file=sys.stderr)
            failures.append((source, str(e)))
    raise FetchExhausted(list(sources), failures)


class FileDownloader:
    def __init__(self, session: Optional[requests.Session] = None, timeout: Optional[float] = None, chunk_size: int = 8192):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.chunk_size = chunk_size

    def get(self, destination: str, source: str) -> str:
        with self.session.get(source, stream=True, timeout=self.timeout) as response:
            if not 200 <= response.status_code < 300:
                raise requests.HTTPError(
                    f"Unable to download file from: {source}. Status code: {response.status_code}",
                    response=response,
                )

            try:
                with open(destination, "wb") as f:
                    for chunk in response.iter_content(chunk_size=self.chunk_size):
                        if chunk:
                            f.write(chunk)
            except (requests.RequestException, OSError):
                # Never leave a partial download behind
                if os.path.exists(destination):
                    os.remove(destination)
                raise
        return source

    def get_with_fallback(self, destination: str, sources: List[str]) -> str:
        used = first_success(sources, lambda source: self.get(destination, source))
        print(f"[DOWNLOAD] URL used to download file: {used}")
        return used
