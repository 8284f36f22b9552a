import pytest
import requests


class FakeResponse:
    def __init__(self, status_code=200, body=b"", error=None):
        self.status_code = status_code
        self.body = body
        self.error = error

    def iter_content(self, chunk_size=1):
        if self.error is not None:
            raise self.error
        for i in range(0, len(self.body), chunk_size):
            yield self.body[i:i + chunk_size]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeSession:
    """Maps URLs to a FakeResponse or an exception and records every request."""

    def __init__(self, routes):
        self.routes = routes
        self.requested = []

    def get(self, url, stream=False, timeout=None):
        self.requested.append((url, stream, timeout))
        route = self.routes.get(url, FakeResponse(404))
        if isinstance(route, Exception):
            raise route
        return route


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def ok():
    return lambda body=b"data": FakeResponse(200, body)


@pytest.fixture
def status():
    return lambda code: FakeResponse(code)


@pytest.fixture
def connection_error():
    return lambda: requests.ConnectionError("connection refused")


@pytest.fixture
def broken_stream():
    return lambda: FakeResponse(200, error=requests.exceptions.ChunkedEncodingError("stream broke"))
