"""Shared fixtures for shdw-drive tests.

Server responses are scripted with httpx.MockTransport; no test touches
the network.
"""

import re
from typing import Any, Callable, Union

import httpx
import pytest
from nacl.signing import SigningKey

from shdw_drive.config import DriveConfig
from shdw_drive.signer import KeypairSigner

ENDPOINT = "https://drive.test"

Handler = Callable[[httpx.Request], httpx.Response]


def json_response(status_code: int, body: Any) -> Handler:
    """Handler returning a fresh JSON response for every request."""
    return lambda request: httpx.Response(status_code, json=body)


def text_response(status_code: int, text: str) -> Handler:
    return lambda request: httpx.Response(
        status_code, text=text, headers={"content-type": "text/html"}
    )


def form_fields(request: httpx.Request) -> dict[str, bytes]:
    """Split a multipart/form-data request body into named fields."""
    boundary = request.headers["content-type"].split("boundary=")[1].encode()
    fields = {}
    for part in request.content.split(b"--" + boundary):
        head, sep, body = part.partition(b"\r\n\r\n")
        if not sep:
            continue
        match = re.search(rb'name="([^"]+)"', head)
        if match:
            fields[match.group(1).decode()] = body[:-2] if body.endswith(b"\r\n") else body
    return fields


class FakeDrive:
    """Records requests and answers them from per-path handlers."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.routes: dict[str, Union[Handler, list[Handler]]] = {}

    def route(self, path: str, *handlers: Handler) -> None:
        """Answer ``path`` with ``handlers`` in turn; the last one repeats."""
        self.routes[path] = list(handlers)

    def handle(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        handlers = self.routes.get(request.url.path)
        if not handlers:
            return httpx.Response(404, json={"error": "no route"})
        handler = handlers.pop(0) if len(handlers) > 1 else handlers[0]
        return handler(request)

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    @property
    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handle))


@pytest.fixture
def drive() -> FakeDrive:
    return FakeDrive()


@pytest.fixture
def http_client(drive: FakeDrive):
    client = drive.client()
    yield client
    client.close()


@pytest.fixture
def config() -> DriveConfig:
    return DriveConfig(endpoint=ENDPOINT)


@pytest.fixture
def signing_key() -> SigningKey:
    return SigningKey(bytes(range(32)))


@pytest.fixture
def signer(signing_key: SigningKey) -> KeypairSigner:
    return KeypairSigner(signing_key)
