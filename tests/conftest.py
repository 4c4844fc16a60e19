"""Shared fixtures: a mocked HTTP session, a response factory and a local stub server."""

from __future__ import annotations

import json
import threading
from collections.abc import Callable, Iterator
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any
from unittest.mock import Mock

import pytest
import requests

from ambient_weather.datasources.ambient import AmbientClient

BASE_URL = "https://api.test/v1"
MAC = "00:0E:C6:20:0F:7B"
DAY_MS = 86_400_000

ResponseFactory = Callable[..., Mock]


def build_response(payload: Any = None, status: int = 200, *, json_error: bool = False) -> Mock:
    """A ``requests.Response`` stand-in with the given JSON body and status."""
    resp = Mock(spec=requests.Response)
    resp.status_code = status
    resp.ok = status < 400
    if json_error:
        resp.json.side_effect = ValueError("Expecting value")
    else:
        resp.json.return_value = payload
    return resp


class SteppingClock:
    """Returns each reading in turn, then repeats the last one."""

    def __init__(self, *readings: float) -> None:
        self._readings = list(readings)

    def __call__(self) -> float:
        if len(self._readings) > 1:
            return self._readings.pop(0)
        return self._readings[0]


def record(dateutc: int, **fields: Any) -> dict[str, Any]:
    """Minimal wire record."""
    return {"dateutc": dateutc, "tempf": 61.2, "humidity": 48, **fields}


@pytest.fixture
def make_response() -> ResponseFactory:
    return build_response


@pytest.fixture
def session() -> Mock:
    return Mock(spec=requests.Session)


@pytest.fixture
def client(session: Mock) -> AmbientClient:
    """Client with no pacing, backed by the mocked session."""
    return AmbientClient(BASE_URL, session=session, request_interval=0)


class StubServer(ThreadingHTTPServer):
    """Local HTTP server answering every GET with ``status`` and a JSON ``body``."""

    status = 200
    body: Any = []
    hits = 0

    @property
    def base_url(self) -> str:
        host, port = self.server_address[:2]
        return f"http://{host}:{port}/v1"


class _StubHandler(BaseHTTPRequestHandler):
    server: StubServer

    def do_GET(self) -> None:
        self.server.hits += 1
        payload = json.dumps(self.server.body).encode()
        self.send_response(self.server.status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        pass


@pytest.fixture
def stub_server() -> Iterator[StubServer]:
    server = StubServer(("127.0.0.1", 0), _StubHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()
