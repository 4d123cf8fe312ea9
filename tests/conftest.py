import socket
import threading
import time

import pytest

from app import create_app
from config import ProxyConfig
from gate.store import GateStore

SECURE_PATH = "portal-abc123"


class FakeRawHeaders:
    """Mimics urllib3's header dict: distinct keys(), repeated values behind getlist()."""

    def __init__(self, pairs):
        self._pairs = list(pairs)

    def keys(self):
        seen = []
        for name, _ in self._pairs:
            if name.lower() not in [s.lower() for s in seen]:
                seen.append(name)
        return seen

    def getlist(self, name):
        return [v for n, v in self._pairs if n.lower() == name.lower()]


class FakeRaw:
    def __init__(self, pairs):
        self.headers = FakeRawHeaders(pairs)


class FakeResponse:
    def __init__(self, status=200, headers=(), body=b"", delay=0.0):
        self.status_code = status
        self.raw = FakeRaw(headers)
        self._body = body
        self.delay = delay
        self.closed = False

    def iter_content(self, chunk_size=1):
        if self.delay:
            # trickle one byte at a time
            chunk_size = 1
        for i in range(0, len(self._body), chunk_size):
            time.sleep(self.delay)
            yield self._body[i:i + chunk_size]

    def close(self):
        self.closed = True


class FakeUpstream:
    """Stands in for requests.get and records every call."""

    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse()
        self.error = error
        self.calls = []

    def __call__(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture()
def config(tmp_path):
    return ProxyConfig(gate_file=str(tmp_path / "gate.json"))


@pytest.fixture()
def store(config):
    return GateStore(config.gate_file)


@pytest.fixture()
def configured_store(store):
    assert store.create(SECURE_PATH)
    return store


@pytest.fixture()
def client(config, configured_store):
    app = create_app(config, configured_store)
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c


@pytest.fixture()
def upstream(monkeypatch):
    fake = FakeUpstream()
    monkeypatch.setattr("proxy.fetcher.requests.get", fake)
    return fake


class CannedServer:
    """
    Real TCP server on 127.0.0.1 that answers every connection with the
    same raw bytes and records each request head it received.
    """

    def __init__(self, reply: bytes):
        self.reply = reply
        self.requests = []
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.sock.bind(("127.0.0.1", 0))
        self.sock.listen(5)
        self.port = self.sock.getsockname()[1]
        self.thread = threading.Thread(target=self._serve, daemon=True)
        self.thread.start()

    def _serve(self):
        while True:
            try:
                conn, _ = self.sock.accept()
            except OSError:
                return
            with conn:
                data = b""
                try:
                    while b"\r\n\r\n" not in data:
                        chunk = conn.recv(4096)
                        if not chunk:
                            break
                        data += chunk
                    self.requests.append(data)
                    conn.sendall(self.reply)
                except OSError:
                    # client hung up early; keep serving
                    continue

    def url(self, path="/"):
        return f"http://127.0.0.1:{self.port}{path}"

    def close(self):
        self.sock.close()


@pytest.fixture()
def canned_server():
    servers = []

    def start(reply: bytes) -> CannedServer:
        server = CannedServer(reply)
        servers.append(server)
        return server

    yield start
    for server in servers:
        server.close()
