# backend/proxy/rawhttp.py
"""
Plain-socket GET for upstreams whose status line http.client refuses.

The response head is parsed by hand: interim 1xx blocks are skipped so only
the last header block before the body counts, and a status line without a
3-digit code is read as 200.
"""

import re
import socket
import ssl
import time
import zlib
from typing import Tuple
from urllib.parse import urlsplit

from .errors import FetchError
from .headers import HeaderMultiMap

_STATUS_RE = re.compile(rb"^HTTP/\S+\s+(\d{3})")
HEAD_LIMIT = 64 * 1024
RECV_SIZE = 8192


def parse_status_line(line: bytes) -> int:
    match = _STATUS_RE.match(line)
    return int(match.group(1)) if match else 200


def parse_response(raw: bytes) -> Tuple[int, HeaderMultiMap, bytes]:
    """Split raw response bytes into (status, headers, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    # 100 Continue and friends arrive as extra blocks ahead of the real head
    while 100 <= parse_status_line(head) < 200 and b"\r\n\r\n" in body:
        head, _, body = body.partition(b"\r\n\r\n")

    lines = head.split(b"\r\n")
    status = parse_status_line(lines[0])
    headers = HeaderMultiMap()
    for line in lines[1:]:
        if b":" not in line:
            continue
        name, value = line.decode("iso-8859-1").split(":", 1)
        headers.add(name.strip(), value.strip())
    return status, headers, body


def decode_body(body: bytes, content_encoding: str) -> bytes:
    encoding = (content_encoding or "").strip().lower()
    try:
        if encoding in ("gzip", "x-gzip"):
            return zlib.decompress(body, 16 + zlib.MAX_WBITS)
        if encoding == "deflate":
            try:
                return zlib.decompress(body)
            except zlib.error:
                # some servers send raw deflate without the zlib wrapper
                return zlib.decompress(body, -zlib.MAX_WBITS)
    except zlib.error as e:
        raise FetchError(f"could not decode {encoding} body: {e}") from e
    return body


def _connect(url: str, config, timeout: float) -> Tuple[socket.socket, str]:
    parts = urlsplit(url)
    https = parts.scheme.lower() == "https"
    port = parts.port or (443 if https else 80)
    sock = socket.create_connection((parts.hostname, port), timeout=timeout)
    if https:
        ctx = ssl.create_default_context()
        if not config.verify_tls:
            ctx.check_hostname = False
            ctx.verify_mode = ssl.CERT_NONE
        sock = ctx.wrap_socket(sock, server_hostname=parts.hostname)
    target = parts.path or "/"
    if parts.query:
        target += "?" + parts.query
    return sock, target


def raw_get(url: str, headers: dict, config, deadline: float) -> Tuple[int, HeaderMultiMap, bytes]:
    """
    GET url over a fresh socket with HTTP/1.0 and Connection: close,
    reading until the server hangs up or the deadline passes.
    """
    limit = config.max_body_bytes + HEAD_LIMIT
    netloc = urlsplit(url).netloc.rpartition("@")[2]
    lines = [f"Host: {netloc}"] + [f"{k}: {v}" for k, v in headers.items()]
    lines += ["Accept-Encoding: identity", "Connection: close"]

    chunks = []
    total = 0
    try:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise FetchError("upstream timed out")
        sock, target = _connect(url, config, min(remaining, config.upstream_timeout))
        with sock:
            request = f"GET {target} HTTP/1.0\r\n" + "\r\n".join(lines) + "\r\n\r\n"
            sock.sendall(request.encode("iso-8859-1"))
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise FetchError("upstream timed out")
                sock.settimeout(min(remaining, config.upstream_timeout))
                chunk = sock.recv(RECV_SIZE)
                if not chunk:
                    break
                total += len(chunk)
                if total > limit:
                    raise FetchError(f"upstream body exceeds {config.max_body_bytes} bytes")
                chunks.append(chunk)
    except OSError as e:
        raise FetchError(str(e) or e.__class__.__name__) from e

    raw = b"".join(chunks)
    if not raw:
        raise FetchError("upstream closed the connection without a response")
    status, parsed_headers, body = parse_response(raw)
    body = decode_body(body, parsed_headers.get("Content-Encoding", ""))
    if len(body) > config.max_body_bytes:
        raise FetchError(f"upstream body exceeds {config.max_body_bytes} bytes")
    return status, parsed_headers, body
