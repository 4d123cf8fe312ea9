# backend/proxy/fetcher.py
import http.client
import logging
import time
from dataclasses import dataclass

import requests
import urllib3
from requests.exceptions import RequestException

from .errors import FetchError
from .headers import HeaderMultiMap
from .rawhttp import raw_get

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass
class UpstreamResponse:
    status: int
    headers: HeaderMultiMap
    body: bytes

    @property
    def content_type(self) -> str:
        return self.headers.get("Content-Type", "") or ""


def browser_headers(config) -> dict:
    """Fixed outbound header set so the proxy looks like a desktop browser."""
    return {
        "User-Agent": config.user_agent,
        "Accept": config.accept,
        "Accept-Language": config.accept_language,
    }


def collect_headers(raw_headers) -> HeaderMultiMap:
    """
    Copy transport headers into a HeaderMultiMap.
    urllib3 keeps repeated headers apart behind getlist(); plain mappings
    only carry one value per name.
    """
    headers = HeaderMultiMap()
    if raw_headers is None:
        return headers
    getlist = getattr(raw_headers, "getlist", None)
    for name in raw_headers.keys():
        values = getlist(name) if getlist else [raw_headers[name]]
        for value in values:
            headers.add(name, value.strip())
    return headers


def _bad_status_line(exc: BaseException) -> bool:
    """
    True when http.client rejected the status line somewhere down exc's chain.
    RemoteDisconnected is a BadStatusLine too, but means no response at all.
    """
    pending = [exc]
    seen = set()
    while pending:
        err = pending.pop()
        if id(err) in seen:
            continue
        seen.add(id(err))
        if isinstance(err, http.client.BadStatusLine) and not isinstance(err, http.client.RemoteDisconnected):
            return True
        # requests and urllib3 wrap the original error in their args
        pending.extend(arg for arg in err.args if isinstance(arg, BaseException))
        pending.extend(link for link in (err.__cause__, err.__context__) if link is not None)
    return False


def _read_body(r, max_bytes: int, deadline: float) -> bytes:
    chunks = []
    total = 0
    # iter_content decodes gzip/deflate on the fly
    for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
        # the requests timeout only bounds each read, not the whole transfer
        if time.monotonic() > deadline:
            raise FetchError("upstream timed out while sending the body")
        total += len(chunk)
        if total > max_bytes:
            raise FetchError(f"upstream body exceeds {max_bytes} bytes")
        chunks.append(chunk)
    return b"".join(chunks)


def fetch_url(url: str, config) -> UpstreamResponse:
    """
    GET the given absolute URL without following redirects. A response whose
    status line http.client refuses is fetched a second time by raw_get.
    Raises FetchError on network errors, timeouts and oversized bodies.
    """
    if not config.verify_tls:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    deadline = time.monotonic() + config.upstream_timeout
    try:
        r = requests.get(
            url,
            headers=browser_headers(config),
            timeout=config.upstream_timeout,
            verify=config.verify_tls,
            allow_redirects=False,
            stream=True,
        )
    except RequestException as e:
        if not _bad_status_line(e):
            raise FetchError(str(e)) from e
        logger.warning(f"Unparsable status line from {url}, re-reading it over a plain socket")
        status, headers, body = raw_get(url, browser_headers(config), config, deadline)
        return UpstreamResponse(status=status, headers=headers, body=body)

    try:
        body = _read_body(r, config.max_body_bytes, deadline)
        raw_headers = getattr(r.raw, "headers", None)
        headers = collect_headers(raw_headers if raw_headers is not None else r.headers)
        status = r.status_code
    except RequestException as e:
        raise FetchError(str(e)) from e
    finally:
        r.close()

    logger.debug(f"Fetched {url}: status={status} bytes={len(body)}")
    return UpstreamResponse(status=status, headers=headers, body=body)
