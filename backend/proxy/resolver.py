# backend/proxy/resolver.py
"""
URL resolution for proxied pages.

Provides:
 - resolve_url(base, ref) -> absolute, dot-segment-free URL
 - make_proxy_link(entry_path, url) -> entry path link carrying the URL in ?u=
"""

import re
from typing import List, Optional, Tuple
from urllib.parse import urlencode, urlsplit

_ABSOLUTE_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+\-.]*://")
_LAST_SEGMENT_RE = re.compile(r"/[^/]*$")


def _split_base(base: str) -> Tuple[str, str, str, str]:
    """Return (scheme, host, port, path) of base; unparsable parts fall back to defaults."""
    try:
        parts = urlsplit(base)
        scheme = parts.scheme or "http"
        host = parts.hostname or ""
        port = f":{parts.port}" if parts.port is not None else ""
        path = parts.path or "/"
    except ValueError:
        return "http", "", "", "/"
    if ":" in host:
        # IPv6 literal
        host = f"[{host}]"
    return scheme, host, port, path


def _split_ref(ref: str) -> Tuple[str, str, str]:
    """Split ref into (path, query, fragment) on the first '#' and then the first '?'."""
    ref, _, fragment = ref.partition("#")
    path, _, query = ref.partition("?")
    return path, query, fragment


def _normalize_path(path: str) -> str:
    segments: List[str] = []
    for seg in path.split("/"):
        if seg in ("", "."):
            continue
        if seg == "..":
            # popping past the root is absorbed
            if segments:
                segments.pop()
        else:
            segments.append(seg)
    return "/" + "/".join(segments)


def resolve_url(base: str, ref: str) -> str:
    """
    Resolve ref against the absolute URL base.
    Query and fragment are taken from ref only, never from base.
    """
    if ref == "":
        return base
    if _ABSOLUTE_RE.match(ref):
        return ref
    if ref.startswith("//"):
        scheme = _split_base(base)[0]
        return f"{scheme}:{ref}"

    scheme, host, port, base_path = _split_base(base)
    ref_path, query, fragment = _split_ref(ref)

    if ref_path.startswith("/"):
        path = ref_path
    else:
        base_dir = _LAST_SEGMENT_RE.sub("/", base_path)
        path = base_dir + ref_path

    url = f"{scheme}://{host}{port}{_normalize_path(path)}"
    if query:
        url += f"?{query}"
    if fragment:
        url += f"#{fragment}"
    return url


def make_proxy_link(entry_path: str, url: str, hops: Optional[int] = None) -> str:
    """Build '{entry_path}?u=<encoded url>'; hops adds the redirect counter."""
    params = [("u", url)]
    if hops is not None:
        params.append(("h", str(hops)))
    return entry_path.rstrip("/") + "?" + urlencode(params)
