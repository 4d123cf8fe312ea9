# backend/proxy/rewriter.py
"""
Link rewriting for proxied HTML.

Attributes are found by pattern scanning, not by parsing: CSS url(), srcset,
inline style/script and meta refresh are left alone.
"""

import codecs
import html
import re

from .resolver import make_proxy_link, resolve_url

_DOUBLE_QUOTED = re.compile(r'\b(href|src|action)\s*=\s*"([^"]*)"', re.IGNORECASE)
_SINGLE_QUOTED = re.compile(r"\b(href|src|action)\s*=\s*'([^']*)'", re.IGNORECASE)
_SKIP_RE = re.compile(r"^(mailto:|javascript:|data:)", re.IGNORECASE)
_CHARSET_RE = re.compile(r"charset\s*=\s*[\"']?([^\s;\"']+)", re.IGNORECASE)


def rewrite_links(markup: str, base: str, entry_path: str) -> str:
    """Point every href/src/action in markup back through entry_path."""
    proxy = entry_path.rstrip("/")

    def _replace(match):
        attr = match.group(1)
        url = html.unescape(match.group(2))
        if url == "" or _SKIP_RE.match(url):
            return match.group(0)
        proxied = make_proxy_link(proxy, resolve_url(base, url))
        return f'{attr}="{html.escape(proxied, quote=True)}"'

    # both passes always run
    markup = _DOUBLE_QUOTED.sub(_replace, markup)
    markup = _SINGLE_QUOTED.sub(_replace, markup)
    return markup


def charset_of(content_type: str, default: str = "utf-8") -> str:
    match = _CHARSET_RE.search(content_type or "")
    if not match:
        return default
    try:
        return codecs.lookup(match.group(1)).name
    except LookupError:
        return default


def rewrite_html_body(body: bytes, content_type: str, base: str, entry_path: str) -> bytes:
    """Decode body with its declared charset, rewrite links, and encode it back."""
    charset = charset_of(content_type)
    text = body.decode(charset, errors="surrogateescape")
    return rewrite_links(text, base, entry_path).encode(charset, errors="surrogateescape")
