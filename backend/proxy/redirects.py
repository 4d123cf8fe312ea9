# backend/proxy/redirects.py
from typing import Optional, Tuple

from .resolver import make_proxy_link, resolve_url

REDIRECT_STATUSES = {301, 302, 303, 307, 308}


def translate_redirect(upstream, target_url: str, entry_path: str,
                       hops: Optional[int] = None) -> Optional[Tuple[int, str]]:
    """
    Map an upstream redirect onto the entry path.
    Returns (status, location) with the upstream status preserved, or None
    when the response is not a redirect. Location is resolved against the
    fetched target URL, not against the proxy's own URL.
    """
    if upstream.status not in REDIRECT_STATUSES:
        return None
    location = upstream.headers.get("Location")
    if location is None:
        return None
    destination = resolve_url(target_url, location)
    return upstream.status, make_proxy_link(entry_path, destination, hops)
