# backend/proxy/handlers.py
import html
import logging
from typing import Optional

from flask import Response

from utils.validators import validate_target_url
from .errors import FetchError, ValidationError
from .fetcher import fetch_url
from .headers import build_outbound_headers
from .redirects import translate_redirect
from .rewriter import rewrite_html_body

logger = logging.getLogger("shadeproxy")


def _text_response(message: str, status: int) -> Response:
    return Response(message, status=status, content_type="text/plain; charset=utf-8",
                    headers={"Cache-Control": "no-store"})


def handle_proxy(target: str, entry_path: str, config, hops: int = 0) -> Response:
    """
    Run one request through the proxy pipeline and build the Flask response.
    hops counts redirects already taken; it only matters when
    config.max_redirect_hops is set.
    """
    try:
        target = validate_target_url(target)
    except ValidationError as e:
        # nothing is fetched for invalid targets
        logger.warning(f"Rejected target: {e}")
        return _text_response(f"Error: {e}", 400)

    try:
        upstream = fetch_url(target, config)
    except FetchError as e:
        logger.error(f"Upstream fetch failed for {target}: {e}")
        return _text_response(f"Proxy error: {html.escape(str(e), quote=True)}", 502)

    logger.info(f"[PROXY] GET {target} -> {upstream.status}")

    next_hops: Optional[int] = hops + 1 if config.max_redirect_hops > 0 else None
    redirect = translate_redirect(upstream, target, entry_path, next_hops)
    if redirect is not None:
        status, location = redirect
        if next_hops is not None and hops >= config.max_redirect_hops:
            logger.warning(f"Redirect limit of {config.max_redirect_hops} reached at {target}")
            return _text_response("Error: too many redirects", 508)
        return Response(status=status, headers={"Location": location})

    body = upstream.body
    if "text/html" in upstream.content_type.lower():
        body = rewrite_html_body(body, upstream.content_type, target, entry_path)

    response = Response(body, status=upstream.status, headers=build_outbound_headers(upstream.headers))
    if "Content-Type" not in upstream.headers:
        # keep Flask's default text/html out of responses that had none upstream
        del response.headers["Content-Type"]
    return response
