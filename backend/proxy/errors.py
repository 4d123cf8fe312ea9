# backend/proxy/errors.py
"""Exceptions raised by the proxy pipeline. Each one is terminal for a request."""


class ProxyError(Exception):
    """Base class for proxy pipeline failures."""


class ValidationError(ProxyError):
    """Target URL is malformed or uses a scheme other than http/https."""


class FetchError(ProxyError):
    """The upstream fetch failed at the transport layer."""
