# backend/utils/validators.py
"""
Input validators.

Provides:
 - validate_target_url(url) -> stripped url, raises ValidationError
 - normalize_secure_path(raw) -> (ok, path_or_reason)
 - hostname extraction helper
"""

import re
from typing import Tuple
from urllib.parse import urlsplit

from proxy.errors import ValidationError

ALLOWED_SCHEMES = ("http", "https")
_SECURE_PATH_RE = re.compile(r"^[a-z0-9-]{6,64}$")
# control characters and whitespace never appear in a valid URL
_BAD_CHARS_RE = re.compile(r"[\x00-\x20\x7f]")


def extract_hostname(url: str) -> str:
    """Return hostname from URL or empty string on failure."""
    try:
        parsed = urlsplit(url)
        return parsed.hostname or ""
    except ValueError:
        return ""


def validate_target_url(url: str) -> str:
    """
    Check that url is an absolute http(s) URL with a host.
    Returns the stripped URL; raises ValidationError otherwise.
    """
    url = (url or "").strip()
    if not url or _BAD_CHARS_RE.search(url):
        raise ValidationError("invalid URL")
    try:
        parsed = urlsplit(url)
        # port is parsed lazily and may raise
        parsed.port
    except ValueError:
        raise ValidationError("invalid URL")
    if not parsed.scheme or not parsed.netloc or not extract_hostname(url):
        raise ValidationError("invalid URL")
    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        raise ValidationError("only http/https URLs are supported")
    return url


def normalize_secure_path(raw: str) -> Tuple[bool, str]:
    """
    Lowercase and trim a requested secure path.
    Returns (True, path) if valid, otherwise (False, reason).
    """
    path = (raw or "").strip().lower()
    if not _SECURE_PATH_RE.match(path):
        return False, "secure path must be 6-64 characters of letters, digits or '-'"
    return True, path
