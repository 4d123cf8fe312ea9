# backend/config.py
"""
Runtime configuration for shadeproxy.

Values are read from environment variables, or from a `.env` file in the
working directory. Build one ProxyConfig at startup and pass it to
create_app(); nothing here is a process-wide singleton.
"""

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)
DEFAULT_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
DEFAULT_ACCEPT_LANGUAGE = "zh-CN,zh;q=0.9,en;q=0.8"


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str) -> List[str]:
    value = os.environ.get(name, "")
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class ProxyConfig:
    # gate record location
    gate_file: str = ".proxy_gate.json"

    # upstream fetch
    verify_tls: bool = False  # certificate checks off unless asked for
    upstream_timeout: float = 15.0
    max_body_bytes: int = 10 * 1024 * 1024
    max_redirect_hops: int = 0  # 0 = unlimited
    user_agent: str = DEFAULT_USER_AGENT
    accept: str = DEFAULT_ACCEPT
    accept_language: str = DEFAULT_ACCEPT_LANGUAGE

    # server
    cors_origins: List[str] = field(default_factory=list)
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "ProxyConfig":
        if load_env_file:
            load_dotenv(override=False)
        defaults = cls()
        return cls(
            gate_file=os.environ.get("SHADEPROXY_GATE_FILE", defaults.gate_file),
            verify_tls=_env_bool("SHADEPROXY_VERIFY_TLS", defaults.verify_tls),
            upstream_timeout=float(
                os.environ.get("SHADEPROXY_UPSTREAM_TIMEOUT", defaults.upstream_timeout)
            ),
            max_body_bytes=int(
                os.environ.get("SHADEPROXY_MAX_BODY_BYTES", defaults.max_body_bytes)
            ),
            max_redirect_hops=int(
                os.environ.get("SHADEPROXY_MAX_REDIRECT_HOPS", defaults.max_redirect_hops)
            ),
            user_agent=os.environ.get("SHADEPROXY_USER_AGENT", defaults.user_agent),
            accept=os.environ.get("SHADEPROXY_ACCEPT", defaults.accept),
            accept_language=os.environ.get(
                "SHADEPROXY_ACCEPT_LANGUAGE", defaults.accept_language
            ),
            cors_origins=_env_list("SHADEPROXY_CORS_ORIGINS"),
            host=os.environ.get("SHADEPROXY_HOST", defaults.host),
            port=int(os.environ.get("SHADEPROXY_PORT", defaults.port)),
            log_level=os.environ.get("SHADEPROXY_LOG_LEVEL", defaults.log_level).upper(),
        )
