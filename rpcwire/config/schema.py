"""Pydantic models for rpcwire session configuration."""

from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from rpcwire.core.constants import DEFAULT_CONNECT_TIMEOUT, DEFAULT_TIMEOUT

# Hosts where plain http is accepted without allow_insecure_http
LOOPBACK_HOSTS = frozenset({"127.0.0.1", "localhost", "::1"})

# Headers the session sets itself
RESERVED_HEADERS = frozenset({"authorization", "content-type"})


def is_loopback_url(url: str) -> bool:
    """Whether url points at this machine."""
    return (urlparse(url).hostname or "").lower() in LOOPBACK_HOSTS


class SessionConfig(BaseModel):
    """Endpoint and transport settings for one RPC session.

    Example config.json:
        {
            "url": "http://127.0.0.1:8332",
            "token": "s3cret",
            "timeout": 30
        }
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    url: str
    """Endpoint every request is POSTed to."""

    token: str | None = None
    """Bearer token. None means unauthenticated."""

    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    """Read/write/pool timeout in seconds, applied by the HTTP transport."""

    connect_timeout: float = Field(default=DEFAULT_CONNECT_TIMEOUT, gt=0)
    """Connection establishment timeout in seconds."""

    verify_ssl: bool = True
    """Verify TLS certificates."""

    allow_insecure_http: bool = False
    """Allow plain http for non-loopback hosts. SECURITY WARNING: the bearer
    token is sent in clear text."""

    extra_headers: dict[str, str] = {}
    """Additional headers sent with every request."""

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Require an absolute http(s) URL with a host."""
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https"):
            raise ValueError(f"url scheme must be http or https, got {parsed.scheme!r}")
        if not parsed.hostname:
            raise ValueError("url must include a hostname")
        return v

    @field_validator("token")
    @classmethod
    def strip_token(cls, v: str | None) -> str | None:
        """Treat blank tokens as absent."""
        if v is None:
            return None
        return v.strip() or None

    @field_validator("extra_headers")
    @classmethod
    def reject_reserved_headers(cls, v: dict[str, str]) -> dict[str, str]:
        """Content-Type and Authorization are owned by the session."""
        reserved = sorted(k for k in v if k.lower() in RESERVED_HEADERS)
        if reserved:
            raise ValueError(f"extra_headers may not set {', '.join(reserved)}")
        return v

    @model_validator(mode="after")
    def check_insecure_http(self) -> "SessionConfig":
        """Reject plain http to remote hosts unless explicitly allowed."""
        if (
            urlparse(self.url).scheme == "http"
            and not is_loopback_url(self.url)
            and not self.allow_insecure_http
        ):
            raise ValueError(
                "Remote endpoints must use https (set allow_insecure_http to override)"
            )
        return self

    @property
    def is_loopback(self) -> bool:
        """Whether the endpoint is on this machine."""
        return is_loopback_url(self.url)
