from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Optional

DEFAULT_API_VERSION = "v42.0"

SANDBOX_TOKEN_URL = "https://test.salesforce.com/services/oauth2/token"
PRODUCTION_TOKEN_URL = "https://login.salesforce.com/services/oauth2/token"

_TRUTHY = {"1", "true", "yes", "on"}


# ----------------------------------------------------------------------
# Configuration dataclass
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class SFConfig:
    """Configuration for the username-password OAuth flow and the REST client."""

    # Connected App credentials
    consumer_key: Optional[str] = None
    consumer_secret: Optional[str] = None

    # User credentials (API user on production, your own user on a sandbox)
    username: Optional[str] = None
    password: Optional[str] = None

    # False selects test.salesforce.com, True selects login.salesforce.com
    production: bool = False

    api_version: str = DEFAULT_API_VERSION

    # Optional: pre-provided token / instance URL (e.g. from an external cache)
    access_token: Optional[str] = None
    instance_url: Optional[str] = None

    # Passed straight to requests; None means no timeout
    timeout: Optional[float] = None

    def __repr__(self) -> str:
        # Never leak secrets into logs or tracebacks.
        return (
            f"SFConfig(username={self.username!r}, production={self.production!r}, "
            f"api_version={self.api_version!r}, instance_url={self.instance_url!r})"
        )

    @property
    def token_url(self) -> str:
        return PRODUCTION_TOKEN_URL if self.production else SANDBOX_TOKEN_URL

    def with_app(self, consumer_key: str, consumer_secret: str) -> SFConfig:
        return replace(self, consumer_key=consumer_key, consumer_secret=consumer_secret)

    def with_user(self, username: str, password: str) -> SFConfig:
        return replace(self, username=username, password=password)

    def without_credentials(self) -> SFConfig:
        return replace(self, consumer_key=None, consumer_secret=None, username=None, password=None)

    def missing_credentials(self) -> list[str]:
        """Return the env-style names of the credentials that are not set."""
        return [
            name
            for name, value in {
                "SF_CONSUMER_KEY": self.consumer_key,
                "SF_CONSUMER_SECRET": self.consumer_secret,
                "SF_USERNAME": self.username,
                "SF_PASSWORD": self.password,
            }.items()
            if not value
        ]

    @classmethod
    def from_env(cls) -> SFConfig:
        """Load configuration from environment variables."""
        timeout = os.getenv("SF_TIMEOUT")
        return cls(
            consumer_key=os.getenv("SF_CONSUMER_KEY"),
            consumer_secret=os.getenv("SF_CONSUMER_SECRET"),
            username=os.getenv("SF_USERNAME"),
            password=os.getenv("SF_PASSWORD"),
            production=os.getenv("SF_PRODUCTION", "").strip().lower() in _TRUTHY,
            api_version=os.getenv("SF_API_VERSION") or DEFAULT_API_VERSION,
            access_token=os.getenv("SF_ACCESS_TOKEN"),
            instance_url=os.getenv("SF_INSTANCE_URL"),
            timeout=float(timeout) if timeout else None,
        )
