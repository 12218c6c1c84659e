"""OAuth2 username-password flow against the Salesforce token endpoint."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from .config import PRODUCTION_TOKEN_URL, SANDBOX_TOKEN_URL, SFConfig
from .exceptions import MissingCredentialsError

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SalesforceSession:
    """Access token plus the instance URL it is valid for."""

    access_token: str
    instance_url: str

    def __repr__(self) -> str:
        return f"SalesforceSession(instance_url={self.instance_url!r})"


class SalesforceAuthenticator:
    """Performs the password grant and keeps the resulting token and instance URL.

    Credentials are either passed to :meth:`authenticate` inside an
    :class:`SFConfig`, or staged with :meth:`configure_app` /
    :meth:`configure_user`. Staged credentials are dropped after every
    authentication attempt.
    """

    def __init__(self, http: Optional[requests.Session] = None, production: bool = False) -> None:
        self.http = http or requests.Session()
        self.token_url = PRODUCTION_TOKEN_URL if production else SANDBOX_TOKEN_URL
        self._staged = SFConfig(production=production)
        self._session: Optional[SalesforceSession] = None

    def get_token(self) -> Optional[str]:
        """Return the token to attach to all API calls."""
        return self._session.access_token if self._session else None

    def get_instance_url(self) -> Optional[str]:
        """Return the instance URL to use for API calls."""
        return self._session.instance_url if self._session else None

    def configure_app(self, consumer_key: str, consumer_secret: str) -> None:
        """Stage the key and secret of the Connected App."""
        self._staged = self._staged.with_app(consumer_key, consumer_secret)

    def configure_user(self, username: str, password: str) -> None:
        """Stage the user for this authentication flow."""
        self._staged = self._staged.with_user(username, password)

    def authenticate(
        self, config: Optional[SFConfig] = None, *, timeout: Optional[float] = None
    ) -> SalesforceSession:
        """Exchange credentials for a session.

        Raises:
            MissingCredentialsError: if any of the four credentials is empty.
            requests.HTTPError: if the token endpoint answers with an error status.
        """
        cfg = config or self._staged
        # Staged credentials are single use.
        self._staged = SFConfig(production=self._staged.production)

        missing = cfg.missing_credentials()
        if missing:
            raise MissingCredentialsError(missing)

        data = {
            "grant_type": "password",
            "client_id": cfg.consumer_key,
            "client_secret": cfg.consumer_secret,
            "username": cfg.username,
            "password": cfg.password,
        }

        _logger.info("Requesting access token from %s for %s", self.token_url, cfg.username)
        r = self.http.request("POST", self.token_url, data=data, timeout=timeout)
        if r.status_code >= 400:
            _logger.error("Token request failed with HTTP %s: %s", r.status_code, r.text)
            r.raise_for_status()

        payload = r.json()
        self._session = SalesforceSession(
            access_token=payload["access_token"],
            instance_url=payload["instance_url"],
        )
        _logger.debug("Authenticated against instance %s", self._session.instance_url)
        return self._session
