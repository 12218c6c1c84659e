"""Salesforce REST, Bulk 2.0 ingest and Analytics client."""

from ._version import __version__
from .auth import SalesforceAuthenticator, SalesforceSession
from .client import AuthenticatedClient, SalesforceClient
from .config import SFConfig
from .exceptions import MissingCredentialsError, SalesforceError

__all__ = [
    "__version__",
    "AuthenticatedClient",
    "MissingCredentialsError",
    "SalesforceAuthenticator",
    "SalesforceClient",
    "SalesforceError",
    "SalesforceSession",
    "SFConfig",
]
