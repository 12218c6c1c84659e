class SalesforceError(Exception):
    """Base class for errors raised by sfrest itself."""


class MissingCredentialsError(SalesforceError, RuntimeError):
    """Raised when app or user credentials are missing before authentication."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__("Missing required Salesforce credentials: " + ", ".join(missing))
