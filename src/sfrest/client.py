from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional

import requests

from .auth import SalesforceAuthenticator, SalesforceSession
from .config import SFConfig

_logger = logging.getLogger(__name__)

Record = Dict[str, Any]


# ----------------------------------------------------------------------
# Unauthenticated client
# ----------------------------------------------------------------------
class SalesforceClient:
    """Entry point: holds configuration and produces an :class:`AuthenticatedClient`.

    Example::

        client = (
            SalesforceClient(production=True)
            .connect_app(key, secret)
            .as_user("api@example.com", password)
        )
        sf = client.authenticate()
        sf.get("Lead", "00Q...", ["Name", "Email"])
    """

    def __init__(
        self,
        cfg: Optional[SFConfig] = None,
        http: Optional[requests.Session] = None,
        *,
        production: Optional[bool] = None,
    ) -> None:
        cfg = cfg or SFConfig()
        if production is not None and production != cfg.production:
            cfg = replace(cfg, production=production)
        self.cfg = cfg
        self.http = http or requests.Session()
        self.authenticator = SalesforceAuthenticator(self.http, production=cfg.production)

    def connect_app(self, consumer_key: str, consumer_secret: str) -> SalesforceClient:
        """Return a client for the given Connected App (key and secret from Salesforce)."""
        return SalesforceClient(self.cfg.with_app(consumer_key, consumer_secret), self.http)

    def as_user(self, username: str, password: str) -> SalesforceClient:
        """Return a client that authenticates as the given user."""
        return SalesforceClient(self.cfg.with_user(username, password), self.http)

    def authenticate(self) -> AuthenticatedClient:
        """Run the password grant and return a client bound to the new session."""
        session = self.authenticator.authenticate(self.cfg, timeout=self.cfg.timeout)
        # Credentials are single use; a new login needs connect_app/as_user again.
        self.cfg = self.cfg.without_credentials()
        _logger.info("Connected to Salesforce instance=%s api=%s", session.instance_url, self.cfg.api_version)
        return AuthenticatedClient(session, self.cfg.api_version, self.http, timeout=self.cfg.timeout)

    def restore(self, access_token: str, instance_url: str) -> AuthenticatedClient:
        """Skip authentication and reuse a token obtained earlier."""
        _logger.debug("Restoring cached session for instance %s", instance_url)
        return AuthenticatedClient(
            SalesforceSession(access_token=access_token, instance_url=instance_url),
            self.cfg.api_version,
            self.http,
            timeout=self.cfg.timeout,
        )

    def connect(self) -> AuthenticatedClient:
        """Restore from ``cfg.access_token``/``cfg.instance_url`` if both are set, else authenticate."""
        if self.cfg.access_token and self.cfg.instance_url:
            _logger.debug("Using existing access token from configuration.")
            return self.restore(self.cfg.access_token, self.cfg.instance_url)
        return self.authenticate()


# ----------------------------------------------------------------------
# Authenticated client
# ----------------------------------------------------------------------
class AuthenticatedClient:
    """Salesforce REST, Bulk 2.0 ingest and Analytics operations for one session."""

    def __init__(
        self,
        session: SalesforceSession,
        api_version: str,
        http: Optional[requests.Session] = None,
        *,
        timeout: Optional[float] = None,
    ) -> None:
        self.session = session
        self.api_version = api_version
        self.http = http or requests.Session()
        self.timeout = timeout

    # --------------------------- Session state ------------------------

    @property
    def access_token(self) -> str:
        return self.session.access_token

    @property
    def instance_url(self) -> str:
        return self.session.instance_url

    @property
    def base_url(self) -> str:
        return f"{self.session.instance_url.rstrip('/')}/services/data/{self.api_version}/"

    def set_access_token(self, access_token: str) -> None:
        self.session = SalesforceSession(access_token, self.session.instance_url)

    def set_instance_url(self, instance_url: str) -> None:
        self.session = SalesforceSession(self.session.access_token, instance_url)

    # --------------------------- REST: query & search -----------------

    def search(self, query: str) -> Any:
        """Run a SOSL search, e.g.

        ``FIND {test@mod.com} IN ALL FIELDS RETURNING Lead(Id, Name, Email)``
        """
        return self._get_json("search", params={"q": query})

    def query(self, soql: str) -> Any:
        """Run a SOQL query. Only the first batch of records is returned."""
        return self._get_json("query", params={"q": soql})

    # --------------------------- REST: sobjects -----------------------

    def get(self, sobject: str, record_id: str, fields: Optional[Iterable[str]] = None) -> Any:
        """Return a record; ``fields`` restricts the returned fields."""
        joined = _join(fields or [])
        params = {"fields": joined} if joined else None
        return self._get_json(f"sobjects/{sobject}/{record_id}", params=params)

    def create(self, sobject: str, properties: Mapping[str, Any]) -> Any:
        """Create a record. The response carries the new ``id``."""
        r = self._request("POST", f"sobjects/{sobject}", json=dict(properties))
        return _decode(r)

    def update(self, sobject: str, record_id: str, properties: Mapping[str, Any]) -> bool:
        """Update a record; True if Salesforce answered 204 No Content."""
        r = self._request("PATCH", f"sobjects/{sobject}/{record_id}", json=dict(properties), check=False)
        return _status_is(r, 204)

    def delete(self, sobject: str, record_id: str) -> bool:
        """Delete a record; True if Salesforce answered 204 No Content."""
        r = self._request("DELETE", f"sobjects/{sobject}/{record_id}", check=False)
        return _status_is(r, 204)

    def describe_global(self) -> Any:
        """Return /sobjects (global describe)."""
        return self._get_json("sobjects")

    def describe(self, sobject: str) -> Any:
        """Return /sobjects/{name}/describe."""
        return self._get_json(f"sobjects/{sobject}/describe")

    def limits(self) -> Any:
        """Return API usage limits."""
        return self._get_json("limits")

    # --------------------------- REST: composite collections ----------

    def get_collection(self, sobject: str, ids: Iterable[str], fields: Iterable[str]) -> Any:
        """Return several records of one type in a single call."""
        params = {"ids": _join(ids), "fields": _join(fields)}
        return self._get_json(f"composite/sobjects/{sobject}", params=params)

    def insert_collection(self, sobject: str, records: Iterable[Mapping[str, Any]]) -> bool:
        """Insert records of type ``sobject`` all-or-none; True on HTTP 200."""
        r = self._request(
            "POST", "composite/sobjects", json=_collection_body(sobject, records), check=False
        )
        return _status_is(r, 200)

    def update_collection(self, sobject: str, records: Iterable[Mapping[str, Any]]) -> bool:
        """Update records (each must carry ``Id``) all-or-none; True on HTTP 200."""
        r = self._request(
            "PATCH", "composite/sobjects", json=_collection_body(sobject, records), check=False
        )
        return _status_is(r, 200)

    def delete_collection(self, ids: Iterable[str]) -> bool:
        """Delete records by id; True on HTTP 200."""
        r = self._request("DELETE", "composite/sobjects", params={"ids": _join(ids)}, check=False)
        return _status_is(r, 200)

    # --------------------------- Bulk API 2.0 ingest ------------------

    def create_job(self, sobject: str, content_type: str, operation: str) -> Any:
        """Create a bulk ingest job."""
        body = {"object": sobject, "contentType": content_type, "operation": operation}
        return _decode(self._request("POST", "jobs/ingest", json=body))

    def upload_job_data(self, job_id: str, csv_data: str | bytes) -> bool:
        """Upload CSV data to an open job; True on HTTP 201 Created."""
        r = self._request(
            "PUT",
            f"jobs/ingest/{job_id}/batches",
            data=csv_data,
            content_type="text/csv",
            check=False,
        )
        return _status_is(r, 201)

    def get_job_status(self, job_id: str) -> Any:
        return self._get_json(f"jobs/ingest/{job_id}")

    def get_all_job_status(self) -> Any:
        return self._get_json("jobs/ingest")

    def abort_job(self, job_id: str) -> Any:
        return self._set_job_state(job_id, "Aborted")

    def close_job(self, job_id: str) -> Any:
        """Mark the upload complete so Salesforce starts processing the job."""
        return self._set_job_state(job_id, "UploadComplete")

    def _set_job_state(self, job_id: str, state: str) -> Any:
        return _decode(self._request("PATCH", f"jobs/ingest/{job_id}", json={"state": state}))

    # --------------------------- Analytics ----------------------------

    def get_report_metadata(self, report_id: str) -> Any:
        return self._get_json(f"analytics/reports/{report_id}/describe")

    def delete_report(self, report_id: str) -> bool:
        r = self._request("DELETE", f"analytics/reports/{report_id}", check=False)
        return _status_is(r, 204)

    def get_dashboard_metadata(self, dashboard_id: str) -> Any:
        return self._get_json(f"analytics/dashboards/{dashboard_id}/describe")

    def get_dashboard_results(self, dashboard_id: str) -> Any:
        return self._get_json(f"analytics/dashboards/{dashboard_id}")

    def delete_dashboard(self, dashboard_id: str) -> bool:
        r = self._request("DELETE", f"analytics/dashboards/{dashboard_id}", check=False)
        return _status_is(r, 204)

    # --------------------------- HTTP wrappers -----------------------

    def _get_json(self, path: str, *, params: Optional[Dict[str, Any]] = None) -> Any:
        return _decode(self._request("GET", path, params=params))

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        data: Optional[str | bytes] = None,
        content_type: str = "application/json",
        check: bool = True,
    ) -> requests.Response:
        """Single request against ``base_url + path``.

        With ``check`` set, an HTTP error status raises ``requests.HTTPError``;
        otherwise the response is returned whatever its status.
        """
        url = self.base_url + path
        headers = {
            "Authorization": f"Bearer {self.session.access_token}",
            "Content-Type": content_type,
        }
        _logger.debug("%s %s params=%s", method, url, params)
        r = self.http.request(
            method,
            url,
            headers=headers,
            params=params,
            json=json,
            data=data,
            timeout=self.timeout,
        )

        if r.status_code >= 400:
            try:
                detail = r.json()
            except ValueError:
                detail = r.text
            if check:
                _logger.error("HTTP %s error for %s: %s", r.status_code, url, detail)
                r.raise_for_status()
            else:
                _logger.debug("HTTP %s for %s %s: %s", r.status_code, method, url, detail)
        return r


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------
def _collection_body(sobject: str, records: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    tagged: List[Record] = [{"attributes": {"type": sobject}, **record} for record in records]
    return {"allOrNone": True, "records": tagged}


def _status_is(r: requests.Response, expected: int) -> bool:
    return r.status_code == expected


def _join(values: str | Iterable[str]) -> str:
    """Comma-join field names or ids; a bare string counts as a single value."""
    if isinstance(values, str):
        return values
    return ",".join(values)


def _decode(r: requests.Response) -> Any:
    """Decode a JSON body; empty or non-JSON bodies decode to None."""
    if not r.content:
        return None
    try:
        return r.json()
    except ValueError:
        _logger.debug("HTTP %s with non-JSON body: %s", r.status_code, r.text)
        return None
