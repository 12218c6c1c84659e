import json
from unittest.mock import MagicMock

import pytest
import requests

from sfrest.client import SalesforceClient
from sfrest.config import SFConfig

INSTANCE_URL = "https://myorg.my.salesforce.com"
TOKEN = "00DFAKE!TOKEN-abcdef"

_SF_ENV_VARS = (
    "SF_CONSUMER_KEY",
    "SF_CONSUMER_SECRET",
    "SF_USERNAME",
    "SF_PASSWORD",
    "SF_PRODUCTION",
    "SF_API_VERSION",
    "SF_ACCESS_TOKEN",
    "SF_INSTANCE_URL",
    "SF_TIMEOUT",
)


@pytest.fixture(autouse=True)
def clean_sf_env(monkeypatch):
    """Keep the developer's own SF_* variables out of every test."""
    for var in _SF_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


def make_response(status_code=200, json_data=None, text=None):
    """Build a requests.Response stand-in with the attributes the client reads."""
    r = MagicMock()
    r.status_code = status_code
    if json_data is None:
        r.content = (text or "").encode()
        r.text = text or ""
        r.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        body = json.dumps(json_data)
        r.content = body.encode()
        r.text = body
        r.json.return_value = json_data
    if status_code >= 400:
        r.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Client Error", response=r)
    return r


@pytest.fixture
def response():
    """Factory fixture: response(status_code, json_data=None, text=None)."""
    return make_response


@pytest.fixture
def full_config():
    return SFConfig(
        consumer_key="key",
        consumer_secret="secret",
        username="api@example.com",
        password="hunter2",
        api_version="v42.0",
    )


@pytest.fixture
def sf():
    """An authenticated client restored from a cached session."""
    return SalesforceClient(SFConfig(api_version="v42.0")).restore(TOKEN, INSTANCE_URL)
