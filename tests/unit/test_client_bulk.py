"""Tests for the Bulk API 2.0 ingest job operations."""

from unittest.mock import patch

import pytest
import requests

BASE = "https://myorg.my.salesforce.com/services/data/v42.0/"

JOB = {
    "id": "7505fEXAMPLE4C2AAM",
    "operation": "insert",
    "object": "Account",
    "state": "Open",
    "contentType": "CSV",
}


def test_create_job(sf, response):
    with patch.object(sf.http, "request", return_value=response(200, JOB)) as mock_request:
        result = sf.create_job("Account", "CSV", "insert")

    assert result == JOB
    args, kwargs = mock_request.call_args
    assert args == ("POST", BASE + "jobs/ingest")
    assert kwargs["json"] == {"object": "Account", "contentType": "CSV", "operation": "insert"}


def test_create_job_error_raises(sf, response):
    error = [{"errorCode": "INVALIDJOB", "message": "Unable to find object: Acount"}]

    with patch.object(sf.http, "request", return_value=response(400, error)):
        with pytest.raises(requests.HTTPError):
            sf.create_job("Acount", "CSV", "insert")


def test_upload_job_data(sf, response):
    csv_data = "Name,Industry\nAcme,Retail\n"

    with patch.object(sf.http, "request", return_value=response(201)) as mock_request:
        assert sf.upload_job_data(JOB["id"], csv_data) is True

    args, kwargs = mock_request.call_args
    assert args == ("PUT", BASE + f"jobs/ingest/{JOB['id']}/batches")
    assert kwargs["data"] == csv_data
    assert kwargs["json"] is None
    assert kwargs["headers"]["Content-Type"] == "text/csv"


def test_upload_job_data_false_on_error(sf, response):
    with patch.object(sf.http, "request", return_value=response(400, [{"errorCode": "INVALIDJOBSTATE"}])):
        assert sf.upload_job_data(JOB["id"], "Name\nAcme\n") is False


def test_get_job_status(sf, response):
    with patch.object(sf.http, "request", return_value=response(200, JOB)) as mock_request:
        assert sf.get_job_status(JOB["id"]) == JOB

    assert mock_request.call_args[0] == ("GET", BASE + f"jobs/ingest/{JOB['id']}")


def test_get_all_job_status(sf, response):
    payload = {"done": True, "records": [JOB], "nextRecordsUrl": None}

    with patch.object(sf.http, "request", return_value=response(200, payload)) as mock_request:
        assert sf.get_all_job_status() == payload

    assert mock_request.call_args[0] == ("GET", BASE + "jobs/ingest")


@pytest.mark.parametrize(
    "method, state",
    [("abort_job", "Aborted"), ("close_job", "UploadComplete")],
)
def test_job_state_transitions(sf, response, method, state):
    updated = {**JOB, "state": state}

    with patch.object(sf.http, "request", return_value=response(200, updated)) as mock_request:
        result = getattr(sf, method)(JOB["id"])

    assert result == updated
    args, kwargs = mock_request.call_args
    assert args == ("PATCH", BASE + f"jobs/ingest/{JOB['id']}")
    assert kwargs["json"] == {"state": state}
