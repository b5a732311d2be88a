"""Tests for the flocker-volume command line."""
import json

import pytest

from flocker_client.cli import EXIT_ERROR, EXIT_NOT_FOUND, EXIT_OK, main
from flocker_client.identifiers import dataset_id_from_name

from tests.conftest import CLIENT_IP, PRIMARY


@pytest.fixture
def server_args(httpserver):
    return [
        "--host", httpserver.host,
        "--port", str(httpserver.port),
        "--insecure-http",
        "--client-ip", CLIENT_IP,
        "--poll-interval", "0.01",
        "--poll-timeout", "2",
    ]


def test_dataset_id_needs_no_control_service(capsys):
    assert main(["dataset-id", "hello"]) == EXIT_OK
    assert capsys.readouterr().out.strip() == "a6c0426f-f9a3-4b59-a62f-4807c382b768"


def test_primary(httpserver, server_args, expect_primary, capsys):
    expect_primary()
    assert main(server_args + ["primary"]) == EXIT_OK
    assert capsys.readouterr().out.strip() == PRIMARY


def test_create_prints_json_result(httpserver, server_args, expect_primary, capsys):
    dataset_id = dataset_id_from_name("pgdata")
    expect_primary()
    httpserver.expect_ordered_request("/v1/configuration/datasets", method="POST").respond_with_json(
        {"dataset_id": dataset_id}
    )
    httpserver.expect_ordered_request("/v1/state/datasets").respond_with_json(
        [{"dataset_id": dataset_id, "path": "/flocker/pgdata"}]
    )

    assert main(server_args + ["--json", "create", "pgdata"]) == EXIT_OK
    result = json.loads(capsys.readouterr().out)
    assert result == {"outcome": "created", "dataset_id": dataset_id, "value": "/flocker/pgdata"}


def test_lookup_missing_volume(httpserver, server_args, capsys):
    httpserver.expect_request("/v1/state/datasets").respond_with_json([])
    assert main(server_args + ["lookup", "pgdata"]) == EXIT_NOT_FOUND
    assert "does not exist" in capsys.readouterr().err


def test_update_primary_failure(httpserver, server_args, capsys):
    dataset_id = dataset_id_from_name("pgdata")
    httpserver.expect_request(f"/v1/configuration/datasets/{dataset_id}", method="POST").respond_with_data(
        "", status=500
    )
    assert main(server_args + ["update-primary", "pgdata", "NEW"]) == EXIT_ERROR
    assert "impossible to update" in capsys.readouterr().err


def test_missing_host_is_reported(monkeypatch, capsys):
    monkeypatch.delenv("FLOCKER_CONTROL_SERVICE_HOST", raising=False)
    assert main(["primary"]) == EXIT_ERROR
    assert "FLOCKER_CONTROL_SERVICE_HOST" in capsys.readouterr().err


def test_create_fail_if_exists(httpserver, server_args, expect_primary, capsys):
    expect_primary()
    httpserver.expect_ordered_request("/v1/configuration/datasets", method="POST").respond_with_data("", status=409)

    assert main(server_args + ["create", "--fail-if-exists", "pgdata"]) == EXIT_ERROR
    assert "already exists" in capsys.readouterr().err
