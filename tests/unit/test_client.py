import json
from unittest.mock import MagicMock, patch

import pytest

from ansible_ibm_provider.errors import NotFound, RemoteError
from ansible_ibm_provider.interfaces.client import ApiClient


def make_response(body):
    response = MagicMock()
    response.read.return_value = body
    return response


@pytest.fixture
def client():
    module = MagicMock()
    module.params = {"api_url": "https://api.example.com/", "iam_token": "token-1"}
    module.jsonify.side_effect = json.dumps
    return ApiClient.from_module(module)


class TestBuildUrl:
    def test_path_params_are_quoted(self, client):
        url = client.build_url(
            "/api/v1/config/{secret_type}/{config_element}/{name}",
            path_params={"secret_type": "public_cert", "config_element": "dns_providers", "name": "a/b c"},
        )
        assert url == "https://api.example.com/api/v1/config/public_cert/dns_providers/a%2Fb%20c"

    def test_list_query_values_are_repeated(self, client):
        url = client.build_url("/api/v1/secrets", query_params={"groups": ["a", "b"], "limit": 10, "search": None})
        assert url == "https://api.example.com/api/v1/secrets?groups=a&groups=b&limit=10"

    def test_version_is_appended(self):
        module = MagicMock()
        versioned = ApiClient(module, "https://dl.example.com/v1", "t", version="2023-12-13")
        assert versioned.build_url("/gateways") == "https://dl.example.com/v1/gateways?version=2023-12-13"

    def test_absolute_urls_are_kept(self, client):
        assert client.build_url("https://other.example.com/x") == "https://other.example.com/x"


class TestSendRequest:
    @patch("ansible_ibm_provider.interfaces.client.fetch_url")
    def test_success_decodes_json(self, mock_fetch_url, client):
        mock_fetch_url.return_value = (make_response(b'{"id": "1"}'), {"status": 201})

        body, status = client.send_request("POST", "/api/v1/secret_groups", data={"name": "g"})

        assert body == {"id": "1"}
        assert status == 201
        _, kwargs = mock_fetch_url.call_args
        assert kwargs["method"] == "POST"
        assert kwargs["data"] == '{"name": "g"}'
        assert kwargs["headers"]["Authorization"] == "Bearer token-1"

    @patch("ansible_ibm_provider.interfaces.client.fetch_url")
    def test_empty_body(self, mock_fetch_url, client):
        mock_fetch_url.return_value = (make_response(b""), {"status": 204})

        assert client.send_request("DELETE", "/api/v1/secret_groups/1") == (None, 204)

    @patch("ansible_ibm_provider.interfaces.client.fetch_url")
    def test_not_found(self, mock_fetch_url, client):
        mock_fetch_url.return_value = (None, {"status": 404, "body": b'{"errors": []}'})

        with pytest.raises(NotFound) as excinfo:
            client.send_request("GET", "/gateways/{id}", path_params={"id": "gw-1"}, operation="Read gateway", identifier="gw-1")
        assert excinfo.value.identifier == "gw-1"

    @patch("ansible_ibm_provider.interfaces.client.fetch_url")
    def test_remote_error_carries_details(self, mock_fetch_url, client):
        mock_fetch_url.return_value = (
            None,
            {"status": 400, "msg": "Bad Request", "body": b'{"errors": [{"message": "bad name"}]}'},
        )

        with pytest.raises(RemoteError) as excinfo:
            client.send_request("POST", "/gateways", data={}, operation="Create gateway")
        assert excinfo.value.status == 400
        assert "bad name" in excinfo.value.details
        assert "Create gateway failed" in str(excinfo.value)

    @patch("ansible_ibm_provider.interfaces.client.fetch_url")
    def test_remote_error_with_raw_body(self, mock_fetch_url, client):
        mock_fetch_url.return_value = (None, {"status": 503, "body": b"Service Unavailable"})

        with pytest.raises(RemoteError) as excinfo:
            client.send_request("GET", "/gateways")
        assert "Service Unavailable" in excinfo.value.details

    @patch("ansible_ibm_provider.interfaces.client.fetch_url")
    def test_success_without_json(self, mock_fetch_url, client):
        mock_fetch_url.return_value = (make_response(b"<html>"), {"status": 200})

        with pytest.raises(RemoteError, match="not valid JSON"):
            client.send_request("GET", "/gateways")
