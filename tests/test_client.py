"""
Tests for PushClient, the HTTP transport, and client configuration.
"""

import json

import httpx
import pytest

from expo_push.errors import (
    AuthenticationError,
    DeviceNotRegisteredError,
    GatewayRequestError,
    GatewayStatusError,
    MalformedResponseError,
    MismatchedCountError,
    TransportError,
    ValidationError,
)
from expo_push.gateway import (
    DEFAULT_API_URL,
    DEFAULT_HOST,
    PushClient,
    PushClientConfig,
    load_client_config,
)
from expo_push.messages import Priority, PushMessage


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class RecordingHandler:
    """httpx MockTransport handler that records requests and replays a response."""

    def __init__(self, status_code: int = 200, json_body=None, content: bytes = None):
        self.status_code = status_code
        self.json_body = json_body
        self.content = content
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        return httpx.Response(self.status_code, json=self.json_body)


def _make_client(handler, **config) -> PushClient:
    http_client = httpx.Client(transport=httpx.MockTransport(handler))
    return PushClient(PushClientConfig(http_client=http_client, **config))


def _ok(n: int) -> dict:
    return {"data": [{"status": "ok", "id": f"ticket-{i}"} for i in range(n)]}


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class TestPushClientConfig:
    def test_defaults(self):
        config = PushClientConfig()
        assert config.push_url == "https://exp.host/--/api/v2/push/send"
        assert config.access_token is None
        assert config.http_client is None

    def test_host_and_api_url(self):
        config = PushClientConfig(host="http://localhost:3000", api_url="/api/v9")
        assert config.push_url == "http://localhost:3000/api/v9/push/send"

    def test_url_override(self):
        config = PushClientConfig(host="http://ignored", url="http://gateway.test/send")
        assert config.push_url == "http://gateway.test/send"

    def test_frozen(self):
        config = PushClientConfig()
        with pytest.raises(AttributeError):
            config.host = "http://other"


class TestLoadClientConfig:
    def test_no_path_uses_defaults_and_env(self, monkeypatch):
        monkeypatch.setenv("EXPO_ACCESS_TOKEN", "secret")
        config = load_client_config()
        assert config.host == DEFAULT_HOST
        assert config.api_url == DEFAULT_API_URL
        assert config.access_token == "secret"

    def test_missing_env_means_no_token(self, monkeypatch):
        monkeypatch.delenv("EXPO_ACCESS_TOKEN", raising=False)
        assert load_client_config().access_token is None

    def test_load_from_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MY_PUSH_TOKEN", "from-env")
        path = tmp_path / "push.json"
        path.write_text(json.dumps({
            "host": "http://localhost:8080",
            "api_url": "/v1",
            "access_token_env": "MY_PUSH_TOKEN",
        }))
        config = load_client_config(path)
        assert config.push_url == "http://localhost:8080/v1/push/send"
        assert config.access_token == "from-env"

    def test_url_from_file(self, tmp_path):
        path = tmp_path / "push.json"
        path.write_text(json.dumps({"url": "http://gateway.test/send"}))
        assert load_client_config(str(path)).push_url == "http://gateway.test/send"

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_client_config(tmp_path / "nope.json")

    def test_malformed_json_raises(self, tmp_path):
        path = tmp_path / "push.json"
        path.write_text("{not json")
        with pytest.raises(json.JSONDecodeError):
            load_client_config(path)


# ---------------------------------------------------------------------------
# Publishing
# ---------------------------------------------------------------------------

class TestPublish:
    def test_publish_single_message(self):
        handler = RecordingHandler(json_body=_ok(2))
        client = _make_client(handler)
        message = PushMessage(
            to=["ExponentPushToken[a]", "ExponentPushToken[b]"],
            body="Hello",
            priority=Priority.HIGH,
        )
        tickets = client.publish(message)

        assert len(tickets) == 2
        assert tickets[1].push_message.to == ["ExponentPushToken[b]"]
        assert tickets[1].id == "ticket-1"

        request = handler.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://exp.host/--/api/v2/push/send"
        assert request.headers["content-type"] == "application/json"
        assert "authorization" not in request.headers
        assert json.loads(request.content) == [{
            "to": ["ExponentPushToken[a]", "ExponentPushToken[b]"],
            "body": "Hello",
            "priority": "high",
        }]

    def test_publish_multiple_in_one_request(self):
        handler = RecordingHandler(json_body={"data": [
            {"status": "ok"},
            {"status": "ok"},
            {"status": "error", "message": "not registered",
             "details": {"error": "DeviceNotRegistered"}},
        ]})
        client = _make_client(handler)
        batch = [
            PushMessage(to=["ExponentPushToken[a]", "ExponentPushToken[b]"], body="one"),
            PushMessage(to=["ExponentPushToken[c]"], body="two"),
        ]
        tickets = client.publish_multiple(batch)

        assert len(handler.requests) == 1
        assert [t.push_message.to[0] for t in tickets] == [
            "ExponentPushToken[a]", "ExponentPushToken[b]", "ExponentPushToken[c]",
        ]
        tickets[0].validate()
        with pytest.raises(DeviceNotRegisteredError):
            tickets[2].validate()

    def test_bearer_token_header(self):
        handler = RecordingHandler(json_body=_ok(1))
        client = _make_client(handler, access_token="secret")
        client.publish(PushMessage(to=["ExponentPushToken[a]"], body="x"))
        assert handler.requests[0].headers["authorization"] == "Bearer secret"

    def test_url_override(self):
        handler = RecordingHandler(json_body=_ok(1))
        client = _make_client(handler, url="http://gateway.test/custom")
        client.publish(PushMessage(to=["ExponentPushToken[a]"], body="x"))
        assert str(handler.requests[0].url) == "http://gateway.test/custom"

    def test_validation_error_makes_no_request(self):
        handler = RecordingHandler(json_body=_ok(1))
        client = _make_client(handler)
        with pytest.raises(ValidationError):
            client.publish(PushMessage(to=[], body="x"))
        with pytest.raises(ValidationError):
            client.publish(PushMessage(to=[""], body="x"))
        assert handler.requests == []

    def test_mismatched_count(self):
        client = _make_client(RecordingHandler(json_body=_ok(2)))
        batch = [
            PushMessage(to=["ExponentPushToken[a]", "ExponentPushToken[b]"], body="one"),
            PushMessage(to=["ExponentPushToken[c]"], body="two"),
        ]
        with pytest.raises(MismatchedCountError) as exc_info:
            client.publish_multiple(batch)
        assert (exc_info.value.expected, exc_info.value.received) == (3, 2)
        assert exc_info.value.response.status_code == 200

    def test_request_level_errors(self):
        client = _make_client(RecordingHandler(
            json_body={"errors": [{"code": "API_ERROR", "message": "bad"}]}
        ))
        with pytest.raises(GatewayRequestError) as exc_info:
            client.publish(PushMessage(to=["ExponentPushToken[a]"], body="x"))
        assert exc_info.value.errors[0]["code"] == "API_ERROR"


# ---------------------------------------------------------------------------
# Transport errors
# ---------------------------------------------------------------------------

class TestTransportErrors:
    def setup_method(self):
        self.message = PushMessage(to=["ExponentPushToken[a]"], body="x")

    @pytest.mark.parametrize("status_code", [401, 403])
    def test_auth_failure(self, status_code):
        client = _make_client(RecordingHandler(status_code=status_code, content=b"denied"))
        with pytest.raises(AuthenticationError) as exc_info:
            client.publish(self.message)
        assert exc_info.value.is_auth_failure
        assert exc_info.value.status_code == status_code

    def test_server_error(self):
        client = _make_client(RecordingHandler(status_code=500, content=b"not json"))
        with pytest.raises(GatewayStatusError) as exc_info:
            client.publish(self.message)
        assert type(exc_info.value) is GatewayStatusError
        assert not exc_info.value.is_auth_failure
        assert exc_info.value.status_code == 500

    def test_error_status_body_not_parsed(self):
        client = _make_client(RecordingHandler(
            status_code=400, json_body={"errors": [{"code": "X"}]}
        ))
        with pytest.raises(GatewayStatusError):
            client.publish(self.message)

    def test_ok_status_with_unparsable_body(self):
        client = _make_client(RecordingHandler(status_code=200, content=b"<html>"))
        with pytest.raises(MalformedResponseError):
            client.publish(self.message)

    def test_network_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = _make_client(handler)
        with pytest.raises(TransportError) as exc_info:
            client.publish(self.message)
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = _make_client(handler)
        with pytest.raises(TransportError):
            client.publish(self.message)

    def test_other_request_error(self):
        def handler(request):
            raise httpx.TooManyRedirects("redirect loop", request=request)

        client = _make_client(handler)
        with pytest.raises(TransportError) as exc_info:
            client.publish(self.message)
        assert isinstance(exc_info.value.__cause__, httpx.TooManyRedirects)

    def test_undecodable_body(self):
        def handler(request):
            return httpx.Response(
                200, headers={"content-encoding": "gzip"}, content=b"not gzip"
            )

        client = _make_client(handler)
        with pytest.raises(MalformedResponseError) as exc_info:
            client.publish(self.message)
        assert isinstance(exc_info.value.__cause__, httpx.DecodingError)


# ---------------------------------------------------------------------------
# Client lifecycle
# ---------------------------------------------------------------------------

class TestClientLifecycle:
    def test_caller_client_not_closed(self):
        http_client = httpx.Client(transport=httpx.MockTransport(RecordingHandler(json_body=_ok(1))))
        with PushClient(PushClientConfig(http_client=http_client)):
            pass
        assert not http_client.is_closed

    def test_owned_client_closed(self):
        client = PushClient()
        client.close()
        assert client._http.is_closed

    def test_default_config(self):
        client = PushClient()
        assert client.config.push_url == "https://exp.host/--/api/v2/push/send"
        client.close()
