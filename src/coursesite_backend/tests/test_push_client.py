import json
import pytest
from urllib.parse import parse_qs
from unittest.mock import MagicMock
from httpx import Client, MockTransport, Response

from coursesite_backend.client.push_client import PushNotificationSink, PushServer, PushServerError


class RelayStub:
    """Records the form posts the push server client makes."""

    def __init__(self, reply=None, status_code=200):
        self.reply = reply if reply is not None else {"success": True, "data": None, "error": None}
        self.status_code = status_code
        self.requests = []

    def __call__(self, request):
        form = {key: values[0] for key, values in parse_qs(request.content.decode()).items()}
        self.requests.append((request, form))
        return Response(self.status_code, json=self.reply)


def make_server(relay: RelayStub) -> PushServer:
    client = Client(base_url="http://relay:8081", transport=MockTransport(relay))
    return PushServer("relay", 8081, 8082, "secret-key", client=client)


class TestPushServer:

    def test_get_ticket(self):
        relay = RelayStub({"success": True, "data": "ticket-123", "error": None})
        server = make_server(relay)
        user = MagicMock(id=7, is_guest=False, full_name="Ada Lovelace")

        assert server.get_ticket(user) == "ticket-123"

        request, form = relay.requests[0]
        assert request.headers["auth-key"] == "secret-key"
        assert form == {"mode": "get_ticket", "userid": "7", "username": "Ada Lovelace"}

    def test_guest_gets_no_ticket(self):
        relay = RelayStub()
        with pytest.raises(PushServerError):
            make_server(relay).get_ticket(MagicMock(is_guest=True))
        assert relay.requests == []

    def test_emit_encodes_data_as_json(self):
        relay = RelayStub()
        make_server(relay).emit(7, "sync", {"type": "course", "id": 3, "context": None})

        _, form = relay.requests[0]
        assert form["mode"] == "emit"
        assert form["endpoint"] == "sync"
        assert json.loads(form["data"]) == {"type": "course", "id": 3, "context": None}

    def test_emit_without_data(self):
        relay = RelayStub()
        make_server(relay).emit(7, "notification")

        _, form = relay.requests[0]
        assert "data" not in form

    def test_rejected_request(self):
        relay = RelayStub({"success": False, "data": None, "error": "bad auth key"})
        with pytest.raises(PushServerError, match="bad auth key"):
            make_server(relay).status()

    def test_http_error(self):
        relay = RelayStub(status_code=500)
        with pytest.raises(PushServerError):
            make_server(relay).status()

    def test_host_url(self):
        assert make_server(RelayStub()).host_url == "http://relay:8081"


class TestPushNotificationSink:

    def test_posts_sync_endpoint(self):
        server = MagicMock()
        sink = PushNotificationSink(server)

        sink.emit(MagicMock(id=4, is_guest=False), "course", 9, {"course_id": 9})

        server.emit.assert_called_once_with(4, "sync", {"type": "course", "id": 9, "context": {"course_id": 9}})

    def test_skips_guests(self):
        server = MagicMock()
        PushNotificationSink(server).emit(MagicMock(is_guest=True), "course", 9, None)
        server.emit.assert_not_called()
