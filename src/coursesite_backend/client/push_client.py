import json
import logging
from typing import Any, Optional
from httpx import Client, HTTPError

from coursesite_backend.settings import settings
from coursesite_backend.sync import NotificationSink, NullNotificationSink

logger = logging.getLogger(__name__)


class PushServerError(Exception):
    pass


class PushServer:
    """HTTP side of the real-time relay that forwards events to connected browsers."""

    def __init__(self, host: str, http_port: int, socket_port: int, auth_key: str, timeout: float = 2.0, client: Optional[Client] = None):
        self.host = host
        self.http_port = int(http_port)
        self.socket_port = int(socket_port)
        self.auth_key = auth_key
        self.client = client or Client(base_url=self.host_url, timeout=timeout)

    @classmethod
    def from_settings(cls) -> "PushServer":
        return cls(
            host=settings.PUSH_HOST,
            http_port=settings.PUSH_HTTP_PORT,
            socket_port=settings.PUSH_SOCKET_PORT,
            auth_key=settings.PUSH_AUTH_KEY,
            timeout=settings.PUSH_TIMEOUT,
        )

    @property
    def host_url(self) -> str:
        return f"http://{self.host}:{self.http_port}"

    def _request(self, mode: str, **data) -> Any:
        form = {"mode": mode}
        for key, value in data.items():
            if value is None:
                continue
            form[key] = value if isinstance(value, str) else json.dumps(value)

        try:
            response = self.client.post("/", data=form, headers={"auth-key": self.auth_key})
            response.raise_for_status()
            body = response.json()
        except (HTTPError, ValueError) as e:
            raise PushServerError(f"Push server request '{mode}' failed: {e}") from e

        if not body.get("success"):
            raise PushServerError(body.get("error") or f"Push server rejected '{mode}'")

        return body.get("data")

    def get_ticket(self, user) -> Any:
        if user.is_guest:
            raise PushServerError("Unable to get tickets for guests.")

        return self._request(
            "get_ticket",
            userid=str(user.id),
            username=user.full_name,
        )

    def emit(self, user_id: int, endpoint: str, data: Any = None) -> Any:
        return self._request("emit", userid=str(user_id), endpoint=endpoint, data=data)

    def status(self) -> Any:
        return self._request("status")

    def close(self):
        self.client.close()


class PushNotificationSink:
    """Forwards course syncs to the relay on the ``sync`` endpoint."""

    def __init__(self, server: PushServer):
        self.server = server

    def emit(self, user, kind: str, id: int, context: Optional[dict]) -> None:
        if user.is_guest:
            return
        logger.debug(f"Pushing {kind} {id} to user {user.id}")
        self.server.emit(user.id, "sync", {"type": kind, "id": id, "context": context})


_push_server: Optional[PushServer] = None


def get_push_server() -> PushServer:
    global _push_server
    if _push_server is None:
        _push_server = PushServer.from_settings()
    return _push_server


def get_notification_sink() -> NotificationSink:
    if not settings.PUSH_ENABLED:
        return NullNotificationSink()

    return PushNotificationSink(get_push_server())


def get_optional_push_server() -> Optional[PushServer]:
    return get_push_server() if settings.PUSH_ENABLED else None
