import logging
from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends

from coursesite_backend.api.exceptions import ServiceUnavailableException
from coursesite_backend.client.push_client import PushServer, PushServerError, get_optional_push_server
from coursesite_backend.domain import Notification, User
from coursesite_backend.interface.notifications import NotificationContext, PushTicket
from coursesite_backend.permissions.auth import get_signed_in_user
from coursesite_backend.unit_of_work import UnitOfWork, get_unit_of_work

logger = logging.getLogger(__name__)

notification_router = APIRouter()


@notification_router.get("", response_model=List[NotificationContext])
def list_notifications(
    user: Annotated[User, Depends(get_signed_in_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    return [notification.get_context(user) for notification in Notification.for_user(uow, user)]


@notification_router.post("/read", status_code=204)
def mark_notifications_read(
    user: Annotated[User, Depends(get_signed_in_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    Notification.mark_all_read(uow, user)


@notification_router.get("/ticket", response_model=PushTicket)
def get_push_ticket(
    user: Annotated[User, Depends(get_signed_in_user)],
    push_server: Optional[PushServer] = Depends(get_optional_push_server)
):
    """Ticket a browser uses to open its socket to the push relay"""
    if push_server is None:
        raise ServiceUnavailableException("Push notifications are disabled.")

    try:
        ticket = push_server.get_ticket(user)
    except PushServerError as e:
        logger.error(f"Could not get a push ticket for user {user.id}: {e}")
        raise ServiceUnavailableException("The push server is not reachable.")

    return PushTicket(
        host=push_server.host,
        socket_port=push_server.socket_port,
        http_host=push_server.host_url,
        ticket=ticket
    )
