import logging
from typing import Annotated
from fastapi import APIRouter, Depends, File, Response, UploadFile

from coursesite_backend.api.exceptions import NotFoundException
from coursesite_backend.domain import Attachment, Course, Entry, User
from coursesite_backend.interface.attachments import AttachmentContext
from coursesite_backend.interface.entries import EntryContext, EntryCreate, EntryUpdate
from coursesite_backend.permissions.auth import get_current_user, get_signed_in_user
from coursesite_backend.permissions.core import require_edit, require_view
from coursesite_backend.storage_security import detect_image_type
from coursesite_backend.unit_of_work import UnitOfWork, get_unit_of_work

logger = logging.getLogger(__name__)

entry_router = APIRouter()


def _entry_context(entry: Entry, user: User) -> EntryContext:
    context = entry.get_context(user)
    if context is None:
        raise NotFoundException(f"Entry {entry.id} does not exist.")
    return context


@entry_router.post("/course/{course_id}", response_model=EntryContext, status_code=201)
def create_entry(
    course_id: int,
    payload: EntryCreate,
    user: Annotated[User, Depends(get_signed_in_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    """New entries start hidden; professors publish them with an update"""
    course = require_edit(Course.from_id(uow, course_id), user)
    entry = Entry.create(uow, user, course, payload.title, payload.description)
    return _entry_context(entry, user)


@entry_router.get("/{entry_id}", response_model=EntryContext)
def get_entry(
    entry_id: int,
    user: Annotated[User, Depends(get_current_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    entry = require_view(Entry.from_id(uow, entry_id), user)
    return _entry_context(entry, user)


@entry_router.patch("/{entry_id}", response_model=EntryContext)
def update_entry(
    entry_id: int,
    payload: EntryUpdate,
    user: Annotated[User, Depends(get_signed_in_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    entry = require_edit(Entry.from_id(uow, entry_id), user)
    with uow.transaction():
        entry.set_title(payload.title)
        entry.set_description(payload.description)
        entry.set_due_time(payload.due_at)
        entry.set_display_time(payload.display_at)
        entry.set_visible(payload.visible)
    return _entry_context(entry, user)


@entry_router.delete("/{entry_id}", response_model=dict)
def delete_entry(
    entry_id: int,
    user: Annotated[User, Depends(get_signed_in_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    entry = require_edit(Entry.from_id(uow, entry_id), user)
    entry.delete()
    return {"ok": True}


@entry_router.post("/{entry_id}/attachments", response_model=AttachmentContext, status_code=201)
async def upload_attachment(
    entry_id: int,
    user: Annotated[User, Depends(get_signed_in_user)],
    file: UploadFile = File(...),
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    entry = require_edit(Entry.from_id(uow, entry_id), user)
    data = await file.read()

    attachment = Attachment.create(uow, user, data, file.filename or "attachment")
    entry.add_attachment(attachment)
    return attachment.get_context(user)


def _entry_attachment(uow: UnitOfWork, entry: Entry, attachment_id: int) -> Attachment:
    attachment = Attachment.find(uow, attachment_id)
    if attachment is None or not entry.has_attachment(attachment):
        raise NotFoundException(f"Attachment {attachment_id} does not belong to entry {entry.id}.")
    return attachment


@entry_router.get("/{entry_id}/attachments/{attachment_id}")
def download_attachment(
    entry_id: int,
    attachment_id: int,
    user: Annotated[User, Depends(get_current_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    entry = require_view(Entry.from_id(uow, entry_id), user)
    attachment = _entry_attachment(uow, entry, attachment_id)

    data = attachment.read_bytes()
    return Response(
        content=data,
        media_type=detect_image_type(data) or "application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{attachment.name}"'}
    )


@entry_router.delete("/{entry_id}/attachments/{attachment_id}", response_model=EntryContext)
def delete_attachment(
    entry_id: int,
    attachment_id: int,
    user: Annotated[User, Depends(get_signed_in_user)],
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    entry = require_edit(Entry.from_id(uow, entry_id), user)
    entry.remove_attachment(_entry_attachment(uow, entry, attachment_id))
    return _entry_context(entry, user)
