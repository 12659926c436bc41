import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from coursesite_backend.api.answers import answer_router
from coursesite_backend.api.courses import course_router
from coursesite_backend.api.entries import entry_router
from coursesite_backend.api.notifications import notification_router
from coursesite_backend.api.questions import question_router
from coursesite_backend.api.users import user_router
from coursesite_backend.database import get_db, get_engine
from coursesite_backend.domain import User
from coursesite_backend.model import Base
from coursesite_backend.repositories import RepositoryError
from coursesite_backend.settings import settings
from coursesite_backend.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def init_admin_user(uow: UnitOfWork) -> None:

    email = os.environ.get("ADMIN_EMAIL")
    password = os.environ.get("ADMIN_PASSWORD")

    if not email or not password:
        return

    if not User.from_email(uow, email).is_guest:
        return

    User.create(uow, "Admin", "System", email, password, is_admin=True)


def startup_logic() -> None:

    Base.metadata.create_all(bind=get_engine())

    db = next(get_db())
    try:
        with UnitOfWork(db) as uow:
            init_admin_user(uow)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):

    if settings.DEBUG_MODE != "production" or settings.database_url.startswith("sqlite"):
        startup_logic()

    yield


app = FastAPI(lifespan=lifespan)

origins = [
    "*"
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RepositoryError)
def repository_error_handler(request: Request, exc: RepositoryError):
    logger.error(f"Persistence failure on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(
    course_router,
    prefix="/courses",
    tags=["courses"]
)

app.include_router(
    entry_router,
    prefix="/entries",
    tags=["entries"]
)

app.include_router(
    question_router,
    prefix="/questions",
    tags=["questions", "answers"]
)

app.include_router(
    answer_router,
    prefix="/answers",
    tags=["answers"]
)

app.include_router(
    user_router,
    prefix="/users",
    tags=["user", "me"]
)

app.include_router(
    notification_router,
    prefix="/notifications",
    tags=["notifications"]
)

@app.head("/", status_code=204)
def get_status_head():
    return
