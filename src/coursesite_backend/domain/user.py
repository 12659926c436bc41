"""
Identity: persisted users and the guest.

The guest is the "no row" user (id 0). Every predicate on a guest resolves
to the least privileged answer and every mutation on it is a no-op.
"""

import datetime
import hashlib
import hmac
import logging
import secrets
from typing import List, Optional

from email_validator import EmailNotValidError, validate_email

from coursesite_backend.api.exceptions import BadRequestException
from coursesite_backend.domain.base import DomainObject
from coursesite_backend.interface.users import UserContext
from coursesite_backend.model.auth import User as UserModel
from coursesite_backend.object_cache import CacheKind
from coursesite_backend.repositories import DuplicateError, UserRepository
from coursesite_backend.settings import settings

logger = logging.getLogger(__name__)

GUEST_ID = 0


def normalize_email(email: Optional[str]) -> str:
    """Validate an email address and return it in lower case."""
    try:
        return validate_email((email or "").strip(), check_deliverability=False).normalized.lower()
    except EmailNotValidError as e:
        raise BadRequestException(f"Invalid email address given: {e}")


def transform_password(password: str, salt: str) -> str:
    inner = hashlib.sha1(password.encode("utf-8")).hexdigest()
    return hashlib.sha1((inner + salt).encode("utf-8")).hexdigest()


class User(DomainObject):

    kind = CacheKind.user
    repository_class = UserRepository

    def __init__(self, uow, row: Optional[UserModel]):
        super().__init__(uow, row)

    @property
    def id(self) -> int:
        return self.row.id if self.row is not None else GUEST_ID

    @classmethod
    def guest(cls, uow) -> "User":
        return cls(uow, None)

    @classmethod
    def from_id(cls, uow, id: int) -> "User":
        if not id:
            return cls.guest(uow)
        return super().from_id(uow, id)

    @classmethod
    def from_email(cls, uow, email: str) -> "User":
        """Resolve a user by email; unknown or malformed addresses give the guest."""
        try:
            email = normalize_email(email)
        except BadRequestException:
            return cls.guest(uow)

        row = uow.repository(UserRepository).find_by_email(email)
        if row is None:
            return cls.guest(uow)
        return cls.from_row(uow, row)

    @classmethod
    def all_admins(cls, uow) -> List["User"]:
        return [cls.from_row(uow, row) for row in uow.repository(UserRepository).find_admins()]

    @classmethod
    def create(cls, uow, first_name: str, last_name: str, email: str, password: str, is_admin: bool = False, ip: Optional[str] = None) -> "User":
        first_name = (first_name or "").strip()
        last_name = (last_name or "").strip()
        if not first_name or not last_name:
            raise BadRequestException("First and last name are required.")
        if not password:
            raise BadRequestException("A password is required.")

        email = normalize_email(email)
        repository = uow.repository(UserRepository)
        if repository.find_by_email(email) is not None:
            raise BadRequestException("A user with this email address already exists.")

        salt = secrets.token_hex(16)
        now = uow.now()

        try:
            row = repository.insert(
                first_name=first_name,
                last_name=last_name,
                email=email,
                email_verified=False,
                email_token=secrets.token_hex(8),
                is_admin=is_admin,
                password_hash=transform_password(password, salt),
                password_salt=salt,
                cookie_salt=secrets.token_hex(16),
                created_at=now,
                created_from=ip,
            )
        except DuplicateError:
            raise BadRequestException("A user with this email address already exists.")

        logger.info(f"Created user {row.id} ({email}), admin={is_admin}")
        return cls.from_id(uow, row.id)

    @property
    def is_guest(self) -> bool:
        return self.row is None

    @property
    def is_admin(self) -> bool:
        return self.row is not None and bool(self.row.is_admin)

    @property
    def first_name(self) -> str:
        return self.row.first_name if self.row is not None else "Guest"

    @property
    def last_name(self) -> str:
        return self.row.last_name if self.row is not None else ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def email(self) -> str:
        return self.row.email if self.row is not None else ""

    @property
    def email_verified(self) -> bool:
        return self.row is not None and bool(self.row.email_verified)

    def is_password(self, password: str) -> bool:
        """Check the password, also accepting a temporary password that has not expired yet."""
        if self.is_guest or not password:
            return False

        transformed = transform_password(password, self.row.password_salt)
        if hmac.compare_digest(transformed, self.row.password_hash):
            return True

        if self.row.temp_password_hash is None or self.row.temp_password_issued_at is None:
            return False

        age = self.uow.now() - self.row.temp_password_issued_at
        if age > datetime.timedelta(seconds=settings.TEMP_PASSWORD_EXPIRE_SECONDS):
            return False
        return hmac.compare_digest(transformed, self.row.temp_password_hash)

    def cookie_password(self) -> str:
        if self.is_guest:
            return ""
        return transform_password(self.row.password_hash, self.row.cookie_salt + settings.APP_COOKIE_SALT)

    def is_cookie_password(self, value: str) -> bool:
        if self.is_guest or not value:
            return False
        return hmac.compare_digest(self.cookie_password(), value)

    def change_password(self, new_password: str) -> None:
        if self.is_guest:
            return
        if not new_password:
            raise BadRequestException("A password is required.")

        self._update(
            password_hash=transform_password(new_password, self.row.password_salt),
            temp_password_hash=None,
            temp_password_issued_at=None,
        )

    def create_temp_password(self) -> Optional[str]:
        """Issue a temporary password and return it in plain text; it is never stored that way."""
        if self.is_guest:
            return None

        temp_password = secrets.token_hex(8)
        self._update(
            temp_password_hash=transform_password(temp_password, self.row.password_salt),
            temp_password_issued_at=self.uow.now(),
        )
        return temp_password

    def change_email(self, new_email: str) -> None:
        if self.is_guest:
            return

        new_email = normalize_email(new_email)
        if new_email == self.row.email:
            return

        other = self.repository.find_by_email(new_email)
        if other is not None and other.id != self.id:
            raise BadRequestException("A user with this email address already exists.")

        self._update(email=new_email, email_verified=False, email_token=secrets.token_hex(8))

    def new_email_verification_code(self) -> Optional[str]:
        if self.is_guest:
            return None
        code = secrets.token_hex(8)
        self._update(email_token=code)
        return code

    def verify_email(self, code: str) -> bool:
        if self.is_guest or self.email_verified:
            return False
        if not code or code.lower() != (self.row.email_token or "").lower():
            return False
        self._update(email_verified=True)
        return True

    def set_admin(self, is_admin: bool) -> None:
        if self.is_guest:
            return
        if self._update(is_admin=is_admin):
            logger.info(f"User {self.id} admin flag set to {is_admin}")

    def update_visit_info(self, ip: Optional[str] = None) -> None:
        if self.is_guest:
            return
        self._update(
            last_visit_at=self.row.current_visit_at,
            last_visit_from=self.row.current_visit_from,
            current_visit_at=self.uow.now(),
            current_visit_from=ip,
        )

    def get_context(self, viewer: Optional["User"] = None) -> UserContext:
        show_email = viewer is not None and (viewer.is_admin or (not viewer.is_guest and viewer.id == self.id))
        return UserContext(
            user_id=self.id,
            is_guest=self.is_guest,
            is_admin=self.is_admin,
            first_name=self.first_name,
            last_name=self.last_name,
            full_name=self.full_name,
            email=self.email if show_email else "",
            email_verified=self.email_verified,
        )
