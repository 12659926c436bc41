import pytest

from coursesite_backend.api.exceptions import BadRequestException
from coursesite_backend.domain import User
from coursesite_backend.domain.user import GUEST_ID, normalize_email, transform_password
from coursesite_backend.settings import settings


class TestGuest:

    def test_guest_identity(self, uow):
        guest = User.guest(uow)

        assert guest.id == GUEST_ID
        assert guest.is_guest
        assert not guest.is_admin
        assert guest.first_name == "Guest"
        assert User.from_id(uow, 0).is_guest

    def test_guest_mutations_are_noops(self, uow):
        guest = User.guest(uow)

        guest.change_password("new-password")
        guest.set_admin(True)
        assert guest.create_temp_password() is None
        assert not guest.is_password("anything")
        assert guest.cookie_password() == ""
        assert not guest.is_admin

    def test_unknown_email_resolves_to_guest(self, uow):
        assert User.from_email(uow, "nobody@example.org").is_guest
        assert User.from_email(uow, "not an email").is_guest


class TestUserCreation:

    def test_email_is_normalized(self, uow, make_user):
        user = make_user(email="  Ada.Lovelace@Example.ORG ")
        assert user.email == "ada.lovelace@example.org"
        assert User.from_email(uow, "ADA.LOVELACE@example.org") is user

    def test_duplicate_email(self, make_user):
        make_user(email="ada@example.org")
        with pytest.raises(BadRequestException):
            make_user(email="ADA@example.org")

    def test_invalid_email(self, make_user):
        with pytest.raises(BadRequestException):
            make_user(email="ada-at-example")

    def test_names_are_required(self, uow):
        with pytest.raises(BadRequestException):
            User.create(uow, " ", "Lovelace", "ada@example.org", "correct-horse")

    def test_normalize_email(self):
        assert normalize_email("Someone@Example.com") == "someone@example.com"
        with pytest.raises(BadRequestException):
            normalize_email(None)


class TestPasswords:

    def test_password_check(self, make_user):
        user = make_user(password="correct-horse")

        assert user.is_password("correct-horse")
        assert not user.is_password("battery-staple")
        assert not user.is_password("")

    def test_hash_is_salted(self, make_user):
        user = make_user(password="correct-horse")
        assert user.row.password_hash == transform_password("correct-horse", user.row.password_salt)
        assert user.row.password_hash != transform_password("correct-horse", "")

    def test_change_password(self, make_user):
        user = make_user(password="correct-horse")
        user.change_password("battery-staple")

        assert user.is_password("battery-staple")
        assert not user.is_password("correct-horse")

    def test_temp_password_expires(self, clock, make_user):
        user = make_user(password="correct-horse")
        temp = user.create_temp_password()

        assert user.is_password(temp)
        assert user.is_password("correct-horse")

        clock.advance(seconds=settings.TEMP_PASSWORD_EXPIRE_SECONDS + 1)
        assert not user.is_password(temp)
        assert user.is_password("correct-horse")

    def test_change_password_discards_temp_password(self, make_user):
        user = make_user()
        temp = user.create_temp_password()
        user.change_password("battery-staple")
        assert not user.is_password(temp)

    def test_cookie_password(self, make_user):
        user = make_user(password="correct-horse")
        token = user.cookie_password()

        assert user.is_cookie_password(token)
        assert not user.is_cookie_password(token[:-1])

        user.change_password("battery-staple")
        assert not user.is_cookie_password(token)


class TestEmailVerification:

    def test_verify_email(self, make_user):
        user = make_user()
        code = user.new_email_verification_code()

        assert not user.verify_email("wrong")
        assert user.verify_email(code.upper())
        assert user.email_verified
        assert not user.verify_email(code)

    def test_change_email_resets_verification(self, make_user):
        user = make_user()
        user.verify_email(user.new_email_verification_code())
        user.change_email("new-address@example.org")

        assert user.email == "new-address@example.org"
        assert not user.email_verified

    def test_change_email_to_taken_address(self, make_user):
        make_user(email="taken@example.org")
        user = make_user()
        with pytest.raises(BadRequestException):
            user.change_email("taken@example.org")


class TestUserContext:

    def test_email_visibility(self, uow, professor, student, admin):
        assert student.get_context(student).email == "student@example.org"
        assert student.get_context(admin).email == "student@example.org"
        assert student.get_context(professor).email == ""
        assert student.get_context(User.guest(uow)).email == ""

    def test_all_admins(self, uow, admin, professor):
        assert User.all_admins(uow) == [admin]

    def test_visit_info(self, uow, clock, student):
        student.update_visit_info("10.0.0.1")
        first = clock.now
        clock.advance(hours=1)
        student.update_visit_info("10.0.0.2")

        assert student.row.last_visit_at == first
        assert student.row.last_visit_from == "10.0.0.1"
        assert student.row.current_visit_at == clock.now
