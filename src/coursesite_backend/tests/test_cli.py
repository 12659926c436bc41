import datetime
import pytest
from unittest.mock import patch
from click.testing import CliRunner

from coursesite_backend.cli.cli import cli
from coursesite_backend.domain import Course, Notification, User
from coursesite_backend.unit_of_work import UnitOfWork, utcnow


@pytest.fixture
def runner(session):
    with patch("coursesite_backend.cli.admin.get_db", lambda: iter([session])):
        yield CliRunner()


class TestCli:

    def test_create_admin(self, runner, session):
        result = runner.invoke(cli, [
            "create-user", "-f", "Grace", "-l", "Hopper", "-e", "grace@example.org", "-p", "correct-horse", "--admin"
        ])

        assert result.exit_code == 0, result.output
        user = User.from_email(UnitOfWork(session), "grace@example.org")
        assert user.is_admin
        assert user.is_password("correct-horse")

    def test_add_member(self, runner, session, course, outsider):
        result = runner.invoke(cli, ["add-member", str(course.id), outsider.email, "--professor"])

        assert result.exit_code == 0, result.output
        assert Course.from_id(UnitOfWork(session), course.id).is_professor(outsider)

    def test_add_unknown_member(self, runner, course):
        result = runner.invoke(cli, ["add-member", str(course.id), "nobody@example.org"])
        assert result.exit_code != 0
        assert "No user" in result.output

    def test_purge_notifications(self, runner, uow, clock, student):
        clock.now = utcnow() - datetime.timedelta(days=365)
        Notification.create(uow, student, "Old")
        clock.now = utcnow()
        Notification.create(uow, student, "Recent")

        result = runner.invoke(cli, ["purge-notifications"])

        assert result.exit_code == 0, result.output
        assert "Purged 1 notification(s)" in result.output
