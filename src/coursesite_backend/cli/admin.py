import click
from contextlib import contextmanager

from coursesite_backend.database import get_db
from coursesite_backend.domain import Course, Notification, User
from coursesite_backend.unit_of_work import UnitOfWork


@contextmanager
def unit_of_work():
    db = next(get_db())
    try:
        with UnitOfWork(db) as uow:
            yield uow
    finally:
        db.close()


@click.command()
@click.option("--first-name", "-f", "first_name", prompt=True)
@click.option("--last-name", "-l", "last_name", prompt=True)
@click.option("--email", "-e", "email", prompt=True)
@click.option("--password", "-p", "password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--admin", "is_admin", is_flag=True, default=False, help="Grant administrator rights")
def create_user(first_name, last_name, email, password, is_admin):

    with unit_of_work() as uow:
        user = User.create(uow, first_name, last_name, email, password, is_admin=is_admin)

    click.echo(f"Created user {user.id} <{user.email}>{' (admin)' if is_admin else ''}")


@click.command()
@click.argument("course_id", type=int)
@click.argument("email")
@click.option("--professor", is_flag=True, default=False, help="Add as professor instead of student")
def add_member(course_id, email, professor):

    with unit_of_work() as uow:
        user = User.from_email(uow, email)
        if user.is_guest:
            raise click.ClickException(f"No user with email address {email}")

        course = Course.from_id(uow, course_id)
        if professor:
            course.add_professor(user)
        else:
            course.add_student(user)

    click.echo(f"{user.full_name} is now a {'professor' if professor else 'student'} of {course.code}")


@click.command()
def purge_notifications():

    with unit_of_work() as uow:
        count = Notification.purge(uow)

    click.echo(f"Purged {count} notification(s)")
