import logging
import click
import uvicorn
from dotenv import load_dotenv

# settings are read on import, so the .env file has to be loaded first
load_dotenv()

from coursesite_backend.database import get_engine
from coursesite_backend.model import Base
from .admin import add_member, create_user, purge_notifications


@click.group()
@click.option("--debug", is_flag=True, default=False)
def cli(debug):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


@click.command()
def init_db():
    Base.metadata.create_all(bind=get_engine())
    click.echo("Database tables created")


@click.command()
@click.option("--host", default="0.0.0.0")
@click.option("--port", default=8000, type=int)
@click.option("--reload", is_flag=True, default=False)
def serve(host, port, reload):
    uvicorn.run("coursesite_backend.server:app", host=host, port=port, reload=reload, workers=1)


cli.add_command(init_db, "init-db")
cli.add_command(create_user, "create-user")
cli.add_command(add_member, "add-member")
cli.add_command(purge_notifications, "purge-notifications")
cli.add_command(serve, "serve")

if __name__ == '__main__':
    cli()
