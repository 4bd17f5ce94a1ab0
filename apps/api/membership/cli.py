"""Operator commands that run outside the HTTP API."""

import click

from membership.core.config import settings
from membership.core.db import SessionLocal
from membership.core.logging import configure_logging


@click.group()
def cli() -> None:
    """AMPA membership administration."""
    configure_logging(settings)


@cli.command("bootstrap-superadmin")
@click.option("--username", prompt=True, help="Login name of the superadmin")
@click.option("--name", prompt=True, help="Display name")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
def bootstrap_superadmin(username: str, name: str, password: str) -> None:
    """Create the first SUPERADMIN, or promote and reset an existing account."""
    from membership.services.users import bootstrap_superadmin as seed

    username, name = username.strip(), name.strip()
    if not username or not name or not password:
        raise click.BadParameter("username, name and password must not be blank")

    with SessionLocal() as db:
        user = seed(db, username, name, password)
        click.echo(f"Superadmin ready: {user.username} (id {user.id})")


@cli.command("purge-sessions")
def purge_sessions() -> None:
    """Drop expired login sessions."""
    from membership.services.sessions import purge_expired_sessions

    with SessionLocal() as db:
        removed = purge_expired_sessions(db)
        db.commit()
    click.echo(f"Removed {removed} expired session(s)")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
