"""CLI commands for admin authentication."""

from __future__ import annotations

import functools

import click

from storefront.application.admin_login import AdminLoginHandler
from storefront.config import get_config
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import token_signer

TOKEN_ENVVAR = "STOREFRONT_ADMIN_TOKEN"
ADMIN_ACTOR = "admin"


def _login_handler() -> AdminLoginHandler:
    config = get_config()
    return AdminLoginHandler(
        signer=token_signer(),
        admin_password=config.admin_password,
        ttl_seconds=config.admin_token_ttl_seconds,
    )


def admin_required(command):
    """Add a ``--token`` option and reject the call unless it is a valid admin token."""

    @click.option(
        "--token",
        envvar=TOKEN_ENVVAR,
        default=None,
        help=f"Admin token (or set {TOKEN_ENVVAR}).",
    )
    @functools.wraps(command)
    def wrapper(*args, token: str | None, **kwargs):
        try:
            _login_handler().authorize(token)
        except DomainException as exc:
            raise click.ClickException(str(exc))
        return command(*args, **kwargs)

    return wrapper


@click.command("login")
@click.option("--password", prompt=True, hide_input=True, help="Admin password.")
def admin_login(password: str) -> None:
    """Exchange the admin password for a signed token."""
    try:
        session = _login_handler().handle(password)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    hours = session.expires_in_seconds // 3600
    click.echo(session.token)
    click.echo(f"Token valid for {hours}h. export {TOKEN_ENVVAR}=<token>", err=True)
