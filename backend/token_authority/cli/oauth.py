"""Flask CLI commands for OAuth client registration and blacklist upkeep."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import click
from flask.cli import with_appcontext
from sqlalchemy.exc import IntegrityError

from token_authority.core.security import generate_client_secret, hash_client_secret
from token_authority.models.oauth_client import ClientType, OAuthClient
from token_authority.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

LOGGER = logging.getLogger(__name__)

CLIENT_TYPES = [t.value for t in ClientType]


@click.group("oauth")
@click.option("--verbose", is_flag=True, help="Enable verbose logging.")
def oauth_cli(verbose: bool) -> None:
    """Manage OAuth clients and the revocation blacklist."""
    if verbose:
        logging.getLogger("token_authority").setLevel(logging.DEBUG)


@oauth_cli.command("create-client")
@click.option("--client-id", required=True, help="Public client identifier.")
@click.option(
    "--type",
    "client_type",
    type=click.Choice(CLIENT_TYPES),
    default=ClientType.CONFIDENTIAL.value,
    show_default=True,
)
@click.option("--secret", default=None, help="Secret for confidential clients; generated when omitted.")
@click.option("--name", default=None, help="Human-readable client name.")
@click.option(
    "--secret-expires-in",
    "secret_days",
    type=click.IntRange(min=1),
    default=None,
    help="Days until the confidential secret stops authenticating.",
)
@with_appcontext
def create_client_command(
    client_id: str, client_type: str, secret: str | None, name: str | None, secret_days: int | None
) -> None:
    """Register a new OAuth client."""
    kind = ClientType(client_type)
    generated = False
    if kind is ClientType.PUBLIC:
        if secret or secret_days:
            raise click.UsageError("Public clients cannot have a secret.")
        secret_hash = None
        secret_expires_at = None
    else:
        if not secret:
            secret = generate_client_secret()
            generated = True
        secret_hash = hash_client_secret(secret)
        secret_expires_at = (
            datetime.now(timezone.utc) + timedelta(days=secret_days) if secret_days else None
        )

    try:
        with SQLAlchemyUnitOfWork() as uow:
            if uow.clients.get_by_client_id(client_id) is not None:
                raise click.ClickException(f"Client {client_id!r} already exists.")
            uow.clients.add(
                OAuthClient(
                    client_id=client_id,
                    client_type=kind,
                    client_secret_hash=secret_hash,
                    client_secret_expires_at=secret_expires_at,
                    name=name,
                )
            )
    except IntegrityError as exc:
        raise click.ClickException(f"Could not create client {client_id!r}: {exc.orig}") from exc

    LOGGER.info("OAuth client created", extra={"event": "oauth.client.created", "client_id": client_id})
    click.echo(f"Created {kind.value} client {client_id}")
    if secret_expires_at is not None:
        click.echo(f"client_secret_expires_at: {secret_expires_at.isoformat()}")
    if generated:
        # Shown once; only the hash is stored.
        click.echo(f"client_secret: {secret}")


@oauth_cli.command("deactivate-client")
@click.argument("client_id")
@with_appcontext
def deactivate_client_command(client_id: str) -> None:
    """Disable a client so it can no longer call either endpoint.

    Tokens already issued to it keep their state; revoke them separately.
    """
    with SQLAlchemyUnitOfWork() as uow:
        client = uow.clients.get_by_client_id(client_id)
        if client is None:
            raise click.ClickException(f"Client {client_id!r} not found.")
        client.is_active = False
    LOGGER.info("OAuth client deactivated", extra={"event": "oauth.client.deactivated", "client_id": client_id})
    click.echo(f"Deactivated client {client_id}")


@oauth_cli.command("purge-blacklist")
@with_appcontext
def purge_blacklist_command() -> None:
    """Delete blacklist entries whose tokens have expired."""
    from token_authority.api.deps import revocation_service

    removed = revocation_service().purge_expired_blacklist()
    click.echo(f"Purged {removed} expired blacklist entries")
