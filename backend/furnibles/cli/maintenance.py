"""Flask CLI commands for periodic marketplace housekeeping."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from furnibles.api.revocation import blacklist_store
from furnibles.services._shared.config import MarketplaceConfig
from furnibles.services.maintenance.service import MaintenanceService

LOGGER = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    """Raise logging verbosity for maintenance jobs when requested."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.getLogger("furnibles.services").setLevel(level)
    LOGGER.setLevel(level)


def _service() -> MaintenanceService:
    return MaintenanceService(
        blacklist_store=blacklist_store(),
        cfg=MarketplaceConfig.from_mapping(current_app.config),
    )


def _run(label: str, job) -> None:
    try:
        count = job()
    except Exception as exc:  # pragma: no cover - CLI safeguard
        raise click.ClickException(f"{label} failed: {exc}") from exc
    click.echo(f"{label}: {count}")


@click.group("maintenance")
@click.option("--verbose", is_flag=True, help="Enable verbose logging for maintenance jobs.")
def maintenance_cli(verbose: bool) -> None:
    """Housekeeping over revoked tokens, unpaid orders and download links."""
    _configure_logging(verbose)


@maintenance_cli.command("purge-blacklist")
@with_appcontext
def purge_blacklist_command() -> None:
    """Delete revocation entries whose token has expired."""
    _run("Purged blacklist entries", _service().purge_blacklist)


@maintenance_cli.command("cancel-stale-orders")
@with_appcontext
def cancel_stale_orders_command() -> None:
    """Cancel PENDING orders older than ``PENDING_ORDER_TTL``."""
    _run("Cancelled orders", _service().cancel_stale_orders)


@maintenance_cli.command("expire-downloads")
@with_appcontext
def expire_downloads_command() -> None:
    """Deactivate download tokens past their expiry."""
    _run("Deactivated download tokens", _service().expire_downloads)


@maintenance_cli.command("run-all")
@with_appcontext
def run_all_command() -> None:
    """Run every maintenance job, each in its own transaction."""
    try:
        report = _service().run_all()
    except Exception as exc:  # pragma: no cover - CLI safeguard
        raise click.ClickException(f"Maintenance failed: {exc}") from exc
    click.echo(f"Purged blacklist entries: {report.purged_blacklist_entries}")
    click.echo(f"Cancelled orders: {report.cancelled_orders}")
    click.echo(f"Deactivated download tokens: {report.deactivated_downloads}")
