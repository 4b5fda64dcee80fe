"""CLI commands for migrating the closure store schema with alembic."""

from __future__ import annotations

import alembic.command
import alembic.config

import registrar.lib.cli as click
from registrar.core import di

AlembicConfig = di.Provide["storage.persistent.alembic_config"]

sql_option = click.option(
    "--sql", is_flag=True, default=False, help="Print the migration SQL instead of running it against the store"
)


@click.group("schema")
def schema():
    """Inspect and migrate the database schema."""
    ...


@schema.command("current")
@click.option("--verbose", "-v", is_flag=True, default=False)
@di.inject
def schema_current(verbose: bool, alembic_conf: alembic.config.Config = AlembicConfig) -> None:
    """Show the revision the store is at."""
    alembic.command.current(alembic_conf, verbose=verbose)


@schema.command("history")
@click.option("--verbose", "-v", is_flag=True, default=False)
@di.inject
def schema_history(verbose: bool, alembic_conf: alembic.config.Config = AlembicConfig) -> None:
    alembic.command.history(alembic_conf, verbose=verbose, indicate_current=True)


@schema.command("up")
@click.argument("revision", default="head")
@sql_option
@di.inject
def schema_up(revision: str, sql: bool, alembic_conf: alembic.config.Config = AlembicConfig) -> None:
    """Upgrade to REVISION, the latest by default."""
    alembic.command.upgrade(alembic_conf, revision, sql=sql)


@schema.command("down")
@click.argument("revision")
@sql_option
@di.inject
def schema_down(revision: str, sql: bool, alembic_conf: alembic.config.Config = AlembicConfig) -> None:
    """Downgrade to REVISION. Closure history in dropped tables is lost."""
    if not sql:
        click.confirm(f"Downgrade the store to {revision}?", abort=True)
    alembic.command.downgrade(alembic_conf, revision, sql=sql)


@schema.command("stamp")
@click.argument("revision")
@di.inject
def schema_stamp(revision: str, alembic_conf: alembic.config.Config = AlembicConfig) -> None:
    """Record REVISION as current without running any migration."""
    alembic.command.stamp(alembic_conf, revision)


@schema.command("revision")
@click.argument("message")
@click.option("--autogenerate", is_flag=True, default=False, help="Diff the table metadata against the store")
@di.inject
def schema_revision(message: str, autogenerate: bool, alembic_conf: alembic.config.Config = AlembicConfig) -> None:
    """Create a new migration script."""
    alembic.command.revision(alembic_conf, message, autogenerate=autogenerate)
