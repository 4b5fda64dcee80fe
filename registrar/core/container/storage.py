from __future__ import annotations

import typing as t
from pathlib import Path

import alembic.config
import sqlalchemy
import sqlalchemy.event
import sqlalchemy.orm
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Container, Factory, Object, Provider, Resource, Singleton
from sqlalchemy.engine.url import URL as DSN

import registrar.lib.json as json

from ..config.secrets import PostgresqlSecrets
from ..config.storage import PostgresqlSettings, StorageSettings
from ..di import NotReady
from ..provider import LoggingProvider


def make_dsn(config: PostgresqlSettings, secrets: PostgresqlSecrets) -> DSN:
    return DSN.create(
        config.driver,
        database=config.database,
        username=secrets.username.get_secret_value() if secrets.username else None,
        password=secrets.password.get_secret_value() if secrets.password else None,
        port=config.port,
        host=str(config.host) if config.host else None,
    )


def provide_alembic_conf(
    migration_path: Path, config: PostgresqlSettings, secrets: PostgresqlSecrets, root: Path | NotReady
) -> alembic.config.Config:
    if isinstance(root, NotReady):
        raise RuntimeError("root path is unavailable")

    dsn = make_dsn(config, secrets)
    escaped_str = dsn.render_as_string(hide_password=False).replace("%", "%%")

    ac = alembic.config.Config()
    ac.set_main_option("script_location", str(root / migration_path))
    ac.set_section_option("alembic", "sqlalchemy.url", escaped_str)
    ac.set_section_option("alembic", "file_template", "%%(year)d-%%(month).2d-%%(day).2d-%%(slug)s-%%(rev)s")
    return ac


def provide_engine(
    config: PostgresqlSettings, secrets: PostgresqlSecrets, logging: LoggingProvider
) -> sqlalchemy.Engine:
    logger = logging.get_logger()

    connect_args: dict[str, t.Any] = {"connect_timeout": config.connect_timeout}
    if config.statement_timeout_ms:
        connect_args["options"] = f"-c statement_timeout={config.statement_timeout_ms}"

    engine = sqlalchemy.create_engine(
        make_dsn(config, secrets),
        connect_args=connect_args,
        pool_pre_ping=True,
        json_serializer=json.dumps,
        json_deserializer=json.loads,
    )
    sqlalchemy.event.listen(engine, "connect", register_timezone)
    logger.info(
        "initialized SQLAlchemy engine",
        extra={
            "driver": config.driver,
            "database": config.database,
            "host": config.host,
            "port": config.port,
            "statement_timeout_ms": config.statement_timeout_ms,
        },
    )
    return engine


def provide_session(engine: sqlalchemy.Engine) -> sqlalchemy.orm.Session:
    """Create a new session. Sessions start outside a transaction; callers open one with ``session.begin()``."""
    maker = sqlalchemy.orm.sessionmaker(engine, expire_on_commit=False, autoflush=False)
    return maker(autobegin=False)


class PersistentContainer(DeclarativeContainer):
    config = Configuration()
    secrets = Configuration()
    logging: Provider[LoggingProvider] = Resource()
    root: Provider[Path | NotReady] = Object()

    alembic_config: Provider[alembic.config.Config] = Singleton(
        provide_alembic_conf,
        migration_path=Path("migrations/"),
        config=config.postgresql.as_(PostgresqlSettings),
        secrets=secrets.postgresql.as_(PostgresqlSecrets),
        root=root,
    )
    engine: Provider[sqlalchemy.Engine] = Singleton(
        provide_engine,
        config=config.postgresql.as_(PostgresqlSettings),
        secrets=secrets.postgresql.as_(PostgresqlSecrets),
        logging=logging,
    )
    session: Provider[sqlalchemy.orm.Session] = Factory(provide_session, engine=engine)


class StorageContainer(DeclarativeContainer):
    config: Provider[StorageSettings] = Configuration(strict=True)
    secrets: Provider[StorageSettings] = Configuration(strict=True)
    logging: Provider[LoggingProvider] = Resource()
    root: Provider[Path | NotReady] = Object()

    persistent: Provider[PersistentContainer] = Container(
        PersistentContainer, config=config.persistent, secrets=secrets, logging=logging, root=root
    )


def register_timezone(dbapi_conn: t.Any, _: t.Any) -> None:
    """Set connection timezone to UTC so closed_at/reopened_at come back as aware UTC datetimes."""
    cursor = dbapi_conn.cursor()
    cursor.execute("SET TIMEZONE TO 'UTC'")
    cursor.close()
