from __future__ import annotations

import typing as t

import pydantic as p

from .base import BaseSettings


class StorageSettings(BaseSettings):
    persistent: PersistentSettings


class PersistentSettings(BaseSettings):
    postgresql: PostgresqlSettings


class PostgresqlSettings(BaseSettings):
    host: p.IPvAnyAddress | str | None = None
    port: int = 5432
    database: str
    driver: t.Literal["postgresql+psycopg"] = "postgresql+psycopg"
    # every round trip to the store is bounded; failures surface as StoreUnavailable
    connect_timeout: int = p.Field(default=10, ge=1)
    statement_timeout_ms: int = p.Field(default=15_000, ge=0)
