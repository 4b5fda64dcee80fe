from __future__ import annotations

import pydantic as p
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from registrar.model import BaseModel, DeploymentEnvironment

from .base import BaseSecrets
from .source import YAMLSecretsSource


class PostgresqlSecrets(BaseSecrets):
    username: p.Secret[str] | None = None
    password: p.Secret[str] | None = None


class Secrets(BaseSecrets, BaseModel):  # pyright: ignore [reportIncompatibleVariableOverride]
    """Credentials; ``REGISTRAR_POSTGRESQL__PASSWORD`` style variables beat ``secrets.yaml``."""

    model_config = SettingsConfigDict(env_prefix="REGISTRAR_", env_nested_delimiter="__", extra="ignore")

    root: p.AnyUrl
    env: DeploymentEnvironment

    postgresql: PostgresqlSecrets = PostgresqlSecrets()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, env_settings, YAMLSecretsSource(settings_cls)
