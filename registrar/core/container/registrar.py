from __future__ import annotations

import datetime
import os
import sys
import types
from pathlib import Path

import pydantic as p
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Container, Factory, Object, Provider, Resource, Singleton

import registrar
from registrar.grading import GradingService
from registrar.model import BaseModel, DeploymentEnvironment

from ..config import GradingSettings, Secrets, Settings
from ..di import NotReady
from ..provider import LoggingProvider, TimestampProvider
from .storage import StorageContainer


class BootConfiguration(BaseModel):
    debug: bool
    env: DeploymentEnvironment
    config_root: p.AnyUrl
    secrets_path: p.AnyUrl | None = None
    override: tuple[str, ...]


class RegistrarContainer(DeclarativeContainer):
    config: Configuration = Configuration()
    secrets: Configuration = Configuration()

    debug: Provider[bool] = Singleton(bool)
    env: Provider[DeploymentEnvironment] = Singleton(DeploymentEnvironment)
    root: Object[NotReady | Path] = Object(NotReady())

    logging: Provider[LoggingProvider] = Resource(LoggingProvider, config=config.logging, debug=debug)
    storage: Provider[StorageContainer] = Container(
        StorageContainer, config=config.storage, secrets=secrets, logging=logging, root=root
    )

    utcnow: Provider[TimestampProvider] = Object(lambda: datetime.datetime.now(datetime.UTC))

    grading: Provider[GradingService] = Factory(
        GradingService,
        session=storage.persistent.session,
        utcnow=utcnow,
        settings=config.grading.as_(GradingSettings),
    )

    _boot_config: Provider[BootConfiguration | NotReady] = Object(NotReady())

    @staticmethod
    def boot(
        ct: RegistrarContainer,
        /,
        debug: bool,
        env: DeploymentEnvironment,
        config_root: p.FileUrl,
        secrets_path: p.AnyUrl | None = None,
        override: tuple[str, ...] | None = None,
        wiring: tuple[str | types.ModuleType, ...] | None = None,
    ):
        if config_root.scheme != "file":
            raise ValueError(f"unsupported scheme for config root: {config_root.scheme}")
        ps = Settings(env=env, root=config_root, override=override or ())
        ct.config.from_pydantic(ps)
        ct.wire(packages=["registrar.storage", "registrar.grading"])
        if wiring:
            ct.wire(modules=wiring)
        if imported := [mod for name, mod in sys.modules.items() if name.startswith("registrar.cli.")]:
            ct.wire(modules=imported)

        logger = ct.logging().get_logger()

        for ov in ps.override:
            k, v = ov.split("=", 1)
            logger.info(
                "overriding configuration parameter",
                extra={
                    "key": k,
                    "value": v,
                },
            )

        ct.debug.override(debug)
        ct.env.override(env)
        ct.root.override(Path(os.path.dirname(registrar.__file__)).parent)
        if debug:
            ct.logging().capture_warnings(True)

        secrets = Secrets(env=env, root=secrets_path or config_root)
        ct.secrets.from_pydantic(secrets)

        logger.debug(
            "configuration finished",
            extra={
                "config": str(config_root),
                "secrets": str(secrets_path or config_root),
            },
        )
        ct._boot_config.override(
            BootConfiguration(
                debug=debug, env=env, config_root=config_root, secrets_path=secrets_path, override=override or ()
            )
        )
