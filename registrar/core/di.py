from __future__ import annotations

__all__ = [
    "Container",
    "NotReady",
    "Provider",
    "Provide",
    "inject",
    "providers",
    "containers",
]

import typing as t

import dependency_injector.containers as containers
import dependency_injector.providers as providers
import dependency_injector.wiring as wiring
from dependency_injector.containers import Container
from dependency_injector.providers import Provider
from dependency_injector.wiring import Provide

P = t.ParamSpec("P")
TReturn = t.TypeVar("TReturn")


def inject(fn: t.Callable[P, TReturn]) -> t.Callable[P, TReturn]:  # noqa: E302
    """Mark ``fn`` for wiring; ``Provide[...]`` defaults are filled in once its module is wired."""
    return wiring.inject(fn)


class NotReady(object):
    """Placeholder for container values that only exist after ``boot()``."""

    _instance: t.ClassVar[NotReady | None] = None

    def __new__(cls) -> NotReady:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "<NotReady>"
