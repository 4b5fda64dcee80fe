import importlib
import sys
import types
import typing as t

from sqlalchemy.orm import Session, SessionTransaction

__all__ = [
    "Session",
    "SessionTransaction",
    # Repository modules
    "user",
    "cohort",
    "activity",
    "submission",
    "closure",
    "mentor",
]

if t.TYPE_CHECKING:
    from . import activity, closure, cohort, mentor, submission, user


def __getattr__(name: str) -> types.ModuleType:
    if name in __all__:
        module = importlib.import_module(f"{__name__}.{name}")
        setattr(sys.modules[__name__], name, module)
        return module
    raise AttributeError(f"module {__name__} has no attribute {name}")
