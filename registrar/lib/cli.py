from __future__ import annotations

import enum
import pathlib
import typing as t

import click
import pydantic as p
from click import *  # noqa: F401, F403 # pyright: ignore [reportWildcardImportFromLibrary]

from registrar.model import ShortUUIDKey

# This module is a thin wrapper around Click, which is why we import `click.*`
# into our namespace, adding the parameter types our commands share.


class EnumType(click.ParamType):
    """specify click params to be members of an enum"""

    def __init__(self, enum: t.Type[enum.Enum]):
        self.enum = enum
        self.name = self.enum_name

    @property
    def values(self) -> list[str]:
        return [e.value for e in self.enum]

    @property
    def enum_name(self) -> str:
        v = list(self.enum).pop()
        return v.__class__.__name__

    def convert(
        self, value: str | enum.Enum | None, param: click.Parameter | None, ctx: click.Context | None
    ) -> enum.Enum | None:
        if value is None:
            return None

        try:
            return self.enum(value)
        except ValueError:
            self.fail(f"valid {self.enum_name} values {self.values}")

    def __repr__(self) -> str:
        return self.enum_name


class KeyParamType(click.ParamType):
    """A prefixed short-UUID key, e.g. ``cohort$...``"""

    def __init__(self, key_type: type[ShortUUIDKey]):
        self.key_type = key_type
        self.name = key_type.__name__

    def convert(
        self, value: str | ShortUUIDKey | None, param: click.Parameter | None, ctx: click.Context | None
    ) -> ShortUUIDKey | None:
        if value is None or isinstance(value, self.key_type):
            return value

        try:
            return self.key_type(value.strip())
        except ValueError as e:
            self.fail(str(e), param, ctx)

    def __repr__(self) -> str:
        return self.name


class AssignmentParamType(click.ParamType):
    """``KEY=NUMBER`` pairs, e.g. ``user$...=91.5``"""

    name = "KEY=GRADE"

    def __init__(self, key_type: type[ShortUUIDKey]):
        self.key_type = key_type

    def convert(
        self, value: str | tuple[ShortUUIDKey, float], param: click.Parameter | None, ctx: click.Context | None
    ) -> tuple[ShortUUIDKey, float]:
        if isinstance(value, tuple):
            return value

        if "=" not in value:
            self.fail(f"{value!r} is not of the form KEY=GRADE", param, ctx)
        k, v = [s.strip() for s in value.split("=", 1)]
        try:
            return self.key_type(k), float(v)
        except ValueError as e:
            self.fail(f"{value!r}: {e}", param, ctx)


class URIParamType(click.ParamType):
    """
    Accept URIs as parameters, with optional existence enforcement on
    file:// URIs

    Arguments:

        - `file_ok`: (default `True`) param will accept a filesystem path as
          an argument and convert to a `file://` URI
        - `dir_ok`: (default `False`) if parsing results in `file://` URI,
          enforce path is not a directory
        - `file_exists`: (default `True`) if parsing results in `file://` URI,
          enforce that the path referenced exists
    """

    file_ok: bool
    dir_ok: bool
    file_exists: bool
    name: str

    def __init__(self, file_ok: bool = True, dir_ok: bool = False, file_exists: bool = True):
        self.file_ok = file_ok
        self.dir_ok = dir_ok
        self.file_exists = file_exists
        self.name = "URI OR PATH" if file_ok else "URI"

    def convert(
        self, value: str | pathlib.Path | p.AnyUrl | None, param: click.Parameter | None, ctx: click.Context | None
    ) -> p.FileUrl | p.AnyUrl | None:
        if value is None:
            return None

        if isinstance(value, p.AnyUrl):
            u = value
        elif isinstance(value, pathlib.Path) or "://" not in value:
            u = p.FileUrl(f"file://{pathlib.Path(value).absolute()}")
        else:
            u = p.AnyUrl(value)

        if u.scheme == "file":
            if self.file_ok:
                # promote paths to file:// URIs
                if u.path is None:
                    self.fail("file path not specified")
                path = pathlib.Path(u.path)
                if self.file_exists:
                    if not path.exists():
                        self.fail(f"{value}: no such file or directory", param, ctx)
                    if path.is_dir() and not self.dir_ok:
                        self.fail("directory path not accepted", param, ctx)
                return p.FileUrl(f"file://{path.absolute()}")
            else:
                self.fail("file URL not allowed")
        return u
