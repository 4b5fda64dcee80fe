from __future__ import annotations

import base64
import datetime
import decimal
import enum
import functools
import json as pyjson
import pathlib
import typing as t
import uuid

import pydantic as p

JSONPrimitive = str | int | float | bool | None
JSONValue = JSONPrimitive | list["JSONValue"] | dict[str, "JSONValue"]


# encoders
def encode_bytes(obj: bytes) -> str:
    return base64.b64encode(obj).decode("utf8")


def encode_set(obj: set[t.Any] | frozenset[t.Any]) -> list[t.Any]:
    return sorted(obj) if all(isinstance(o, str) for o in obj) else list(obj)


def encode_datetime(obj: datetime.datetime) -> str:
    return obj.isoformat()


def encode_date(obj: datetime.date) -> str:
    return obj.isoformat()


def encode_decimal(obj: decimal.Decimal) -> str:
    return str(obj)


def encode_enum(obj: enum.Enum) -> str:
    return obj.value


def encode_path(obj: pathlib.Path) -> str:
    return str(obj)


def encode_pydantic(obj: p.BaseModel) -> dict[str, JSONValue]:
    return obj.model_dump(mode="json")


def encode_timedelta(obj: datetime.timedelta) -> float:
    return obj.total_seconds()


def encode_uuid(obj: uuid.UUID) -> str:
    return str(obj)


@functools.cache  # noqa: E302
def _encoder_map() -> dict[type, t.Callable[[t.Any], JSONValue]]:
    return {
        bytes: encode_bytes,
        datetime.date: encode_date,
        datetime.datetime: encode_datetime,
        datetime.timedelta: encode_timedelta,
        decimal.Decimal: encode_decimal,
        enum.Enum: encode_enum,
        pathlib.Path: encode_path,
        set: encode_set,
        frozenset: encode_set,
        uuid.UUID: encode_uuid,
    }


# stdlib-compatible JSON encoder
class JSONEncoder(pyjson.JSONEncoder):
    def get_encoders(self) -> dict[type, t.Callable[[t.Any], JSONValue]]:
        return _encoder_map()

    def default(self, o: t.Any) -> JSONValue:
        if hasattr(o, "model_dump"):
            return encode_pydantic(o)

        encoders = self.get_encoders()
        for tp in encoders:
            if isinstance(o, tp):
                encoder = encoders[tp]
                return encoder(o)

        return pyjson.JSONEncoder.default(self, o)


def dumps(
    obj: t.Any,
    *,
    skipkeys: bool = False,
    ensure_ascii: bool = True,
    check_circular: bool = True,
    allow_nan: bool = True,
    cls: type[pyjson.JSONEncoder] = JSONEncoder,
    indent: int | str | None = None,
    separators: tuple[str, str] | None = None,
    default: t.Callable[[t.Any], JSONValue] | None = None,
    sort_keys: bool = False,
    **kw: t.Any,
) -> str:
    return pyjson.dumps(
        obj,
        skipkeys=skipkeys,
        ensure_ascii=ensure_ascii,
        check_circular=check_circular,
        allow_nan=allow_nan,
        cls=cls,
        indent=indent,
        separators=separators,
        default=default,
        sort_keys=sort_keys,
        **kw,
    )


def loads(
    s: str | bytes | bytearray,
    *,
    cls: type[pyjson.JSONDecoder] | None = None,
    object_hook: t.Callable[[dict[t.Any, t.Any]], t.Any] | None = None,
    parse_float: t.Callable[[str], t.Any] | None = None,
    parse_int: t.Callable[[str], t.Any] | None = None,
    parse_constant: t.Callable[[str], t.Any] | None = None,
    object_pairs_hook: t.Callable[[list[tuple[t.Any, t.Any]]], t.Any] | None = None,
    **kwds: t.Any,
) -> t.Any:
    """implemented for parity's sake"""
    return pyjson.loads(
        s,
        cls=cls,
        object_hook=object_hook,
        parse_float=parse_float,
        parse_int=parse_int,
        parse_constant=parse_constant,
        object_pairs_hook=object_pairs_hook,
        **kwds,
    )
