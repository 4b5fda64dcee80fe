import datetime
import typing as t

from sqlalchemy.engine import Dialect
from sqlalchemy.sql.type_api import TypeDecorator
from sqlalchemy.types import DateTime, JSON, String

from registrar.model.id import ShortUUIDKey


class ShortUUIDKeyType(TypeDecorator[ShortUUIDKey]):
    impl = String
    cache_ok = True

    def __init__(self, key_type: type[ShortUUIDKey]):
        self.key_type = key_type
        super().__init__(22)  # length of shortuuid

    def process_bind_param(self, value: ShortUUIDKey | None, dialect: Dialect) -> str | None:
        if value is not None:
            return value.key
        return value

    def process_result_value(self, value: str | None, dialect: Dialect) -> ShortUUIDKey | None:
        if value is not None:
            value = self.key_type(key=value)
        return value


class ShortUUIDKeyListType(TypeDecorator[list[ShortUUIDKey]]):
    """A JSON array of bare keys, rehydrated as typed keys on read."""

    impl = JSON
    cache_ok = True

    def __init__(self, key_type: type[ShortUUIDKey]):
        self.key_type = key_type
        super().__init__()

    def process_bind_param(self, value: t.Iterable[ShortUUIDKey] | None, dialect: Dialect) -> list[str] | None:
        if value is None:
            return None
        return sorted(v.key for v in value)

    def process_result_value(self, value: list[str] | None, dialect: Dialect) -> list[ShortUUIDKey] | None:
        if value is None:
            return None
        return [self.key_type(key=v) for v in value]


class UTCDateTime(TypeDecorator[datetime.datetime]):
    """Timestamps are written as UTC and always read back timezone-aware."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime.datetime | None, dialect: Dialect) -> datetime.datetime | None:
        if value is not None and value.tzinfo is not None:
            return value.astimezone(datetime.UTC)
        return value

    def process_result_value(self, value: datetime.datetime | None, dialect: Dialect) -> datetime.datetime | None:
        if value is not None and value.tzinfo is None:
            # backends without a timezone-aware type hand back naive UTC
            return value.replace(tzinfo=datetime.UTC)
        return value
