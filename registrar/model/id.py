from __future__ import annotations

import typing as t

import annotated_types as ant
import pydantic as p
import pydantic_core.core_schema as core_schema
import shortuuid

KeyLength: t.Final[int] = 22


class ShortUUIDKey(str):
    """A typed, prefixed identifier such as ``cohort$<shortuuid>``.

    Only the bare shortuuid is stored; the prefix keeps ids of different
    entities from being mixed up in logs, on the command line and in code.
    """

    prefix: t.ClassVar[str]
    separator: t.ClassVar[str]

    @p.validate_call
    def __init_subclass__(cls, prefix: t.Annotated[str, ant.MinLen(4)], separator: t.Annotated[str, ant.Len(1)] = "$"):
        super().__init_subclass__()
        cls.prefix = prefix
        cls.separator = separator

    def __new__(cls, s: str | None = None, /, key: t.Annotated[str, ant.Len(KeyLength)] | None = None) -> t.Self:
        """Build a key from its prefixed form ``s``, or from a bare ``key``.

        A bare key is trusted as is; it is how keys come back from the store.
        With neither argument a fresh random key is generated.
        """
        if key is None:
            key = cls.parse(s) if s is not None else shortuuid.uuid()
        return super().__new__(cls, f"{cls.prefix}{cls.separator}{key}")

    @classmethod
    def parse(cls, s: str) -> str:
        """The bare key of the prefixed form ``s``.

        Raises:
            ValueError: If ``s`` has the wrong prefix, length or alphabet
        """
        head = cls.prefix + cls.separator
        if not s.startswith(head):
            raise ValueError(f"invalid {cls.__name__}: key must begin with {head}")
        key = s[len(head) :]
        if len(key) != KeyLength:
            raise ValueError(f"invalid {cls.__name__}: key must have length {KeyLength}")
        alphabet = shortuuid.get_alphabet()
        if any(c not in alphabet for c in key):
            raise ValueError(f"invalid {cls.__name__}: key must comprise only {alphabet}")
        return key

    @classmethod
    def derive(cls, *parts: str) -> t.Self:
        """Deterministic key (name-based UUID) for the given parts."""
        return cls(key=shortuuid.uuid(name="/".join(parts)))

    @classmethod
    def validate_str(cls, v: str | None, _: p.ValidationInfo) -> ShortUUIDKey | None:
        return v if v is None or isinstance(v, cls) else cls(v)

    @classmethod
    def __get_pydantic_core_schema__(cls, src: t.Any, handler: p.GetCoreSchemaHandler) -> core_schema.CoreSchema:
        from_str = core_schema.with_info_after_validator_function(cls.validate_str, schema=core_schema.str_schema())
        return core_schema.json_or_python_schema(
            json_schema=from_str,
            python_schema=core_schema.union_schema([core_schema.is_instance_schema(cls), from_str]),
            serialization=core_schema.plain_serializer_function_ser_schema(cls.__str__),
        )

    @classmethod
    def __get_pydantic_json_schema__(cls, src: t.Any, handler: p.GetJsonSchemaHandler) -> p.json_schema.JsonSchemaValue:
        return {"type": "string", "pattern": f"^{cls.prefix}\\{cls.separator}"}

    @property
    def key(self) -> str:
        return self[len(self.prefix) + len(self.separator) :]

    def __hash__(self) -> int:
        return str.__hash__(self)

    def __str__(self) -> str:
        return str.__str__(self)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.key}>"


# fmt: off
class UserID(ShortUUIDKey, prefix="user"): ...
class CohortID(ShortUUIDKey, prefix="cohort"): ...
class CourseID(ShortUUIDKey, prefix="course"): ...
class ActivityID(ShortUUIDKey, prefix="activity"): ...
class SubmissionID(ShortUUIDKey, prefix="submission"): ...
class EnrollmentID(ShortUUIDKey, prefix="enrollment"): ...
# fmt: on
