import typing as t

import pydantic as p
from pydantic_settings import BaseSettings as PydanticBaseSettings

from registrar.model import BaseModel


class _DictInit(object):
    def __init__(self, cf: dict[str, t.Any] | None = None, **kwargs: t.Any):
        # specifically allow initialization with a dict
        if cf is not None:
            kwargs = {**cf, **kwargs}
        super().__init__(**kwargs)


# NOTE: BaseModel comes last in the MRO so that its by_alias=True model_dump
#       wins over pydantic-settings' default
class BaseSettings(_DictInit, PydanticBaseSettings, BaseModel):  # pyright: ignore [reportIncompatibleVariableOverride]
    model_config = p.ConfigDict(extra="ignore")


class BaseSecrets(_DictInit, PydanticBaseSettings, BaseModel):  # pyright: ignore [reportIncompatibleVariableOverride]
    model_config = p.ConfigDict(extra="ignore")
