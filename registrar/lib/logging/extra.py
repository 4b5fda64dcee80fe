import importlib
import json
import logging
import string
import textwrap
import typing as t

import pygments
from pygments.formatters import Terminal256Formatter
from pygments.lexers.data import JsonLexer  # pyright: ignore [reportMissingTypeStubs]
from pygments.style import Style

from .json import JSONEncoder
from .style import LogStyle

ReservedKeys = {
    "exception",
    "args",
    "asctime",
    "created",
    "exc_info",
    "exc_text",
    "filename",
    "funcName",
    "id",
    "levelname",
    "levelno",
    "lineno",
    "log_color",
    "module",
    "msecs",
    "message",
    "msg",
    "name",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "stack_info",
    "taskName",
    "thread",
    "threadName",
}


def resolve_formatter(base: type[logging.Formatter] | str) -> type[logging.Formatter]:
    if isinstance(base, str):
        module, _, name = base.rpartition(".")
        return getattr(importlib.import_module(module), name)
    return base


class ExtraFormatter(logging.Formatter):
    """Wraps another formatter and appends the record's ``extra`` fields as JSON.

    The JSON is syntax-highlighted only when the target stream is a TTY and the
    wrapped formatter was not configured with ``no_color``.
    """

    def __init__(
        self,
        base: type[logging.Formatter] | str,
        format: str | None = None,
        datefmt: str | None = None,
        indent: bool | None = True,
        pyg_style: type[Style] = LogStyle,
        style: t.Literal["%", "{", "$"] = "%",
        validate: bool = True,
        *,
        defaults: t.Any = None,
        **kwargs: t.Any,
    ):
        base_cls = resolve_formatter(base)
        self.base = base_cls(format, datefmt=datefmt, style=style, validate=validate, defaults=defaults, **kwargs)
        self.pyg_style = pyg_style
        self.indent = bool(indent)

    def format(self, record: logging.LogRecord) -> str:
        msg = record.getMessage()
        if "\n" in msg:
            formatted = self.base.format(record)
            idx = formatted.find(msg)
            indent = " " * len([c for c in formatted[:idx] if c in string.printable])
            line, *lines = msg.splitlines()
            body = textwrap.indent("\n".join(lines), prefix=indent)
            record.msg = record.message = f"{line}\n{body}"
            record.args = None
        message = self.base.format(record)

        d = record.__dict__
        extra = {k: d[k] for k in set(d.keys()) - ReservedKeys}

        if not extra:
            return message

        js = json.dumps(extra, sort_keys=True, indent=(4 if self.indent else None), cls=JSONEncoder)
        if self.should_color(record):
            hl = pygments.highlight  # pyright: ignore [reportUnknownMemberType, reportUnknownVariableType]
            ps = hl(js, JsonLexer(), Terminal256Formatter(style=self.pyg_style), None)
        else:
            ps = js
        return message + " " + ps.strip()

    def should_color(self, record: logging.LogRecord) -> bool:
        if getattr(self.base, "no_color", False):
            return False
        # colorlog's TTY formatter records whether its stream is a terminal
        stream = getattr(self.base, "stream", None)
        return bool(stream is not None and stream.isatty())

    def __getattr__(self, name: str) -> t.Any:
        return getattr(self.base, name)
