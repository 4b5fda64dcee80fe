import datetime
import inspect
import logging.config
import typing as t

from .logging import TRACE, TraceLogLevelLogger

TimestampProvider = t.Callable[..., datetime.datetime]


def trace(msg: str, *args: t.Any, **kwargs: t.Any):
    if len(logging.root.handlers) == 0:
        logging.basicConfig()
    t.cast(TraceLogLevelLogger, logging.root).trace(msg, *args, **kwargs)


class LoggingProvider(object):
    def __init__(self, config: dict[str, t.Any], debug: bool):
        LoggingProvider.create_trace_loglevel()
        logging.config.dictConfig(config)
        if debug:
            self.capture_warnings(True)

    @staticmethod
    def create_trace_loglevel():
        """
        Create a log level TRACE = 5
        """
        logging.setLoggerClass(TraceLogLevelLogger)
        logging.addLevelName(TRACE, "TRACE")
        logging.TRACE = TRACE  # pyright: ignore [reportAttributeAccessIssue]
        logging.trace = trace  # pyright: ignore [reportAttributeAccessIssue]

    @staticmethod
    def get_logger(name: str | None = None, n_frames: int = 1) -> TraceLogLevelLogger:
        """The named logger, or the logger of the calling module."""
        if name is None:
            name = inspect.stack()[n_frames].frame.f_globals["__name__"]
        return t.cast(TraceLogLevelLogger, logging.getLogger(name))

    @staticmethod
    def capture_warnings(capture: bool):
        logging.captureWarnings(capture)
