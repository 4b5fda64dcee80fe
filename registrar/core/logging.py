import logging
import typing as t

TRACE = 5


class TraceLogLevelLogger(logging.Logger):
    def trace(self, message: str, *args: t.Any, **kwargs: t.Any):
        loglevel = getattr(logging, "TRACE", TRACE)
        if self.isEnabledFor(loglevel):
            self._log(loglevel, message, args, **kwargs)
