from datetime import datetime, timezone
import inspect
import json
import logging
import logging.handlers
import os
import pathlib
import traceback
from typing import Callable, Dict, List, Optional, Union


class SalvageLogger:
    """Wraps a logging.Logger so that it's easy to use str.format syntax."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def is_enabled_for(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)

    def debug(
        self, format_string: str, *args: object, **kwargs: object
    ) -> None:
        # Skip inspect.stack() when the record would be dropped.
        if not self._logger.isEnabledFor(logging.DEBUG):
            return
        # https://stackoverflow.com/a/44164714/3455228
        caller = inspect.stack()[1]
        _log(self._logger.debug, format_string, caller, args, kwargs)

    def error(
        self, format_string: str, *args: object, **kwargs: object
    ) -> None:
        caller = inspect.stack()[1]
        _log(self._logger.error, format_string, caller, args, kwargs)

    def warning(
        self, format_string: str, *args: object, **kwargs: object
    ) -> None:
        caller = inspect.stack()[1]
        _log(self._logger.warning, format_string, caller, args, kwargs)

    def info(
        self, format_string: str, *args: object, **kwargs: object
    ) -> None:
        if not self._logger.isEnabledFor(logging.INFO):
            return
        caller = inspect.stack()[1]
        _log(self._logger.info, format_string, caller, args, kwargs)


def get_logger(name: str) -> SalvageLogger:
    return SalvageLogger(logging.getLogger(name))


class _LogRecordEncoder(json.JSONEncoder):
    """A JSON Encoder that supports logging.LogRecord objects."""

    def default(self, obj: object):
        if isinstance(obj, logging.LogRecord):
            caller: Optional[inspect.FrameInfo] = getattr(obj, 'caller', None)
            path_name = caller.filename if caller else obj.pathname
            return {
                'name': obj.name,
                'message': obj.getMessage(),
                # arguments for the formatting string don't need to be in the JSON
                'level_name': obj.levelname,
                'path_name': path_name,
                'file_name': pathlib.Path(path_name).name,
                'module': (
                    caller.frame.f_globals['__name__']
                    if caller
                    else obj.module
                ),
                'exception': (
                    traceback.format_exception(*obj.exc_info)
                    if obj.exc_info
                    else None
                ),
                'line_number': caller.lineno if caller else obj.lineno,
                'function_name': caller.function if caller else obj.funcName,
                'created': datetime.fromtimestamp(
                    obj.created, timezone.utc
                ).isoformat(),
                'thread': obj.thread,
                'thread_name': obj.threadName,
                'process_name': obj.processName,
                'process': obj.process,
            }
        return super().default(obj)


class _JSONFormatter(logging.Formatter):
    """A logging formatter for producing structured JSON logs."""

    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(record, cls=_LogRecordEncoder)


def configure_logging(
    path: Union[str, 'os.PathLike[str]'],
    level: int = logging.DEBUG,
    max_bytes: int = 1048576,
) -> logging.Handler:
    """Send the engine's log records to a rotating file of JSON lines.

    Returns the handler so that callers can remove it again."""
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=1
    )
    handler.setFormatter(_JSONFormatter())
    logger = logging.getLogger('salvage')
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler


def _log(
    logging_method: Callable,
    format_string: str,
    caller: inspect.FrameInfo,
    args: List[object],
    kwargs: Dict[str, object],
) -> None:
    exc_info = None
    if 'exc_info' in kwargs:
        exc_info = kwargs['exc_info']
        del kwargs['exc_info']
    logging_method(
        _DelayedFormat(format_string, args, kwargs),
        exc_info=exc_info,
        extra={'caller': caller},
    )


class _DelayedFormat:
    def __init__(
        self, format_string: str, args: List[object], kwargs: Dict[str, object]
    ) -> None:
        self._format_string, self._args, self._kwargs = (
            format_string,
            args,
            kwargs,
        )

    def __str__(self) -> str:
        return self._format_string.format(*self._args, **self._kwargs)
