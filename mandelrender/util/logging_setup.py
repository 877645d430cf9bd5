"""
Logging for the ``mandelrender`` package logger.

The parent process owns the real handlers (console on stderr, so CGI
output on stdout stays clean, plus an optional rotating file). Band
workers either forward records to the parent through a queue, or, when no
queue was handed to the render, log to their own stderr handler so they
never write into the parent's rotating file.
"""
import logging
import logging.handlers
import multiprocessing as mp
from typing import List, Optional

_LOGGER_NAME = "mandelrender"
LOG_FORMAT = "%(asctime)s.%(msecs)03dZ %(processName)s %(levelname)s %(name)s - %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"

def get_logger() -> logging.Logger:
    return logging.getLogger(_LOGGER_NAME)

def _console_handler() -> logging.Handler:
    return logging.StreamHandler()

def _install(handlers: List[logging.Handler], level: int, *, close_old: bool = True) -> logging.Logger:
    logger = get_logger()
    logger.setLevel(level)
    logger.propagate = False
    for h in list(logger.handlers):
        logger.removeHandler(h)
        if close_old:
            h.close()
    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)
    for h in handlers:
        h.setLevel(level)
        if not isinstance(h, logging.handlers.QueueHandler):
            h.setFormatter(fmt)
        logger.addHandler(h)
    return logger

def configure_root_logging(
    *,
    level: int = logging.INFO,
    console: bool = True,
    log_file: Optional[str] = "render.log",
    rotate_bytes: int = 5 * 1024 * 1024,
    rotate_count: int = 5,
) -> logging.Logger:
    handlers: List[logging.Handler] = []
    if console:
        handlers.append(_console_handler())
    if log_file:
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file, maxBytes=rotate_bytes, backupCount=rotate_count, encoding="utf-8"
        ))
    return _install(handlers, level)

def configure_worker_logging(queue: Optional[mp.Queue], *, level: int = logging.INFO) -> logging.Logger:
    # handlers inherited from a forked parent are shared objects; detach without closing them
    if queue is None:
        return _install([_console_handler()], level, close_old=False)
    return _install([logging.handlers.QueueHandler(queue)], level, close_old=False)

class WorkerLogRelay:
    """Queue that carries worker records to the handlers of ``logger`` while open."""

    def __init__(self, logger: logging.Logger) -> None:
        self.queue: mp.Queue = mp.Queue(-1)
        self._listener = logging.handlers.QueueListener(
            self.queue, *logger.handlers, respect_handler_level=True
        )

    def __enter__(self) -> mp.Queue:
        self._listener.start()
        return self.queue

    def __exit__(self, *exc) -> None:
        self._listener.stop()
        self.queue.close()
