import contextlib
import logging
import os
import sys
import time
from dataclasses import dataclass

LOGGER_NAME = 'vmigrate'
LOG_FORMAT = '%(asctime)s [%(levelname)s] [%(name)s] %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

SUCCESS = 25
logging.addLevelName(SUCCESS, 'SUCCESS')


def log_success(logger, message):
    logger.log(SUCCESS, message)


@dataclass
class RunLog:
    logger: logging.Logger
    run_id: str
    log_file: str
    error_log_file: str

    def success(self, message):
        log_success(self.logger, message)


def configure_console(verbose=False, level='INFO', fmt=LOG_FORMAT, stream=None):
    """
    Attach a console handler to the vmigrate logger.
    Returns the handler so callers can detach it again.
    """
    logger = logging.getLogger(LOGGER_NAME)
    console_level = logging.DEBUG if verbose else logging.getLevelName(level)
    if not isinstance(console_level, int):
        console_level = logging.INFO

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(console_level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=LOG_DATE_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    return handler


@contextlib.contextmanager
def run_logging(log_dir='logs', verbose=False, level='INFO', run_id=None, console_stream=None):
    """
    Open the run-scoped log sinks and yield a RunLog.

    Every record goes to the console and to migration_<run_id>.log; ERROR
    records also go to migration_errors_<run_id>.log. All handlers are
    flushed, closed and detached when the block exits, however it exits.
    """
    run_id = run_id or time.strftime('%Y%m%d_%H%M%S')
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, f"migration_{run_id}.log")
    error_log_file = os.path.join(log_dir, f"migration_errors_{run_id}.log")

    logger = logging.getLogger(LOGGER_NAME)
    previous_level = logger.level
    previous_propagate = logger.propagate
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    file_level = logging.DEBUG if verbose else logging.getLevelName(level)
    if not isinstance(file_level, int):
        file_level = logging.INFO

    run_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
    run_handler.setLevel(file_level)
    run_handler.setFormatter(formatter)

    error_handler = logging.FileHandler(error_log_file, mode='a', encoding='utf-8', delay=True)
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(formatter)

    handlers = [run_handler, error_handler]
    for handler in handlers:
        logger.addHandler(handler)
    handlers.append(configure_console(verbose=verbose, level=level, stream=console_stream))
    logger.setLevel(logging.DEBUG)

    try:
        yield RunLog(logger=logger, run_id=run_id, log_file=log_file, error_log_file=error_log_file)
    finally:
        for handler in handlers:
            handler.flush()
            logger.removeHandler(handler)
            handler.close()
        logger.setLevel(previous_level)
        logger.propagate = previous_propagate
