import os
import logging
import threading
from contextlib import contextmanager

from config import LOG_DIR

LOG_FORMAT = "%(asctime)s - %(request_id)s - %(name)s - %(levelname)s - %(message)s"


class RequestIdFilter(logging.Filter):
    """Keeps only records from the thread serving the request and stamps them with its id."""

    def __init__(self, request_id: str, thread_id: int):
        super().__init__()
        self.request_id = request_id
        self.thread_id = thread_id

    def filter(self, record: logging.LogRecord) -> bool:
        if record.thread != self.thread_id:
            return False
        record.request_id = self.request_id
        return True


@contextmanager
def request_logger(request_id: str, log_dir: str = LOG_DIR):
    """Capture the log records of one pipeline request into <log_dir>/<request_id>.log.

    The handler sits on the root logger, so records from the stages, the
    gateway and the API layer all land in the same file. Requests run
    concurrently in the threadpool, so only records emitted by the thread
    that entered this context are kept.
    """
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, f"{request_id}.log")

    handler = logging.FileHandler(log_path, encoding="utf-8")
    handler.setLevel(logging.INFO)
    handler.addFilter(RequestIdFilter(request_id, threading.get_ident()))
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.addHandler(handler)
    try:
        yield log_path
    finally:
        handler.flush()
        handler.close()
        root_logger.removeHandler(handler)
