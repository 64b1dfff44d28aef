import logging
import os
from logging.handlers import RotatingFileHandler


def setup_api_logger(log_path: str | None = None, level: str = "INFO") -> logging.Logger:
    """Setup and return the application-wide API logger.

    Creates a rotating file handler at `log_path` (defaults to ./logs/api.log).
    Store and builder loggers ("traveldesk.stores", "traveldesk.builder")
    share the handler through the "traveldesk" parent logger.
    """
    if log_path is None:
        base = os.path.abspath(os.path.dirname(__file__))
        logs_dir = os.path.join(base, '..', 'logs')
        os.makedirs(logs_dir, exist_ok=True)
        log_path = os.path.join(logs_dir, 'api.log')
    else:
        os.makedirs(os.path.dirname(os.path.abspath(log_path)), exist_ok=True)

    root = logging.getLogger('traveldesk')
    root.setLevel(level.upper())

    # avoid adding multiple handlers if called multiple times
    if not root.handlers:
        handler = RotatingFileHandler(log_path, maxBytes=5 * 1024 * 1024, backupCount=5, encoding='utf-8')
        formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s')
        handler.setFormatter(formatter)
        root.addHandler(handler)

    return logging.getLogger('traveldesk.api')
