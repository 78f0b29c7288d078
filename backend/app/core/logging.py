"""Process-wide logging setup."""

import logging
from logging import StreamHandler

from backend.app.core.settings import get_settings

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def init_logging() -> None:
    settings = get_settings()
    level = getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)

    # uvicorn installs its own handlers; keep them on the same format
    for logger_name in ("uvicorn", "uvicorn.access"):
        lg = logging.getLogger(logger_name)
        lg.setLevel(level)
        if not lg.handlers:
            handler = StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            lg.addHandler(handler)
