"""Root logging setup for the sfrest CLI.

sfrest modules log through module-level loggers: token requests and connects at
INFO, each request method and URL at DEBUG, and HTTP error bodies at ERROR.
Tokens and passwords are never logged.
"""

from __future__ import annotations

import logging
from typing import Optional

_DEFAULT_FMT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DEFAULT_DATEFMT = "%H:%M:%S"


def configure_logging(level: Optional[int]) -> None:
    """Configure root logging once; safe to call multiple times."""
    lvl = level if level is not None else logging.WARNING
    root = logging.getLogger()

    if root.handlers:
        root.setLevel(lvl)
    else:
        logging.basicConfig(
            level=lvl,
            format=_DEFAULT_FMT,
            datefmt=_DEFAULT_DATEFMT,
        )

    # urllib3 logs every connection at DEBUG; keep it out of -vv output
    urllib3_conn_logger = logging.getLogger("urllib3.connection")
    if urllib3_conn_logger.level == logging.NOTSET or urllib3_conn_logger.level < logging.ERROR:
        urllib3_conn_logger.setLevel(logging.ERROR)
    logging.getLogger("urllib3.connectionpool").setLevel(max(lvl, logging.INFO))
