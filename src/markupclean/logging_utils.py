"""Root logger setup for the markupclean command line.

The ``--report`` output is ordinary INFO records from the
``markupclean.report`` logger, so it goes wherever these handlers send it.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

PLAIN_FORMAT = "%(levelname)s: %(message)s"
TRACE_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"


def configure_logging(
    log_level: int | str,
    log_file: Optional[str] = None,
    trace_mode: bool = False,
) -> logging.Logger:
    """Replace the root logger's handlers with a stderr handler and an optional file.

    Parameters
    ----------
    log_level : int | str
        Level for the root logger and every handler; unknown names fall
        back to INFO
    log_file : str, optional
        File that receives the same records, appended to
    trace_mode : bool, default False
        Prefix records with a timestamp and the logger name

    Returns
    -------
    logging.Logger
        The root logger

    """
    level = log_level if isinstance(log_level, int) else logging.getLevelName(str(log_level).upper())
    if not isinstance(level, int):
        level = logging.INFO

    formatter = (
        logging.Formatter(TRACE_FORMAT, "%Y-%m-%d %H:%M:%S") if trace_mode else logging.Formatter(PLAIN_FORMAT)
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    file_problem = None
    if log_file:
        try:
            handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))
        except OSError as exc:
            file_problem = exc

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    if file_problem is not None:
        root.warning("Log file %s unavailable, logging to stderr only: %s", log_file, file_problem)
    elif log_file:
        root.debug("Also logging to %s", log_file)

    return root
