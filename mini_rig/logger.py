# mini_rig/logger.py
"""
Package logger.

Every module logs through a child of the "mini_rig" logger
(get_logger(__name__) -> "mini_rig.rig"), so one handler and one level
switch cover the whole engine. Recompute summaries go out at DEBUG;
reset and recoverable warnings at INFO; indeterminate load cases and
unbounded tensions at WARNING.
"""

import logging

LOGGER_NAME = "mini_rig"
LOG_FORMAT = "[%(name)s] %(levelname)s: %(message)s"

logger = logging.getLogger(LOGGER_NAME)

# Re-importing the module must not stack handlers
if not logger.handlers:
    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(_handler)

logger.setLevel(logging.INFO)


def set_debug(enabled: bool) -> None:
    """Switch the engine between DEBUG (per-pass summaries) and INFO."""
    logger.setLevel(logging.DEBUG if enabled else logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """Child logger for a module, e.g. get_logger(__name__) -> mini_rig.rig."""
    if name == LOGGER_NAME or name.startswith(LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logger.getChild(name)
