"""Logging configuration for rastersample.

To use this logging configuration, set the environment variable
RASTERSAMPLE_LOG_CFG to the path of the logging configuration file.
The repo has a sample configuration file in the root directory.

"""

import logging
import logging.config
import os
from pathlib import Path

import tomli

LOGGER_NAME = "rastersample"


def setup_logging(cfg_path=None):
    """Configure the ``rastersample`` loggers from a TOML dictConfig file.

    Args:
        cfg_path: Optional explicit path. Defaults to ``RASTERSAMPLE_LOG_CFG``
            or ``logging_config.toml`` at the repository root.

    Returns:
        The ``rastersample`` logger.
    """
    cfg_path = (
        cfg_path
        or os.getenv("RASTERSAMPLE_LOG_CFG")
        or Path(__file__).parent.parent.parent / "logging_config.toml"
    )

    cfg_path = Path(cfg_path)

    if not cfg_path.exists():
        package_logger = logging.getLogger(LOGGER_NAME)
        for handler in package_logger.handlers[:]:
            package_logger.removeHandler(handler)
        package_logger.addHandler(logging.NullHandler())
        return package_logger

    if not cfg_path.is_file():
        raise FileNotFoundError(f"Logging config not found at {cfg_path}")

    with cfg_path.open("rb") as f:
        cfg = tomli.load(f)

    logging.config.dictConfig(cfg)
    return logging.getLogger(LOGGER_NAME)
