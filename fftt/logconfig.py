"""FFTT — explicit logging configuration.

The modem and framing code never read configuration; they log through
``logging.getLogger(__name__)`` under the ``fftt`` namespace.  Entry points
(:func:`fftt.encode_file`, :func:`fftt.decode_file`, the CLI) take a
:class:`LogConfig` and call :func:`configure_logging` to decide where those
records go.
"""

import logging
import sys
import time
from dataclasses import dataclass
from pathlib import Path

from colorama import Fore, Style, just_fix_windows_console

ROOT_LOGGER = "fftt"

_LEVEL_COLORS = {
    logging.DEBUG:    Fore.CYAN,
    logging.INFO:     Fore.GREEN,
    logging.WARNING:  Fore.YELLOW,
    logging.ERROR:    Fore.RED,
    logging.CRITICAL: Fore.RED + Style.BRIGHT,
}

# marks handlers installed here so a second configure_logging() replaces them
_OWNED = "_fftt_owned"


@dataclass
class LogConfig:
    log_to_file:     bool = False
    log_to_terminal: bool = True
    file_prefix:     str  = "fftt"
    color_levels:    bool = True
    level:           int  = logging.INFO

    def log_path(self, directory=".") -> Path:
        return Path(directory) / f"{self.file_prefix}-{time.strftime('%Y%m%d')}.log"


class _ColorLevelFormatter(logging.Formatter):
    """Prefix each record with its level name, coloured by severity."""

    def format(self, record: logging.LogRecord) -> str:
        color = _LEVEL_COLORS.get(record.levelno, "")
        msg   = super().format(record)
        return f"{color}[{record.levelname}]{Style.RESET_ALL} {msg}"


def configure_logging(config: LogConfig | None = None) -> logging.Logger:
    """Attach terminal / file handlers to the ``fftt`` logger per *config*."""
    config = config or LogConfig()
    logger = logging.getLogger(ROOT_LOGGER)

    for handler in [h for h in logger.handlers if getattr(h, _OWNED, False)]:
        logger.removeHandler(handler)
        handler.close()

    if config.log_to_terminal:
        term = logging.StreamHandler(sys.stderr)
        if config.color_levels:
            just_fix_windows_console()
            term.setFormatter(_ColorLevelFormatter("%(message)s"))
        else:
            term.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        setattr(term, _OWNED, True)
        logger.addHandler(term)

    if config.log_to_file:
        fh = logging.FileHandler(config.log_path(), encoding="utf-8")
        fh.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        setattr(fh, _OWNED, True)
        logger.addHandler(fh)

    if not logger.handlers:
        null = logging.NullHandler()
        setattr(null, _OWNED, True)
        logger.addHandler(null)

    logger.setLevel(config.level)
    logger.propagate = False
    return logger
