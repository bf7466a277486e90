"""Per-run logging setup.

Each CLI run gets its own log file under the installation's ``logs/``
directory (only the newest ``MAX_LOG_FILES`` are kept) and a rich console
handler on stderr. The file records at the configured level; the console shows
warnings, or everything when verbose.
"""

import logging
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from schemamap.constants import APP_NAME, MAX_LOG_FILES

LOGGER_NAMES = ("schemamap", "schemamap_cli", "schemamap_mcp")
_FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

_handlers: list[logging.Handler] = []


def prune_log_files(logs_dir: Path, keep: int = MAX_LOG_FILES) -> list[Path]:
    """Delete all but the newest ``keep`` log files.

    Returns:
        The deleted paths
    """
    if not logs_dir.is_dir():
        return []
    log_files = sorted(logs_dir.glob(f"{APP_NAME}-*.log"), key=lambda p: p.name, reverse=True)
    stale = log_files[keep:]
    for path in stale:
        path.unlink(missing_ok=True)
    return stale


def _reset_handlers() -> None:
    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        for handler in _handlers:
            logger.removeHandler(handler)
    for handler in _handlers:
        handler.close()
    _handlers.clear()


def init_log_file(
    logs_dir: Path | None, verbose: bool = False, level: str = "INFO", console: Console | None = None
) -> Path | None:
    """Configure the application loggers for one run.

    Calling it again replaces the handlers of the previous call.

    Args:
        logs_dir: Directory for the run's log file (None for console only)
        verbose: Show DEBUG output on the console
        level: Level recorded in the log file
        console: Console for the rich handler (stderr if omitted)

    Returns:
        Path of the new log file, or None when logs_dir is None
    """
    _reset_handlers()

    console_handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
    )
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    _handlers.append(console_handler)

    log_path: Path | None = None
    if logs_dir is not None:
        logs_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S-%f")
        log_path = logs_dir / f"{APP_NAME}-{stamp}.log"
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_level = logging.getLevelName(level.upper())
        file_handler.setLevel(file_level if isinstance(file_level, int) else logging.INFO)
        file_handler.setFormatter(logging.Formatter(fmt=_FILE_FORMAT, datefmt=_DATE_FORMAT))
        _handlers.append(file_handler)
        prune_log_files(logs_dir)

    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
        for handler in _handlers:
            logger.addHandler(handler)

    return log_path
