"""Logging setup for the wizard process: rotating file log, console only on request.

Console output is off by default so log lines do not interleave with questionary prompts.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Any

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that log every request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "openai")


def _file_handler(project_root: Path, cfg: dict[str, Any]) -> logging.Handler:
    log_path = project_root / cfg.get("file", "logs/wizard.log")
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=int(cfg.get("max_bytes", 10 * 1024 * 1024)),
        backupCount=int(cfg.get("backup_count", 3)),
        encoding="utf-8",
    )


def setup_logging(project_root: Path, settings: dict[str, Any]) -> None:
    """Configure the root logger from settings['logging']. Replaces existing handlers."""
    cfg = settings.get("logging", {})
    level = getattr(logging, str(cfg.get("level", "INFO")).upper(), logging.INFO)
    formatter = logging.Formatter(_FORMAT, datefmt=_DATEFMT)

    handlers: list[logging.Handler] = [_file_handler(project_root, cfg)]
    if cfg.get("log_to_console", False):
        handlers.append(logging.StreamHandler())

    root = logging.getLogger()
    root.setLevel(level)
    for h in root.handlers[:]:
        root.removeHandler(h)
    for h in handlers:
        h.setLevel(level)
        h.setFormatter(formatter)
        root.addHandler(h)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
