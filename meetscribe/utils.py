import logging
import os
from pathlib import Path
from typing import Optional
from logging.handlers import TimedRotatingFileHandler
from rich.logging import RichHandler
from meetscribe.core.console import console as console_manager


def setup_logging(log_dir: Optional[str] = None, debug: bool = False, output_mode: str = "standard") -> logging.Logger:
    """Configures logging to console and rotating file.

    Args:
        log_dir: Directory for log files. If None, uses ~/.local/state/meetscribe/logs
        debug: If True, set logging level to DEBUG, otherwise INFO
        output_mode: 'standard', 'verbose', 'silent'. 'silent' suppresses console output.
    """
    if log_dir is None:
        xdg_state = os.environ.get("XDG_STATE_HOME")
        if xdg_state:
            log_dir = str(Path(xdg_state) / "meetscribe" / "logs")
        else:
            log_dir = str(Path.home() / ".local" / "state" / "meetscribe" / "logs")

    log_file = os.path.join(log_dir, "app.log")

    # Silence noisy 3rd party loggers
    noisy_loggers = [
        "urllib3", "requests", "httpx", "httpcore", "grpc",
        "google", "absl", "asyncio", "charset_normalizer"
    ]
    for logger_name in noisy_loggers:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logger = logging.getLogger("MeetScribe")

    if output_mode == "silent":
        console_level = logging.CRITICAL
        file_level = logging.DEBUG  # Always log details to file
    elif debug or output_mode == "verbose":
        console_level = logging.DEBUG
        file_level = logging.DEBUG
    else:
        console_level = logging.INFO
        file_level = logging.INFO

    # Set logger to lowest level to capture everything for handlers
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    # Avoid adding handlers multiple times
    if not logger.handlers:
        if output_mode != "silent":
            console_handler = RichHandler(
                console=console_manager.console,
                rich_tracebacks=True,
                markup=False,
                show_time=True,
                show_path=False
            )
            console_handler.setLevel(console_level)
            logger.addHandler(console_handler)

        try:
            os.makedirs(log_dir, exist_ok=True)
            file_handler = TimedRotatingFileHandler(log_file, when="midnight", interval=1, backupCount=30)
            file_handler.setLevel(file_level)
            file_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"))
            logger.addHandler(file_handler)
        except OSError as e:
            # We can't log this normally as handlers aren't set up
            if output_mode != "silent":
                console_manager.warning(f"Could not create log file at {log_file}: {e}. Logging to console only.")
    else:
        for handler in logger.handlers:
            if isinstance(handler, TimedRotatingFileHandler):
                handler.setLevel(file_level)
            elif isinstance(handler, logging.StreamHandler) or isinstance(handler, RichHandler):
                handler.setLevel(logging.CRITICAL if output_mode == "silent" else console_level)

    return logger
