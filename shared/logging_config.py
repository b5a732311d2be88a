"""
Logging configuration for the Flocker volume client.

Gives the CLI and any embedding volume-management host the same log layout.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def resolve_level(level: Union[int, str]) -> int:
    """Accept either a logging constant or its name ('debug', 'INFO', ...)."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def setup_logging(
    component_name: str = "flocker-client",
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Configure logging for a client entry point.

    Args:
        component_name: Tag shown in every record (e.g., 'flocker-volume')
        level: Logging level, as a constant or a level name
        log_file: Optional file path for log output
        format_string: Custom format string (default provided)
    """
    level = resolve_level(level)
    if format_string is None:
        format_string = f'[%(asctime)s] [{component_name.upper()}] %(levelname)s %(name)s - %(message)s'

    # Log to stderr so command output on stdout stays parseable
    logging.basicConfig(
        level=level,
        format=format_string,
        datefmt=DATE_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(format_string, datefmt=DATE_FORMAT))
        logging.getLogger().addHandler(file_handler)

    # urllib3 is chatty at DEBUG; keep it one notch quieter than the client
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))

    logger = logging.getLogger(component_name)
    logger.debug(f"{component_name} logging initialized (level={logging.getLevelName(level)})")

    return logger
