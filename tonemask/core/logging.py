import logging
import re
from typing import Optional

_DIGIT = re.compile(r"\d")


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """Setup centralized logging for the application"""

    logger = logging.getLogger("tonemask")
    logger.setLevel(getattr(logging, log_level.upper()))

    # Clear existing handlers
    logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(
        '[%(asctime)s] %(levelname)s in %(name)s: %(message)s'
    ))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '[%(asctime)s] %(levelname)s in %(name)s [%(filename)s:%(lineno)d]: %(message)s'
        ))
        logger.addHandler(file_handler)

    return logger


def mask_digits(text: str) -> str:
    """Masks every digit so transcript fragments can be logged safely."""
    return _DIGIT.sub("*", text)
