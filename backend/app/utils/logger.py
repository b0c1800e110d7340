"""Logging configuration for the application."""
import logging
import sys
from app.config import settings

_default_level = "DEBUG" if settings.environment == "development" else "INFO"
_level = getattr(logging, (settings.log_level or _default_level).upper(), logging.INFO)

# Configure root logger
logger = logging.getLogger("app")
logger.setLevel(_level)

# Create console handler
handler = logging.StreamHandler(sys.stdout)
handler.setLevel(_level)

# Create formatter
formatter = logging.Formatter(
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
handler.setFormatter(formatter)

# Add handler to logger if not already added
if not logger.handlers:
    logger.addHandler(handler)

# Prevent duplicate logs
logger.propagate = False

__all__ = ["logger"]
