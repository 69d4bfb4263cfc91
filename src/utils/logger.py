"""Logging infrastructure for Pirinku.

One process-wide "pirinku" logger, written to stderr so the interactive form on
stdout stays readable. Configured via environment variables:
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
- LOG_TYPE: text, json (default: text)

Call sites attach search context with `extra=`:
    logger.info("...", extra={"generation": 3})
    logger.warning("...", extra={"recipe_title": "Nasi Goreng"})
"""

import json
import logging
import os
import sys
from typing import Any, Dict, Tuple


# Optional record attributes copied into JSON output and shown as tags in text output
CONTEXT_FIELDS = ("generation", "recipe_title")


def _context(record: logging.LogRecord) -> Dict[str, Any]:
    return {field: getattr(record, field) for field in CONTEXT_FIELDS if hasattr(record, field)}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, non-ASCII kept as-is (recipe titles are Indonesian)."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context(record),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


class RichTextFormatter(logging.Formatter):
    """Coloured single-line text with a level icon and search-context tags.

    Example:
        🍳 2025-01-01 12:00:00 INFO     pirinku          [#2] Showing 3 recipe(s)
    """

    RESET = "\033[0m"
    STYLES: Dict[str, Tuple[str, str]] = {
        "DEBUG": ("\033[36m", "🔍"),
        "INFO": ("\033[32m", "🍳"),
        "WARNING": ("\033[33m", "⚠️"),
        "ERROR": ("\033[31m", "❌"),
        "CRITICAL": ("\033[1;31m", "❌"),
    }

    def format(self, record: logging.LogRecord) -> str:
        color, icon = self.STYLES.get(record.levelname, (self.RESET, ""))

        tags = []
        context = _context(record)
        if "generation" in context:
            tags.append(f"[#{context['generation']}]")
        if "recipe_title" in context:
            tags.append(f"[{context['recipe_title']}]")

        parts = [
            f"{icon} {self.formatTime(record, '%Y-%m-%d %H:%M:%S')}",
            f"{record.levelname:<8}",
            f"{record.name:<16}",
            *tags,
            record.getMessage(),
        ]
        line = f"{color}{' '.join(parts)}{self.RESET}"

        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


def get_logger(name: str) -> logging.Logger:
    """Return the named logger, attaching a stderr handler on first use.

    Args:
        name: Logger name.

    Returns:
        Configured logger instance.
    """
    logger_instance = logging.getLogger(name)
    if logger_instance.handlers:
        return logger_instance

    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), None)
    if not isinstance(level, int):
        level = logging.INFO
    logger_instance.setLevel(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if os.getenv("LOG_TYPE", "text").lower() == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(RichTextFormatter())
    logger_instance.addHandler(handler)

    return logger_instance


logger = get_logger("pirinku")

# Provider SDK request logs are noisy at INFO
for _noisy in ("google.genai", "httpx"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
