# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for fetchkit."""

from __future__ import annotations

import logging
import os

DEFAULT_LOG_LEVEL = os.getenv("FETCHKIT_LOG_LEVEL", "WARNING").upper()
LOGGER_NAME = "fetchkit"


def default_logger() -> logging.Logger:
    """Return the package logger installed on clients built without `with_logger`."""
    return logging.getLogger(LOGGER_NAME)


def setup_logging(level: str | None = None) -> None:
    """Configure standard logging for CLI/library use."""
    effective_level = (level or DEFAULT_LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, effective_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


__all__ = ["LOGGER_NAME", "default_logger", "setup_logging"]
