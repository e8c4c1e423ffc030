# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Data shapes shared by request descriptors."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ErrorBody:
    """Default error decode target: a response carrying a single `error` field."""

    error: str = ""


__all__ = ["ErrorBody"]
