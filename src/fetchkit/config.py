# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for fetchkit."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"fetchkit/{__version__}"


def _optional_float_env(name: str, default: float | None) -> float | None:
    try:
        value = os.getenv(name)
        if value is None:
            return default
        parsed = float(value)
        return parsed if parsed > 0 else None
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class FetchSettings:
    """Client defaults. A timeout of None means requests never time out."""

    timeout: float | None = None
    user_agent: str = DEFAULT_USER_AGENT
    follow_redirects: bool = True
    verify_ssl: bool = True

    @classmethod
    def from_env(cls) -> "FetchSettings":
        """Create settings from environment variables (evaluated at call time)."""
        return cls(
            timeout=_optional_float_env("FETCHKIT_HTTP_TIMEOUT", cls.timeout),
            user_agent=os.getenv("FETCHKIT_USER_AGENT", cls.user_agent),
            follow_redirects=_bool_env("FETCHKIT_HTTP_REDIRECTS", cls.follow_redirects),
            verify_ssl=_bool_env("FETCHKIT_HTTP_VERIFY_SSL", cls.verify_ssl),
        )


def load_settings() -> FetchSettings:
    """Load settings from environment with sensible defaults."""
    return FetchSettings.from_env()
