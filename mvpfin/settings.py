"""Application configuration and persisted UI preferences."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Mapping

import streamlit as st

logger = logging.getLogger(__name__)

Theme = Literal["light", "dark"]
THEMES: tuple[Theme, ...] = ("light", "dark")
DEFAULT_THEME: Theme = "light"
THEME_KEY = "theme"


def _secret(name: str) -> Any:
    try:
        return st.secrets.get(name)
    except Exception:  # no secrets.toml outside `streamlit run`
        return None


def _setting(name: str, default: str, environ: Mapping[str, str] | None = None) -> str:
    """Resolve ``name`` from Streamlit secrets, then the environment, then ``default``."""

    value = _secret(name)
    if value:
        return str(value)
    environ = os.environ if environ is None else environ
    return environ.get(name) or default


@dataclass(frozen=True)
class AppConfig:
    db_path: Path
    preferences_path: Path
    log_dir: Path
    log_level: str = "INFO"
    app_name: str = "mvpfin"


def load_config(environ: Mapping[str, str] | None = None) -> AppConfig:
    return AppConfig(
        db_path=Path(_setting("MVPFIN_DB_PATH", "data/mvpfin.db", environ)),
        preferences_path=Path(_setting("MVPFIN_PREFERENCES_PATH", "data/preferences.json", environ)),
        log_dir=Path(_setting("LOG_DIR", "logs", environ)),
        log_level=_setting("LOG_LEVEL", "INFO", environ).upper(),
    )


class Preferences:
    """Small key-value preference file.

    Reads and writes are best effort: a missing, unreadable or corrupt file
    behaves like an empty one and write failures are only logged.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.debug("Ignoring unreadable preferences at %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not save preference %r to %s: %s", key, self.path, exc)

    @property
    def theme(self) -> Theme:
        value = self.get(THEME_KEY, DEFAULT_THEME)
        return value if value in THEMES else DEFAULT_THEME

    @theme.setter
    def theme(self, value: Theme) -> None:
        if value not in THEMES:
            raise ValueError(f"Unknown theme {value!r}")
        self.set(THEME_KEY, value)


def toggle_theme(theme: Theme) -> Theme:
    return "dark" if theme == "light" else "light"


def resolve_theme(requested: str | None, default: Theme = DEFAULT_THEME) -> Theme:
    """Pick the browser's theme from the ``?theme=`` URL value, else ``default``.

    The URL keeps the choice per browser tab; the preferences file only
    supplies the deployment default.
    """

    if requested in THEMES:
        return requested  # type: ignore[return-value]
    return default if default in THEMES else DEFAULT_THEME
