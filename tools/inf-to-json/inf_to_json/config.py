from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - fallback for older Pythons
    import tomli as tomllib  # type: ignore[import-not-found,no-redef]

from .errors import ConfigError


@dataclass(frozen=True)
class Settings:
    indent: int = 2
    strings_locale: str | None = None
    ensure_ascii: bool = False

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Return a copy with every non-None override applied."""

        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


_KNOWN_KEYS = ("indent", "strings_locale", "ensure_ascii")


def _require_int(value: Any, *, ctx: str) -> int:
    # bool is an int subclass; `indent = true` is a typo, not 1.
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"Expected non-negative integer for {ctx}, got {value!r}")
    return value


def _require_str(value: Any, *, ctx: str) -> str:
    if not isinstance(value, str) or not value:
        raise ConfigError(f"Expected non-empty string for {ctx}, got {value!r}")
    return value


def _require_bool(value: Any, *, ctx: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"Expected boolean for {ctx}, got {value!r}")
    return value


def settings_from_mapping(doc: Mapping[str, Any], *, source: str = "<config>") -> Settings:
    unknown = sorted(k for k in doc if k not in _KNOWN_KEYS)
    if unknown:
        raise ConfigError(f"{source}: unknown config key(s): {', '.join(unknown)}")

    settings = Settings()
    if "indent" in doc:
        settings = replace(settings, indent=_require_int(doc["indent"], ctx=f"{source}: indent"))
    if "strings_locale" in doc:
        settings = replace(settings, strings_locale=_require_str(doc["strings_locale"], ctx=f"{source}: strings_locale"))
    if "ensure_ascii" in doc:
        settings = replace(settings, ensure_ascii=_require_bool(doc["ensure_ascii"], ctx=f"{source}: ensure_ascii"))
    return settings


def load_settings(path: Path | None) -> Settings:
    if path is None:
        return Settings()
    try:
        doc = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigError(f"config file not found: {path.as_posix()}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"failed to read config file {path.as_posix()}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"invalid TOML in {path.as_posix()}: {e}") from e
    return settings_from_mapping(doc, source=path.as_posix())
