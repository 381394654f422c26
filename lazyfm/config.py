"""Opener and color configuration loaded from TOML.

The file maps file extensions to an external opener command and a color name.
Unlike the to-do file, a missing or malformed config is fatal at startup.
"""

from __future__ import annotations

import logging
import shlex
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

from .errors import ConfigError

logger = logging.getLogger(__name__)

APP_NAME = "lazyfm"
CONFIG_FILENAME = "opener.toml"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
DEFAULT_PREVIEW_STYLE = "monokai"

DEFAULT_FILE_SGR = "\033[38;5;252m"
DIRECTORY_SGR = "\033[1;34m"

COLOR_SGR: dict[str, str] = {
    "white": "\033[37m",
    "green": "\033[32m",
    "blue": "\033[34m",
    "red": "\033[31m",
    "cyan": "\033[36m",
    "magenta": "\033[35m",
    "yellow": "\033[33m",
    "gray": "\033[37m",
    "darkgray": "\033[90m",
    "orange": "\033[38;2;255;165;0m",
    "purple": "\033[38;2;128;0;128m",
    "pink": "\033[38;2;255;192;203m",
    "brown": "\033[38;2;165;42;42m",
    "lightblue": "\033[38;2;173;216;230m",
    "lightgreen": "\033[38;2;144;238;144m",
    "lightred": "\033[38;2;255;182;193m",
    "lightyellow": "\033[38;2;255;255;224m",
    "lightcyan": "\033[38;2;224;255;255m",
    "lightmagenta": "\033[38;2;255;224;255m",
    "lightorange": "\033[38;2;255;200;150m",
}


@dataclass(frozen=True)
class OpenerRule:
    """How to open and color files with one extension."""

    extension: str
    opener: str
    color: str | None = None
    terminal: bool = False

    def command(self, target: Path) -> list[str]:
        """Return argv for opening ``target``; the path is always the last argument."""
        return [*shlex.split(self.opener), str(target)]


@dataclass(frozen=True)
class OpenerConfig:
    """Immutable extension lookup table plus preview settings."""

    rules: dict[str, OpenerRule] = field(default_factory=dict)
    pager: str | None = None
    preview_style: str = DEFAULT_PREVIEW_STYLE

    def rule_for(self, path: Path) -> OpenerRule | None:
        """Return the rule for ``path``'s extension, or ``None`` when unmapped."""
        extension = path.suffix[1:].lower()
        if not extension:
            return None
        return self.rules.get(extension)

    def color_for(self, name: str) -> str | None:
        """Return the SGR sequence configured for ``name``'s extension.

        Unmapped extensions return ``None``; mapped extensions with an unknown
        color name fall back to plain white.
        """
        rule = self.rule_for(Path(name))
        if rule is None or rule.color is None:
            return None
        return COLOR_SGR.get(rule.color.strip().lower(), COLOR_SGR["white"])


def _parse_rule(extension: object, raw_rule: object) -> OpenerRule:
    if not isinstance(extension, str) or not extension.strip():
        raise ConfigError(f"invalid opener extension: {extension!r}")
    normalized = extension.strip().lstrip(".").lower()
    if not isinstance(raw_rule, dict):
        raise ConfigError(f"[openers.{extension}] must be a table")

    opener = raw_rule.get("opener")
    if not isinstance(opener, str) or not opener.strip():
        raise ConfigError(f"[openers.{extension}] needs a non-empty 'opener' string")
    try:
        if not shlex.split(opener):
            raise ConfigError(f"[openers.{extension}] opener is empty")
    except ValueError as exc:
        raise ConfigError(f"[openers.{extension}] opener cannot be parsed: {exc}") from exc

    color = raw_rule.get("color")
    if color is not None and not isinstance(color, str):
        raise ConfigError(f"[openers.{extension}] 'color' must be a string")

    terminal = raw_rule.get("terminal", False)
    if not isinstance(terminal, bool):
        raise ConfigError(f"[openers.{extension}] 'terminal' must be a boolean")

    return OpenerRule(extension=normalized, opener=opener.strip(), color=color or None, terminal=terminal)


def parse_opener_config(data: dict[str, object]) -> OpenerConfig:
    """Validate decoded TOML data and build an ``OpenerConfig``."""
    raw_openers = data.get("openers")
    if raw_openers is None:
        raise ConfigError("missing [openers] section")
    if not isinstance(raw_openers, dict):
        raise ConfigError("[openers] must be a table")

    rules: dict[str, OpenerRule] = {}
    for extension, raw_rule in raw_openers.items():
        rule = _parse_rule(extension, raw_rule)
        rules[rule.extension] = rule

    raw_preview = data.get("preview", {})
    if not isinstance(raw_preview, dict):
        raise ConfigError("[preview] must be a table")
    pager = raw_preview.get("pager")
    if pager is not None and (not isinstance(pager, str) or not pager.strip()):
        raise ConfigError("[preview] 'pager' must be a non-empty string")
    style = raw_preview.get("style", DEFAULT_PREVIEW_STYLE)
    if not isinstance(style, str) or not style.strip():
        raise ConfigError("[preview] 'style' must be a non-empty string")

    return OpenerConfig(
        rules=rules,
        pager=pager.strip() if pager else None,
        preview_style=style.strip(),
    )


def load_opener_config(path: Path = DEFAULT_CONFIG_PATH) -> OpenerConfig:
    """Read and validate the TOML config at ``path``.

    Raises ``ConfigError`` when the file is missing, unreadable, not valid
    TOML, or does not describe a well-formed ``[openers]`` table.
    """
    try:
        raw = path.read_bytes()
    except FileNotFoundError as exc:
        raise ConfigError(f"config file not found: {path}") from exc
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc

    try:
        data = tomllib.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"cannot parse {path}: {exc}") from exc

    config = parse_opener_config(data)
    logger.info("loaded %d opener rules from %s", len(config.rules), path)
    return config


__all__ = [
    "APP_NAME",
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_FILE_SGR",
    "DIRECTORY_SGR",
    "COLOR_SGR",
    "OpenerRule",
    "OpenerConfig",
    "parse_opener_config",
    "load_opener_config",
]
