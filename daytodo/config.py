from __future__ import annotations

import configparser
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping

CONFIG_PATH = Path.home() / ".config" / "daytodo" / "config.ini"
DATA_DIR = Path.home() / ".local" / "share" / "daytodo"

DEFAULT_PALETTE: Mapping[str, str] = MappingProxyType({
    "white": "#f7f1ff",
    "light_blue": "#5ad4e6",
    "red": "#fc618d",
    "green": "#7bd8f3",
    "orange": "#fd9353",
    "purple": "#948ae3",
    "yellow": "#fce566",
    "background": "#222222",
    "base_1": "#363537",
    "base_2": "#525053",
    "base_3": "#69676c",
})

# curses base colors as hex, used when a palette entry is given by name
COLOR_NAMES = {
    "black": "#000000",
    "red": "#cd0000",
    "green": "#00cd00",
    "yellow": "#cdcd00",
    "blue": "#0000ee",
    "magenta": "#cd00cd",
    "cyan": "#00cdcd",
    "white": "#e5e5e5",
}

POLL_TIMEOUT_MS = 100
POLL_TIMEOUT_RANGE = (10, 1000)
MALFORMED_POLICIES = ("abort", "skip")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class Config:
    data_dir: Path = DATA_DIR
    poll_timeout_ms: int = POLL_TIMEOUT_MS
    on_malformed: str = "abort"
    log_level: str = "INFO"
    palette: Mapping[str, str] = field(default_factory=lambda: DEFAULT_PALETTE)

    @property
    def skip_malformed(self) -> bool:
        return self.on_malformed == "skip"

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level, logging.INFO)


def load_parser_with_lines(path: Path) -> tuple[configparser.ConfigParser, dict[tuple[str, str], int], str | None]:
    """Read the INI file and capture line numbers for each option."""
    parser = configparser.ConfigParser(inline_comment_prefixes=(";",))
    lines: dict[tuple[str, str], int] = {}
    if not path.exists():
        return parser, lines, None
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        return parser, lines, f"could not read config: {exc}"
    try:
        parser.read_string(text)
    except configparser.Error as exc:
        return parser, lines, f"could not parse config: {exc}"
    current_section = None
    for idx, raw in enumerate(text.splitlines(), 1):
        stripped = raw.strip()
        if not stripped or stripped.startswith(("#", ";")):
            continue
        if stripped.startswith("[") and stripped.endswith("]"):
            current_section = stripped[1:-1].strip().lower()
            continue
        if "=" in stripped or ":" in stripped:
            sep = "=" if "=" in stripped else ":"
            option = stripped.split(sep, 1)[0].strip().lower()
            if current_section:
                lines[(current_section, option)] = idx
    return parser, lines, None


def normalize_hex(value: str) -> str | None:
    h = value.strip().lstrip("#")
    if len(h) == 6 and all(c in "0123456789abcdefABCDEF" for c in h):
        return "#" + h.lower()
    return None


def resolve_color(value: str) -> str | None:
    key = value.strip().lower()
    if key in COLOR_NAMES:
        return COLOR_NAMES[key]
    return normalize_hex(key)


def load_config(path: Path = CONFIG_PATH) -> tuple[Config, list[str]]:
    """Load the INI config; each invalid option is reported and falls back to its default."""
    parser, line_numbers, load_error = load_parser_with_lines(path)
    errors: list[str] = []
    if load_error:
        errors.append(load_error)

    def prefix(section: str, option: str) -> str:
        ln = line_numbers.get((section, option))
        return f"line {ln}: " if ln else ""

    data_dir = DATA_DIR
    poll_timeout_ms = POLL_TIMEOUT_MS
    on_malformed = "abort"
    log_level = "INFO"
    if parser.has_section("general"):
        raw_dir = parser.get("general", "data_dir", fallback=None)
        if raw_dir:
            candidate = Path(raw_dir.strip()).expanduser()
            if candidate.exists() and not candidate.is_dir():
                errors.append(f"{prefix('general', 'data_dir')}data_dir is not a directory; using {DATA_DIR}")
            else:
                data_dir = candidate

        raw_timeout = parser.get("general", "poll_timeout_ms", fallback=None)
        if raw_timeout:
            lo, hi = POLL_TIMEOUT_RANGE
            try:
                value = int(raw_timeout)
            except ValueError:
                value = None
            if value is None or not lo <= value <= hi:
                errors.append(
                    f"{prefix('general', 'poll_timeout_ms')}poll_timeout_ms must be an integer in {lo}..{hi}; "
                    f"using {POLL_TIMEOUT_MS}"
                )
            else:
                poll_timeout_ms = value

        raw_policy = parser.get("general", "on_malformed", fallback="abort").strip().lower()
        if raw_policy in MALFORMED_POLICIES:
            on_malformed = raw_policy
        else:
            errors.append(f"{prefix('general', 'on_malformed')}on_malformed must be 'abort' or 'skip'; using abort")

        raw_level = parser.get("general", "log_level", fallback="INFO").strip().upper()
        if raw_level in LOG_LEVELS:
            log_level = raw_level
        else:
            errors.append(f"{prefix('general', 'log_level')}log_level must be one of {', '.join(LOG_LEVELS)}; using INFO")

    palette: Dict[str, str] = dict(DEFAULT_PALETTE)
    if parser.has_section("colors"):
        for option, raw in parser.items("colors"):
            if option not in DEFAULT_PALETTE:
                errors.append(f"{prefix('colors', option)}unknown color '{option}'")
                continue
            resolved = resolve_color(raw)
            if resolved is None:
                errors.append(f"{prefix('colors', option)}colors.{option} '{raw}' is invalid; using {DEFAULT_PALETTE[option]}")
                continue
            palette[option] = resolved

    return Config(
        data_dir=data_dir,
        poll_timeout_ms=poll_timeout_ms,
        on_malformed=on_malformed,
        log_level=log_level,
        palette=MappingProxyType(palette),
    ), errors
