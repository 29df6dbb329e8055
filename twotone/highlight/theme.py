"""Theme Pair configuration and per-palette token styles."""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pygments.styles import get_style_by_name
from pygments.token import Token as RootToken
from pygments.token import _TokenType
from pygments.util import ClassNotFound

from ..config import DEFAULT_COLOR, DEFAULT_DARK_THEME, DEFAULT_LIGHT_THEME

ColorName = Literal["light", "dark"]


class ConfigError(Exception):
    """Raised for an invalid or unreadable Theme Pair configuration."""


class ThemePair(BaseModel):
    """A light and a dark Pygments style plus the default-active color."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    light: str
    dark: str
    default_color: ColorName

    @field_validator("light", "dark")
    @classmethod
    def _resolvable(cls, value: str) -> str:
        name = value.strip()
        if not name:
            raise ValueError("theme name must not be empty")
        try:
            get_style_by_name(name)
        except ClassNotFound:
            raise ValueError(f"unknown Pygments style {name!r}") from None
        return name

    @property
    def alternate_color(self) -> ColorName:
        return "dark" if self.default_color == "light" else "light"

    def theme_for(self, color: ColorName) -> str:
        return self.light if color == "light" else self.dark

    @classmethod
    def from_env(cls) -> "ThemePair":
        """Build the default pair from twotone.config (env-overridable)."""
        return _validate(
            {
                "light": DEFAULT_LIGHT_THEME,
                "dark": DEFAULT_DARK_THEME,
                "default_color": DEFAULT_COLOR,
            },
            source="environment",
        )


def load_theme_pair(path: Path) -> ThemePair:
    """Load a Theme Pair from a TOML or JSON file.

    The file must hold a ``highlight`` table::

        [highlight]
        light = "default"
        dark = "github-dark"
        default_color = "light"

    Raises:
        ConfigError: on any read, decode or validation problem
    """
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise ConfigError(f"cannot read theme config {path}: {e}") from e

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(raw.decode("utf-8"))
        else:
            data = tomllib.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"cannot parse theme config {path}: {e}") from e

    table = data.get("highlight") if isinstance(data, dict) else None
    if not isinstance(table, dict):
        raise ConfigError(f"{path}: missing [highlight] table")

    return _validate(table, source=str(path))


def _validate(data: dict[str, Any], source: str) -> ThemePair:
    try:
        return ThemePair.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'highlight'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigError(f"invalid theme config ({source}): {problems}") from e


@dataclass(frozen=True)
class TokenStyle:
    color: str
    bold: bool = False
    italic: bool = False


@dataclass(frozen=True)
class Palette:
    """Resolved colors of one Pygments style."""

    name: str
    background: str
    foreground: str

    def style_for(self, ttype: _TokenType) -> TokenStyle:
        return _token_style(self.name, self.foreground, ttype)


@lru_cache(maxsize=None)
def get_palette(name: str) -> Palette:
    style = get_style_by_name(name)
    background = _normalize_color(getattr(style, "background_color", None)) or "#ffffff"
    root = style.style_for_token(RootToken)
    foreground = _normalize_color(root.get("color")) or _contrast_color(background)
    return Palette(name=name, background=background, foreground=foreground)


@lru_cache(maxsize=4096)
def _token_style(name: str, foreground: str, ttype: _TokenType) -> TokenStyle:
    style = get_style_by_name(name)
    # Lexer-specific subtypes fall back to the nearest styled ancestor.
    while not style.styles_token(ttype) and ttype.parent is not None:
        ttype = ttype.parent
    info = style.style_for_token(ttype)
    return TokenStyle(
        color=_normalize_color(info.get("color")) or foreground,
        bold=bool(info.get("bold")),
        italic=bool(info.get("italic")),
    )


def _normalize_color(value: str | None) -> str | None:
    if not value:
        return None
    value = value.strip().lower()
    if not value or value in {"inherit", "transparent"}:
        return None
    if not value.startswith("#"):
        value = "#" + value
    return value


def _contrast_color(background: str) -> str:
    # Black on light backgrounds, white on dark ones.
    hexpart = background.lstrip("#")
    if len(hexpart) == 3:
        hexpart = "".join(c * 2 for c in hexpart)
    try:
        r, g, b = (int(hexpart[i : i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        return "#000000"
    luminance = 0.2126 * r + 0.7152 * g + 0.0722 * b
    return "#000000" if luminance > 127 else "#ffffff"
