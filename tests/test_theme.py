"""Tests for Theme Pair configuration."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from pygments.token import Keyword

from twotone.highlight.theme import ConfigError, ThemePair, get_palette, load_theme_pair


def _write(directory: str, name: str, text: str) -> Path:
    path = Path(directory) / name
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadThemePair(unittest.TestCase):
    def test_loads_toml(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = _write(
                td,
                "theme.toml",
                '[highlight]\nlight = "default"\ndark = "monokai"\ndefault_color = "dark"\n',
            )
            pair = load_theme_pair(path)
        self.assertEqual(pair.light, "default")
        self.assertEqual(pair.dark, "monokai")
        self.assertEqual(pair.default_color, "dark")
        self.assertEqual(pair.alternate_color, "light")

    def test_loads_json(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            data = {"highlight": {"light": "default", "dark": "monokai", "default_color": "light"}}
            path = _write(td, "theme.json", json.dumps(data))
            pair = load_theme_pair(path)
        self.assertEqual(pair.theme_for("light"), "default")
        self.assertEqual(pair.theme_for("dark"), "monokai")

    def test_unknown_theme_is_config_error(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = _write(
                td,
                "theme.toml",
                '[highlight]\nlight = "no-such-style"\ndark = "monokai"\ndefault_color = "light"\n',
            )
            with self.assertRaises(ConfigError) as ctx:
                load_theme_pair(path)
        self.assertIn("no-such-style", str(ctx.exception))

    def test_missing_default_color_is_config_error(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = _write(td, "theme.toml", '[highlight]\nlight = "default"\ndark = "monokai"\n')
            with self.assertRaises(ConfigError) as ctx:
                load_theme_pair(path)
        self.assertIn("default_color", str(ctx.exception))

    def test_invalid_default_color_is_config_error(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = _write(
                td,
                "theme.toml",
                '[highlight]\nlight = "default"\ndark = "monokai"\ndefault_color = "blue"\n',
            )
            with self.assertRaises(ConfigError):
                load_theme_pair(path)

    def test_extra_field_is_config_error(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = _write(
                td,
                "theme.toml",
                '[highlight]\nlight = "default"\ndark = "monokai"\n'
                'default_color = "light"\naccent = "red"\n',
            )
            with self.assertRaises(ConfigError):
                load_theme_pair(path)

    def test_missing_table_is_config_error(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = _write(td, "theme.toml", 'light = "default"\n')
            with self.assertRaises(ConfigError):
                load_theme_pair(path)

    def test_unparsable_file_is_config_error(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = _write(td, "theme.toml", "[highlight\nlight = \n")
            with self.assertRaises(ConfigError):
                load_theme_pair(path)

    def test_missing_file_is_config_error(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            with self.assertRaises(ConfigError):
                load_theme_pair(Path(td) / "absent.toml")


class TestThemePair(unittest.TestCase):
    def test_from_env_is_valid(self) -> None:
        pair = ThemePair.from_env()
        self.assertIn(pair.default_color, ("light", "dark"))
        self.assertNotEqual(pair.default_color, pair.alternate_color)

    def test_pair_is_frozen(self) -> None:
        pair = ThemePair(light="default", dark="monokai", default_color="light")
        with self.assertRaises(Exception):
            pair.light = "monokai"  # type: ignore[misc]


class TestPalette(unittest.TestCase):
    def test_background_and_keyword_color(self) -> None:
        palette = get_palette("default")
        self.assertEqual(palette.background, "#f8f8f8")
        style = palette.style_for(Keyword)
        self.assertEqual(style.color, "#008000")
        self.assertTrue(style.bold)

    def test_every_token_gets_a_color(self) -> None:
        from pygments.token import Text

        for name in ("default", "monokai", "github-dark"):
            style = get_palette(name).style_for(Text)
            self.assertTrue(style.color.startswith("#"), name)


if __name__ == "__main__":
    unittest.main()
