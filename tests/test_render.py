"""Tests for tokenization and dual-palette span rendering."""

from __future__ import annotations

import re
import unittest
from html import unescape

from pygments.token import Keyword, Name, Text

from twotone.highlight.render import highlight_css, pre_style, render_spans
from twotone.highlight.theme import ThemePair
from twotone.highlight.tokens import Token, resolve_lexer, tokenize

LIGHT_DEFAULT = ThemePair(light="default", dark="monokai", default_color="light")
DARK_DEFAULT = ThemePair(light="default", dark="monokai", default_color="dark")

GO_SOURCE = 'package main\n\nimport "fmt"\n\nfunc main() {\n\tfmt.Println("a < b && c")\n}'


def _strip_tags(html: str) -> str:
    return unescape(re.sub(r"<[^>]+>", "", html))


class TestResolveLexer(unittest.TestCase):
    def test_known_aliases(self) -> None:
        self.assertIsNotNone(resolve_lexer("go"))
        self.assertIsNotNone(resolve_lexer("Python"))
        self.assertIsNotNone(resolve_lexer("text"))

    def test_unknown_or_empty(self) -> None:
        self.assertIsNone(resolve_lexer("unknown-lang"))
        self.assertIsNone(resolve_lexer(""))
        self.assertIsNone(resolve_lexer(None))


class TestTokenize(unittest.TestCase):
    def test_round_trips_without_trailing_newline(self) -> None:
        tokens = tokenize(GO_SOURCE, resolve_lexer("go"))
        self.assertEqual("".join(t.text for t in tokens), GO_SOURCE)

    def test_round_trips_with_trailing_newline(self) -> None:
        code = "def f(x):\n    return x  # done\n"
        tokens = tokenize(code, resolve_lexer("python"))
        self.assertEqual("".join(t.text for t in tokens), code)

    def test_preserves_leading_blank_lines_and_carriage_returns(self) -> None:
        code = "\n\nx = 1\r\ny = 2"
        tokens = tokenize(code, resolve_lexer("python"))
        self.assertEqual("".join(t.text for t in tokens), code)

    def test_trailing_comment_without_newline(self) -> None:
        code = "x = 1  # note"
        tokens = tokenize(code, resolve_lexer("python"))
        self.assertEqual("".join(t.text for t in tokens), code)

    def test_empty_code(self) -> None:
        self.assertEqual(tokenize("", resolve_lexer("go")), [])

    def test_css_class(self) -> None:
        self.assertEqual(Token("def", Keyword).css_class, "k")
        self.assertEqual(Token("x", Name).css_class, "n")


class TestRenderSpans(unittest.TestCase):
    def test_keyword_carries_both_palettes(self) -> None:
        html = render_spans([Token("def", Keyword)], LIGHT_DEFAULT)
        self.assertEqual(
            html,
            '<span style="color:#008000;font-weight:bold;'
            '--tt-dark:#66d9ef;--tt-dark-font-weight:normal">def</span>',
        )

    def test_default_dark_swaps_roles(self) -> None:
        html = render_spans([Token("def", Keyword)], DARK_DEFAULT)
        self.assertEqual(
            html,
            '<span style="color:#66d9ef;font-weight:normal;'
            '--tt-light:#008000;--tt-light-font-weight:bold">def</span>',
        )

    def test_every_span_has_both_colors(self) -> None:
        html = render_spans(tokenize(GO_SOURCE, resolve_lexer("go")), LIGHT_DEFAULT)
        spans = re.findall(r'<span style="([^"]*)">', html)
        self.assertTrue(spans)
        for style in spans:
            self.assertRegex(style, r"^color:#[0-9a-f]{6}")
            self.assertRegex(style, r"--tt-dark:#[0-9a-f]{6}")

    def test_text_is_preserved_and_escaped(self) -> None:
        html = render_spans(tokenize(GO_SOURCE, resolve_lexer("go")), LIGHT_DEFAULT)
        self.assertIn("&lt;", html)
        self.assertIn("&amp;&amp;", html)
        self.assertEqual(_strip_tags(html), GO_SOURCE)

    def test_whitespace_is_bare_text(self) -> None:
        self.assertEqual(render_spans([Token("  \n", Text)], LIGHT_DEFAULT), "  \n")

    def test_adjacent_same_style_tokens_merge(self) -> None:
        html = render_spans([Token("for", Keyword), Token("each", Keyword)], LIGHT_DEFAULT)
        self.assertEqual(html.count("<span"), 1)
        self.assertIn(">foreach</span>", html)

    def test_deterministic(self) -> None:
        tokens = tokenize(GO_SOURCE, resolve_lexer("go"))
        self.assertEqual(render_spans(tokens, LIGHT_DEFAULT), render_spans(tokens, LIGHT_DEFAULT))


class TestPreStyleAndCss(unittest.TestCase):
    def test_pre_style_has_both_backgrounds(self) -> None:
        style = pre_style(LIGHT_DEFAULT)
        self.assertIn("background-color:#f8f8f8", style)
        self.assertIn("--tt-dark-bg:#272822", style)
        self.assertIn("--tt-dark:#f8f8f2", style)

    def test_css_gates_on_marker_class(self) -> None:
        self.assertIn("html.dark pre.twotone span", highlight_css(LIGHT_DEFAULT))
        self.assertIn("var(--tt-dark)", highlight_css(LIGHT_DEFAULT))
        self.assertIn("html:not(.dark) pre.twotone span", highlight_css(DARK_DEFAULT))
        self.assertIn("var(--tt-light-bg)", highlight_css(DARK_DEFAULT))


if __name__ == "__main__":
    unittest.main()
