"""Tests for locating and rewriting Code Blocks in a page."""

from __future__ import annotations

import re
import unittest
from html import unescape

from twotone.highlight.document import MalformedHTMLError, find_code_blocks, highlight_html
from twotone.highlight.theme import ThemePair

PAIR = ThemePair(light="default", dark="github-dark", default_color="light")

THREE_BLOCKS = (
    "<!doctype html>\n<html><head><title>T</title></head><body>\n"
    "<p>Intro &amp; text</p>\n"
    '<pre><code class="language-go">func main() {\n\tx := 1 &lt;&lt; 2\n}</code></pre>\n'
    '<pre><code class="language-unknown-lang">some &lt;weird&gt; text</code></pre>\n'
    "<pre><code>plain  untagged\nblock</code></pre>\n"
    "<footer>end</footer>\n</body></html>\n"
)


def _code_texts(html: str) -> list[str]:
    inner = re.findall(r"<pre[^>]*><code[^>]*>(.*?)</code></pre>", html, flags=re.DOTALL)
    return [unescape(re.sub(r"<[^>]+>", "", i)) for i in inner]


class TestFindCodeBlocks(unittest.TestCase):
    def test_finds_blocks_and_languages(self) -> None:
        blocks = find_code_blocks(THREE_BLOCKS)
        self.assertEqual([b.language for b in blocks], ["go", "unknown-lang", None])
        self.assertEqual(blocks[0].line, 4)

    def test_inline_code_is_not_a_block(self) -> None:
        self.assertEqual(find_code_blocks("<p>Use <code>x</code> here</p>"), [])

    def test_language_on_pre(self) -> None:
        blocks = find_code_blocks('<pre class="lang-python"><code>x = 1</code></pre>')
        self.assertEqual(blocks[0].language, "python")

    def test_data_lang_attribute(self) -> None:
        blocks = find_code_blocks('<pre><code data-lang="rust">fn main() {}</code></pre>')
        self.assertEqual(blocks[0].language, "rust")

    def test_pre_inside_script_is_ignored(self) -> None:
        html = '<script>var s = "<pre><code>";</script><p>ok</p>'
        self.assertEqual(find_code_blocks(html), [])


class TestMalformed(unittest.TestCase):
    def test_unclosed_code_block(self) -> None:
        with self.assertRaises(MalformedHTMLError):
            find_code_blocks('<pre><code class="language-go">func main() {}')

    def test_pre_closed_inside_code(self) -> None:
        with self.assertRaises(MalformedHTMLError):
            find_code_blocks('<pre><code class="language-go">x</pre></code>')

    def test_nested_pre_inside_code(self) -> None:
        with self.assertRaises(MalformedHTMLError):
            find_code_blocks("<pre><code>a<pre>b</pre></code></pre>")


class TestHighlightHtml(unittest.TestCase):
    def test_three_block_scenario(self) -> None:
        result = highlight_html(THREE_BLOCKS, PAIR)
        self.assertEqual(result.highlighted, 2)
        self.assertEqual(result.skipped, 1)
        self.assertEqual(len(result.warnings), 1)
        self.assertIn("unknown-lang", result.warnings[0])

        html = result.html
        self.assertIn('<code class="language-go" data-twotone="go">', html)
        self.assertIn('<code data-twotone="text">', html)
        # The unknown block is byte-identical.
        self.assertIn(
            '<pre><code class="language-unknown-lang">some &lt;weird&gt; text</code></pre>', html
        )
        self.assertEqual(html.count('class="twotone"'), 2)
        self.assertEqual(html.count("--tt-dark-bg:"), 2)

    def test_content_preserved(self) -> None:
        before = _code_texts(THREE_BLOCKS)
        after = _code_texts(highlight_html(THREE_BLOCKS, PAIR).html)
        self.assertEqual(before, after)

    def test_comment_inside_block_stays_hidden(self) -> None:
        for html in (
            '<pre><code class="language-go">x := 1<!-- hidden -->\ny := 2</code></pre>',
            '<pre><code class="language-go">x := 1<?hidden?>\ny := 2</code></pre>',
            '<pre><code class="language-go">x := 1<![CDATA[hidden]]>\ny := 2</code></pre>',
        ):
            with self.subTest(html=html):
                result = highlight_html(html, PAIR)
                self.assertEqual(result.html, html)
                self.assertEqual(result.highlighted, 0)
                self.assertEqual(result.skipped, 1)
                self.assertEqual(len(result.warnings), 1)

    def test_non_code_bytes_unchanged(self) -> None:
        html = highlight_html(THREE_BLOCKS, PAIR).html
        self.assertTrue(html.startswith(THREE_BLOCKS[: THREE_BLOCKS.index("<pre>")]))
        self.assertTrue(html.endswith("\n<footer>end</footer>\n</body></html>\n"))

    def test_second_pass_is_noop(self) -> None:
        first = highlight_html(THREE_BLOCKS, PAIR).html
        second = highlight_html(first, PAIR)
        self.assertEqual(second.html, first)
        self.assertFalse(second.changed)
        self.assertEqual(second.highlighted, 0)

    def test_existing_pre_attributes_are_kept(self) -> None:
        html = '<pre class="wide" style="margin:0" id="x"><code class="language-python">x = 1</code></pre>'
        out = highlight_html(html, PAIR).html
        self.assertIn('class="wide twotone"', out)
        self.assertIn('style="margin:0;background-color:', out)
        self.assertIn('id="x"', out)
        self.assertIn('data-twotone="default/github-dark"', out)

    def test_block_with_child_markup_is_left_alone(self) -> None:
        html = '<pre><code class="language-go"><span class="k">func</span></code></pre>'
        result = highlight_html(html, PAIR)
        self.assertEqual(result.html, html)
        self.assertEqual(result.highlighted, 0)
        self.assertEqual(len(result.warnings), 1)

    def test_page_without_blocks_is_unchanged(self) -> None:
        html = "<html><body><p>Nothing to see</p></body></html>"
        result = highlight_html(html, PAIR)
        self.assertEqual(result.html, html)
        self.assertFalse(result.changed)


if __name__ == "__main__":
    unittest.main()
