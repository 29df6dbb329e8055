"""Locate Code Blocks in a page and splice in highlighted markup.

The page is scanned with a streaming parser that only records source offsets.
Rewriting is done by splicing the original string at those offsets, so every
byte outside a Code Block's ``<pre>``/``<code>`` start tags and its content is
left exactly as the Site Generator emitted it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from html import escape, unescape
from html.parser import HTMLParser

from ..config import MARKER_ATTR, PLAIN_LANGUAGES, PRE_CLASS
from .render import pre_style, render_spans
from .theme import ThemePair
from .tokens import TokenizeError, resolve_lexer, tokenize

Attrs = list[tuple[str, str | None]]

VOID_TAGS = {
    "area",
    "base",
    "br",
    "col",
    "embed",
    "hr",
    "img",
    "input",
    "link",
    "meta",
    "param",
    "source",
    "track",
    "wbr",
}

LANGUAGE_PREFIXES = ("language-", "lang-")

PLAIN_TEXT = "text"


class MalformedHTMLError(Exception):
    """Raised when a page's Code Block structure cannot be trusted."""


@dataclass(frozen=True)
class CodeBlock:
    """A ``<pre><code>`` region, identified by its offsets in the page."""

    line: int
    pre_start: int
    pre_end: int
    pre_attrs: Attrs
    code_start: int
    code_end: int
    code_attrs: Attrs
    content_end: int
    has_children: bool

    @property
    def language(self) -> str | None:
        return _language_of(self.code_attrs) or _language_of(self.pre_attrs)

    @property
    def processed(self) -> bool:
        return any(name == MARKER_ATTR for name, _ in self.code_attrs)


@dataclass
class PageResult:
    html: str
    highlighted: int = 0
    skipped: int = 0
    warnings: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.highlighted > 0


def find_code_blocks(html: str) -> list[CodeBlock]:
    """Return every Code Block in document order.

    Raises:
        MalformedHTMLError: a block is left open, or ``<pre>`` structure breaks
            inside a block
    """
    locator = _BlockLocator(html)
    try:
        locator.feed(html)
        locator.close()
    except MalformedHTMLError:
        raise
    except Exception as e:
        raise MalformedHTMLError(f"unparsable markup: {e}") from e
    locator.finish()
    return locator.blocks


def highlight_html(html: str, pair: ThemePair) -> PageResult:
    """Highlight every eligible Code Block of one page."""
    result = PageResult(html=html)
    pieces: list[str] = []
    cursor = 0

    for block in find_code_blocks(html):
        if block.processed:
            continue

        language = block.language
        if not language or language.lower() in PLAIN_LANGUAGES:
            # Untagged blocks still get both palettes, without grammar tokens.
            language = PLAIN_TEXT

        if block.has_children:
            result.skipped += 1
            result.warnings.append(
                f"line {block.line}: block already contains markup; left unchanged"
            )
            continue

        lexer = resolve_lexer(language)
        if lexer is None:
            result.skipped += 1
            result.warnings.append(
                f"line {block.line}: unknown language {language!r}; block left unstyled"
            )
            continue

        code = unescape(html[block.code_end : block.content_end])
        try:
            spans = render_spans(tokenize(code, lexer), pair)
        except TokenizeError as e:
            result.skipped += 1
            result.warnings.append(f"line {block.line}: {e}; block left unstyled")
            continue
        except Exception as e:
            # A lexer bug must not cost the rest of the page.
            result.skipped += 1
            result.warnings.append(
                f"line {block.line}: {language} lexer failed ({e}); block left unstyled"
            )
            continue

        pieces.append(html[cursor : block.pre_start])
        pieces.append(_start_tag("pre", _pre_attrs(block.pre_attrs, pair)))
        pieces.append(html[block.pre_end : block.code_start])
        pieces.append(_start_tag("code", [*block.code_attrs, (MARKER_ATTR, language)]))
        pieces.append(spans)
        cursor = block.content_end
        result.highlighted += 1

    if result.highlighted:
        pieces.append(html[cursor:])
        result.html = "".join(pieces)
    return result


def _pre_attrs(attrs: Attrs, pair: ThemePair) -> Attrs:
    out: Attrs = []
    seen_class = seen_style = False
    for name, value in attrs:
        if name == "class":
            classes = (value or "").split()
            if PRE_CLASS not in classes:
                classes.append(PRE_CLASS)
            value = " ".join(classes)
            seen_class = True
        elif name == "style":
            # Ours go last so the palette wins over generator defaults.
            existing = (value or "").strip().rstrip(";")
            value = f"{existing};{pre_style(pair)}" if existing else pre_style(pair)
            seen_style = True
        out.append((name, value))
    if not seen_class:
        out.append(("class", PRE_CLASS))
    if not seen_style:
        out.append(("style", pre_style(pair)))
    out.append((MARKER_ATTR, f"{pair.light}/{pair.dark}"))
    return out


def _start_tag(tag: str, attrs: Attrs) -> str:
    parts = [tag]
    for name, value in attrs:
        if value is None:
            parts.append(name)
        else:
            parts.append(f'{name}="{escape(value, quote=True)}"')
    return "<" + " ".join(parts) + ">"


def _language_of(attrs: Attrs) -> str | None:
    for name, value in attrs:
        if name == "class" and value:
            for cls in value.split():
                for prefix in LANGUAGE_PREFIXES:
                    if cls.startswith(prefix) and len(cls) > len(prefix):
                        return cls[len(prefix) :]
    for name, value in attrs:
        if name == "data-lang" and value and value.strip():
            return value.strip()
    return None


@dataclass
class _OpenPre:
    start: int
    end: int
    attrs: Attrs
    line: int
    depth: int = 0
    has_block: bool = False


@dataclass
class _OpenBlock:
    pre: _OpenPre
    start: int
    end: int
    attrs: Attrs
    depth: int = 0
    has_children: bool = False


class _BlockLocator(HTMLParser):
    """Records offsets of ``<pre><code>`` blocks without building a tree."""

    def __init__(self, html: str) -> None:
        super().__init__(convert_charrefs=False)
        self.blocks: list[CodeBlock] = []
        self._line_starts = [0]
        for i, ch in enumerate(html):
            if ch == "\n":
                self._line_starts.append(i + 1)
        self._pre: _OpenPre | None = None
        self._block: _OpenBlock | None = None

    def _offset(self) -> int:
        line, col = self.getpos()
        return self._line_starts[line - 1] + col

    def handle_starttag(self, tag: str, attrs: Attrs) -> None:
        start = self._offset()
        raw = self.get_starttag_text() or ""
        end = start + len(raw)
        void = tag in VOID_TAGS

        if self._block is not None:
            if tag == "pre":
                raise MalformedHTMLError(
                    f"line {self.getpos()[0]}: <pre> opened inside an open code block"
                )
            self._block.has_children = True
            if not void:
                self._block.depth += 1
            return

        if self._pre is not None:
            if tag == "code" and self._pre.depth == 0 and not self._pre.has_block:
                self._pre.has_block = True
                self._block = _OpenBlock(pre=self._pre, start=start, end=end, attrs=list(attrs))
            elif not void:
                self._pre.depth += 1
            return

        if tag == "pre":
            self._pre = _OpenPre(start=start, end=end, attrs=list(attrs), line=self.getpos()[0])

    def handle_startendtag(self, tag: str, attrs: Attrs) -> None:
        self._mark_markup()

    # Comments and declarations are invisible markup, not block text.
    def handle_comment(self, data: str) -> None:
        self._mark_markup()

    def handle_decl(self, decl: str) -> None:
        self._mark_markup()

    def handle_pi(self, data: str) -> None:
        self._mark_markup()

    def unknown_decl(self, data: str) -> None:
        self._mark_markup()

    def _mark_markup(self) -> None:
        if self._block is not None:
            self._block.has_children = True

    def handle_endtag(self, tag: str) -> None:
        block = self._block
        if block is not None:
            if tag == "pre":
                raise MalformedHTMLError(
                    f"line {self.getpos()[0]}: </pre> closes an open code block"
                )
            if tag == "code" and block.depth == 0:
                pre = block.pre
                self.blocks.append(
                    CodeBlock(
                        line=pre.line,
                        pre_start=pre.start,
                        pre_end=pre.end,
                        pre_attrs=pre.attrs,
                        code_start=block.start,
                        code_end=block.end,
                        code_attrs=block.attrs,
                        content_end=self._offset(),
                        has_children=block.has_children,
                    )
                )
                self._block = None
            else:
                block.has_children = True
                block.depth = max(0, block.depth - 1)
            return

        if self._pre is not None:
            if tag == "pre":
                self._pre = None
            else:
                self._pre.depth = max(0, self._pre.depth - 1)

    def finish(self) -> None:
        if self._block is not None:
            raise MalformedHTMLError(
                f"line {self._block.pre.line}: code block is never closed"
            )
