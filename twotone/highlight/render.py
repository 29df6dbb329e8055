"""Dual-palette span rendering.

Every token is colored by both styles of a Theme Pair. The default palette
goes into plain declarations; the alternate palette goes into ``--tt-<color>``
custom properties that ``highlight_css`` activates behind the root marker
class. Switching palettes then needs no script and no second stylesheet.
"""

from __future__ import annotations

from collections.abc import Iterable
from html import escape

from ..config import MARKER_CLASS, PRE_CLASS
from .theme import Palette, ThemePair, TokenStyle, get_palette
from .tokens import Token

DualStyle = tuple[TokenStyle, TokenStyle]


def palettes(pair: ThemePair) -> tuple[Palette, Palette]:
    """Return (default, alternate) palettes of a Theme Pair."""
    return (
        get_palette(pair.theme_for(pair.default_color)),
        get_palette(pair.theme_for(pair.alternate_color)),
    )


def render_spans(tokens: Iterable[Token], pair: ThemePair) -> str:
    """Render a token stream as dual-colored ``<span>`` markup.

    Adjacent tokens with the same dual style share one span; whitespace-only
    runs are emitted as bare text.
    """
    default, alternate = palettes(pair)
    alt = pair.alternate_color

    out: list[str] = []
    run: list[str] = []
    run_style: DualStyle | None = None

    def flush() -> None:
        if not run:
            return
        text = escape("".join(run), quote=False)
        if run_style is None:
            out.append(text)
        else:
            out.append(f'<span style="{span_style(run_style, alt)}">{text}</span>')
        run.clear()

    for token in tokens:
        if token.text.isspace():
            style = None
        else:
            style = (default.style_for(token.ttype), alternate.style_for(token.ttype))
        if style != run_style:
            flush()
            run_style = style
        run.append(token.text)
    flush()

    return "".join(out)


def span_style(style: DualStyle, alt: str) -> str:
    primary, secondary = style
    decls = [f"color:{primary.color}"]
    if primary.italic or secondary.italic:
        decls.append(f"font-style:{_font_style(primary)}")
    if primary.bold or secondary.bold:
        decls.append(f"font-weight:{_font_weight(primary)}")
    decls.append(f"--tt-{alt}:{secondary.color}")
    if primary.italic or secondary.italic:
        decls.append(f"--tt-{alt}-font-style:{_font_style(secondary)}")
    if primary.bold or secondary.bold:
        decls.append(f"--tt-{alt}-font-weight:{_font_weight(secondary)}")
    return ";".join(decls)


def pre_style(pair: ThemePair) -> str:
    """Inline background/foreground declarations for a processed ``<pre>``."""
    default, alternate = palettes(pair)
    alt = pair.alternate_color
    return (
        f"background-color:{default.background};color:{default.foreground};"
        f"--tt-{alt}-bg:{alternate.background};--tt-{alt}:{alternate.foreground}"
    )


def highlight_css(pair: ThemePair, marker_class: str = MARKER_CLASS) -> str:
    """CSS rules that switch processed blocks to the alternate palette."""
    alt = pair.alternate_color
    if alt == "dark":
        gate = f"html.{marker_class}"
    else:
        gate = f"html:not(.{marker_class})"
    return (
        f"{gate} pre.{PRE_CLASS} {{\n"
        f"  background-color: var(--tt-{alt}-bg) !important;\n"
        f"  color: var(--tt-{alt}) !important;\n"
        "}\n"
        f"{gate} pre.{PRE_CLASS} span {{\n"
        f"  color: var(--tt-{alt}) !important;\n"
        f"  font-style: var(--tt-{alt}-font-style) !important;\n"
        f"  font-weight: var(--tt-{alt}-font-weight) !important;\n"
        "}\n"
    )


def _font_style(style: TokenStyle) -> str:
    return "italic" if style.italic else "normal"


def _font_weight(style: TokenStyle) -> str:
    return "bold" if style.bold else "normal"
