"""HTML templates for the static site generator."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from html import escape

from .resolver import resolver_tag


def html_doc(title: str, header_left: str, body: str, css_href: str) -> str:
    # Charset stays within the first 1024 bytes; the resolver follows it and
    # runs before any stylesheet is fetched, so the first paint has the right palette.
    return (
        "<!doctype html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '<meta charset="utf-8">\n'
        f"{resolver_tag()}\n"
        '<meta name="viewport" content="width=device-width, initial-scale=1">\n'
        f"<title>{escape(title)}</title>\n"
        f'<link rel="stylesheet" href="{escape(css_href, quote=True)}">\n'
        "</head>\n"
        "<body>\n"
        "<header>\n"
        f"<div>{header_left}</div>\n"
        f"<nav>{theme_toggle()}</nav>\n"
        "</header>\n"
        f'<main class="content">\n{body}\n</main>\n'
        "</body>\n"
        "</html>\n"
    )


def theme_toggle() -> str:
    return '<button type="button" class="toggle" data-twotone-toggle aria-label="Toggle color scheme">◐</button>'


def link(href: str, text: str) -> str:
    return f'<a href="{escape(href, quote=True)}">{escape(text)}</a>'


def h2(text: str) -> str:
    return f"<h2>{escape(text)}</h2>"


@dataclass(frozen=True)
class PageRow:
    title: str
    href: str
    summary: str


def pages_index(rows: Iterable[PageRow]) -> str:
    lines = [h2("PAGES"), '<ul class="list">']
    for r in rows:
        summary = f'<div class="muted">{escape(r.summary)}</div>' if r.summary else ""
        lines.append(f"<li>{link(r.href, r.title)}{summary}</li>")
    lines.append("</ul>")
    return "\n".join(lines)
