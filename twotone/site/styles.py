"""Stylesheet compiler for generated sites.

Emits only the utility rules whose class names appear in the generated
markup, plus two palettes as custom properties. The dark palette applies
while the root element carries the marker class.
"""

from __future__ import annotations

from html.parser import HTMLParser
from pathlib import Path

from ..config import HTML_SUFFIXES, MARKER_CLASS, STYLESHEET_NAME
from ..highlight.render import highlight_css
from ..highlight.theme import ThemePair

PALETTES = {
    "light": {
        "--bg": "#f8f8f8",
        "--fg": "#1a1a1a",
        "--muted": "#6a6a6a",
        "--border": "#e3e3e3",
        "--link": "#0b5ed7",
        "--code-bg": "#f1f1f1",
    },
    "dark": {
        "--bg": "#111315",
        "--fg": "#e6e6e6",
        "--muted": "#9a9a9a",
        "--border": "#2c2f33",
        "--link": "#6ea8fe",
        "--code-bg": "#1c1f23",
    },
}

BASE = r"""
:root {
  --mono: ui-monospace, "SF Mono", "Consolas", "Liberation Mono", monospace;
  --page-max: 980px;
}

body {
  font-family: var(--mono);
  font-size: 15px;
  line-height: 1.6;
  max-width: var(--page-max);
  margin: 0 auto;
  padding: 2.25rem 1.5rem 3rem;
  background: var(--bg);
  color: var(--fg);
}

a { color: var(--link); text-decoration: none; }
a:hover { text-decoration: underline; text-underline-offset: 0.15em; }

header {
  display: flex;
  justify-content: space-between;
  align-items: baseline;
  border-bottom: 1px solid var(--border);
  padding-bottom: 0.75rem;
  margin-bottom: 1.5rem;
}

h1, h2, h3 { margin: 0 0 0.75rem 0; font-weight: 600; }
h1 { font-size: 18px; }
h2 { font-size: 13px; color: var(--muted); letter-spacing: 0.02em; }

pre {
  overflow-x: auto;
  margin: 0.75rem 0;
  padding: 0.5rem 0.75rem;
  border: 1px solid var(--border);
  background: var(--code-bg);
}

code { font-family: var(--mono); }
p code, li code { background: var(--code-bg); padding: 0.1rem 0.25rem; }

blockquote {
  margin: 0.75rem 0;
  padding: 0 0.75rem;
  border-left: 2px solid var(--border);
  color: var(--muted);
}

hr { border: none; border-top: 1px solid var(--border); margin: 1rem 0; }
"""

UTILITIES = {
    "muted": ".muted { color: var(--muted); font-size: 13px; }",
    "mono": ".mono { font-family: var(--mono); }",
    "rule": ".rule { border-top: 1px solid var(--border); margin: 1.25rem 0; }",
    "list": "ul.list { list-style: none; padding-left: 0; }",
    "content": ".content { min-height: 60vh; }",
    "toggle": (
        ".toggle { font: inherit; color: var(--muted); background: none; "
        "border: 1px solid var(--border); cursor: pointer; padding: 0 0.4rem; }"
    ),
}


def compile_styles(class_names: set[str], pair: ThemePair, marker_class: str = MARKER_CLASS) -> str:
    """Build the stylesheet for the given set of used class names."""
    parts = [
        _palette_block(":root", PALETTES["light"]),
        _palette_block(f"html.{marker_class}", PALETTES["dark"]),
        BASE.strip(),
    ]
    for name in sorted(class_names):
        rule = UTILITIES.get(name)
        if rule:
            parts.append(rule)
    parts.append(highlight_css(pair, marker_class).strip())
    return "\n\n".join(parts) + "\n"


def collect_class_names(root: Path) -> set[str]:
    """Collect every class name used by HTML files under ``root``."""
    collector = _ClassCollector()
    for path in sorted(root.rglob("*")):
        if path.is_file() and path.suffix.lower() in HTML_SUFFIXES:
            collector.feed(path.read_text(encoding="utf-8", errors="replace"))
            collector.close()
            collector.reset()
    return collector.names


def write_stylesheet(out_dir: Path, pair: ThemePair) -> Path:
    css = compile_styles(collect_class_names(out_dir), pair)
    path = out_dir / STYLESHEET_NAME
    path.write_text(css, encoding="utf-8")
    return path


def _palette_block(selector: str, values: dict[str, str]) -> str:
    lines = [f"{selector} {{"]
    lines.extend(f"  {k}: {v};" for k, v in values.items())
    lines.append("}")
    return "\n".join(lines)


class _ClassCollector(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.names: set[str] = set()

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        for name, value in attrs:
            if name == "class" and value:
                self.names.update(value.split())
