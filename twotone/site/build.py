"""Static site generator: Markdown content tree -> unstyled HTML pages."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..config import STYLESHEET_NAME
from .templates import PageRow, html_doc, link, pages_index

CONTENT_SUFFIXES = (".md", ".markdown")


@dataclass(frozen=True)
class ContentPage:
    source: Path
    rel_html: Path
    title: str
    summary: str
    markdown: str


def generate_site(content_dir: Path, out_dir: Path, title: str = "twotone") -> dict[str, Any]:
    """Render every Markdown file under ``content_dir`` into ``out_dir``.

    Code fences become ``<pre><code class="language-X">`` blocks with the
    source left unstyled; the highlight stage colors them afterwards.
    """
    content_dir = content_dir.resolve()
    out_dir = out_dir.resolve()
    if not content_dir.is_dir():
        raise ValueError(f"content directory does not exist: {content_dir}")
    out_dir.mkdir(parents=True, exist_ok=True)

    pages = _scan_content(content_dir)
    code_blocks = 0

    for page in pages:
        body, blocks = _markdown_to_html(page.markdown)
        code_blocks += blocks
        depth = len(page.rel_html.parts) - 1
        prefix = "../" * depth
        html = html_doc(
            title=f"{page.title} · {title}",
            header_left=link(f"{prefix}index.html", f"← {title}"),
            body=body,
            css_href=f"{prefix}{STYLESHEET_NAME}",
        )
        target = out_dir / page.rel_html
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(html, encoding="utf-8")

    # Root index, unless the content provides its own
    if not any(p.rel_html == Path("index.html") for p in pages):
        rows = [
            PageRow(title=p.title, href=p.rel_html.as_posix(), summary=p.summary)
            for p in sorted(pages, key=lambda p: p.rel_html.as_posix())
        ]
        html = html_doc(
            title=title,
            header_left=link("index.html", title.upper()),
            body=pages_index(rows),
            css_href=STYLESHEET_NAME,
        )
        (out_dir / "index.html").write_text(html, encoding="utf-8")

    return {
        "pages": len(pages),
        "code_blocks": code_blocks,
        "out_dir": str(out_dir),
    }


def _scan_content(content_dir: Path) -> list[ContentPage]:
    pages: list[ContentPage] = []
    for path in sorted(content_dir.rglob("*")):
        if not path.is_file() or path.suffix.lower() not in CONTENT_SUFFIXES:
            continue
        md = path.read_text(encoding="utf-8")
        rel = path.relative_to(content_dir).with_suffix(".html")
        pages.append(
            ContentPage(
                source=path,
                rel_html=rel,
                title=_title_of(md) or path.stem.replace("-", " ").title(),
                summary=_summary_of(md),
                markdown=md,
            )
        )
    return pages


def _title_of(md: str) -> str | None:
    for line in md.splitlines():
        s = line.strip()
        if s.startswith("# "):
            return s[2:].strip()
    return None


def _summary_of(md: str) -> str:
    in_code = False
    for line in md.splitlines():
        s = line.strip()
        if s.startswith(("```", "~~~")):
            in_code = not in_code
            continue
        if in_code or not s or s.startswith(("#", ">", "-", "*", "|")):
            continue
        return s if len(s) <= 140 else s[:137].rstrip() + "..."
    return ""


_FENCE = re.compile(r"^(`{3,}|~{3,})\s*([\w+#.-]*)")


def _markdown_to_html(md: str) -> tuple[str, int]:
    """Minimal Markdown -> HTML converter; returns (html, code block count)."""
    md = md.replace("\r\n", "\n").replace("\r", "\n")
    lines = md.split("\n")

    out: list[str] = []
    para: list[str] = []
    blocks = 0

    def flush_paragraph() -> None:
        text = " ".join(s.strip() for s in para if s.strip())
        if text:
            out.append(f"<p>{_inline(text)}</p>")
        para.clear()

    i = 0
    while i < len(lines):
        line = lines[i]
        stripped = line.strip()

        fence = _FENCE.match(stripped)
        if fence:
            flush_paragraph()
            marker, lang = fence.group(1), fence.group(2)
            code: list[str] = []
            i += 1
            while i < len(lines) and not lines[i].strip().startswith(marker):
                code.append(lines[i])
                i += 1
            i += 1  # closing fence
            cls = f' class="language-{_escape_attr(lang)}"' if lang else ""
            out.append(f"<pre><code{cls}>{_escape_block(chr(10).join(code))}</code></pre>")
            blocks += 1
            continue

        if stripped in {"---", "***"}:
            flush_paragraph()
            out.append("<hr>")
            i += 1
            continue

        if stripped.startswith("#"):
            flush_paragraph()
            level = min(len(stripped) - len(stripped.lstrip("#")), 6)
            out.append(f"<h{level}>{_inline(stripped[level:].strip())}</h{level}>")
            i += 1
            continue

        if stripped.startswith(("- ", "* ")):
            flush_paragraph()
            out.append("<ul>")
            while i < len(lines) and lines[i].strip().startswith(("- ", "* ")):
                out.append(f"<li>{_inline(lines[i].strip()[2:].strip())}</li>")
                i += 1
            out.append("</ul>")
            continue

        if re.match(r"^\d+\.\s+", stripped):
            flush_paragraph()
            out.append("<ol>")
            while i < len(lines) and re.match(r"^\d+\.\s+", lines[i].strip()):
                s = lines[i].strip()
                out.append(f"<li>{_inline(s[s.find('.') + 1 :].lstrip())}</li>")
                i += 1
            out.append("</ol>")
            continue

        if stripped.startswith(">"):
            flush_paragraph()
            out.append("<blockquote>")
            while i < len(lines) and lines[i].lstrip().startswith(">"):
                q = lines[i].lstrip()[1:].strip()
                if q:
                    out.append(f"<p>{_inline(q)}</p>")
                i += 1
            out.append("</blockquote>")
            continue

        if not stripped:
            flush_paragraph()
        else:
            para.append(line)
        i += 1

    flush_paragraph()
    return "\n".join(out), blocks


def _escape_block(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _escape_attr(text: str) -> str:
    return _escape_block(text).replace('"', "&quot;")


def _inline(text: str) -> str:
    # Placeholder-based inline renderer (escape-by-default).
    stashed: list[str] = []

    def stash(html: str) -> str:
        stashed.append(html)
        return f"@@{len(stashed) - 1}@@"

    text = re.sub(r"`([^`]+)`", lambda m: stash(f"<code>{_escape_block(m.group(1))}</code>"), text)

    def _link(m: re.Match[str]) -> str:
        href = _safe_href(m.group(2))
        if not href:
            return m.group(1)
        return stash(f'<a href="{_escape_attr(href)}">{_escape_block(m.group(1))}</a>')

    text = re.sub(r"\[([^\]]+)\]\(([^)]+)\)", _link, text)
    text = re.sub(
        r"\*\*([^*]+)\*\*", lambda m: stash(f"<strong>{_escape_block(m.group(1))}</strong>"), text
    )

    escaped = _escape_block(text)
    for idx, html in enumerate(stashed):
        escaped = escaped.replace(f"@@{idx}@@", html)
    return escaped


def _safe_href(href: str) -> str | None:
    cleaned = href.strip()
    if not cleaned or cleaned.lower().startswith(("javascript:", "data:", "vbscript:")):
        return None
    if cleaned.endswith((".md", ".markdown")) and "://" not in cleaned:
        cleaned = cleaned.rsplit(".", 1)[0] + ".html"
    return cleaned
