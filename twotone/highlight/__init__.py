"""Highlight Post-Processor: dual-palette syntax highlighting of emitted pages."""

from .document import CodeBlock, MalformedHTMLError, PageResult, find_code_blocks, highlight_html
from .process import (
    FileOutcome,
    HighlightReport,
    ResourceError,
    process_directory,
    process_directory_async,
    write_report,
)
from .render import highlight_css, pre_style, render_spans
from .theme import ConfigError, ThemePair, load_theme_pair
from .tokens import Token, resolve_lexer, tokenize

__all__ = [
    "CodeBlock",
    "ConfigError",
    "FileOutcome",
    "HighlightReport",
    "MalformedHTMLError",
    "PageResult",
    "ResourceError",
    "ThemePair",
    "Token",
    "find_code_blocks",
    "highlight_css",
    "highlight_html",
    "load_theme_pair",
    "pre_style",
    "process_directory",
    "process_directory_async",
    "render_spans",
    "resolve_lexer",
    "tokenize",
    "write_report",
]
