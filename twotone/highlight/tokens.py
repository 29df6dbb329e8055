"""Grammar lookup and tokenization of Code Block text."""

from __future__ import annotations

from dataclasses import dataclass

from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name
from pygments.token import STANDARD_TYPES, _TokenType
from pygments.util import ClassNotFound


class TokenizeError(Exception):
    """Raised when a token stream does not reproduce its source text."""


@dataclass(frozen=True)
class Token:
    text: str
    ttype: _TokenType

    @property
    def css_class(self) -> str:
        """Short Pygments class of the token type (e.g. ``k`` for Keyword)."""
        ttype = self.ttype
        while ttype not in STANDARD_TYPES and ttype.parent is not None:
            ttype = ttype.parent
        return STANDARD_TYPES.get(ttype, "")


def resolve_lexer(language: str | None) -> Lexer | None:
    """Return a Pygments lexer for a language tag, or None when unknown."""
    if not language:
        return None
    try:
        # Keep the source text exactly as authored.
        return get_lexer_by_name(language.strip().lower(), stripnl=False, stripall=False, ensurenl=False)
    except ClassNotFound:
        return None


def tokenize(code: str, lexer: Lexer) -> list[Token]:
    """Split ``code`` into tokens whose texts concatenate back to ``code``.

    Lexers are driven through ``get_tokens_unprocessed`` so that newline
    normalization and tab expansion never touch the source. A trailing
    newline is appended for the lexer's benefit (line-comment rules expect
    one) and removed again from the final token.
    """
    if not code:
        return []

    appended = not code.endswith("\n")
    text = code + "\n" if appended else code

    tokens: list[Token] = []
    for _, ttype, value in lexer.get_tokens_unprocessed(text):
        if value:
            tokens.append(Token(text=value, ttype=ttype))

    if appended and tokens:
        last = tokens.pop()
        if not last.text.endswith("\n"):
            raise TokenizeError("lexer did not consume the trailing newline")
        if len(last.text) > 1:
            tokens.append(Token(text=last.text[:-1], ttype=last.ttype))

    if "".join(t.text for t in tokens) != code:
        raise TokenizeError(f"{lexer.name} lexer altered the source text")

    return tokens
