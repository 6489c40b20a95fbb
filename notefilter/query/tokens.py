"""
Tokenizer for the search language.

Splits a raw query on whitespace, keeping double-quoted segments together,
and tags each piece with its kind from its leading sigil:

    #tag  .key  .key=value  @date  has:task  folder:path  ext:md  AND  OR

A '-' glued to the front of a piece becomes a separate NEGATION token.
Offsets are positions in the raw string, so a UI can map tokens back to
the input box.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple


class TokenKind(Enum):
    """Kinds of tokens produced by the tokenizer."""
    NAME = "name"
    TAG = "tag"
    PROPERTY = "property"
    DATE = "date"
    TASK = "task"
    FOLDER = "folder"
    EXTENSION = "extension"
    CONNECTOR = "connector"
    NEGATION = "negation"


@dataclass(frozen=True)
class Token:
    """
    One token of a raw query.

    Attributes:
        kind: Token kind
        text: Raw text of the token (quotes and escapes kept)
        start: Offset of the first character in the raw query
        end: Offset just past the last character
    """
    kind: TokenKind
    text: str
    start: int
    end: int

    def __repr__(self):
        return f"Token({self.kind.name} {self.text!r} @{self.start}:{self.end})"


CONNECTOR_WORDS = ('AND', 'OR')

TASK_FILTER = 'has:task'
FOLDER_PREFIX = 'folder:'
EXTENSION_PREFIX = 'ext:'


def split_segments(raw: str) -> List[Tuple[int, int, str]]:
    """Split raw text on whitespace outside double quotes."""
    segments = []
    current: List[str] = []
    start = None
    in_quotes = False
    i = 0

    while i < len(raw):
        char = raw[i]

        if char == '\\' and i + 1 < len(raw):
            if start is None:
                start = i
            current.append(raw[i:i + 2])
            i += 2
            continue

        if char.isspace() and not in_quotes:
            if start is not None:
                segments.append((start, i, ''.join(current)))
                current = []
                start = None
            i += 1
            continue

        if char == '"':
            in_quotes = not in_quotes

        if start is None:
            start = i
        current.append(char)
        i += 1

    # An unterminated quote simply runs to the end of input
    if start is not None:
        segments.append((start, len(raw), ''.join(current)))

    return segments


def classify(text: str) -> TokenKind:
    """Determine the kind of a token from its text (without negation)."""
    lowered = text.lower()

    if text in CONNECTOR_WORDS:
        return TokenKind.CONNECTOR
    if text.startswith('#'):
        return TokenKind.TAG
    if text.startswith('.') and len(text) > 1:
        return TokenKind.PROPERTY
    if text.startswith('@'):
        return TokenKind.DATE
    if lowered == TASK_FILTER:
        return TokenKind.TASK
    if lowered.startswith(FOLDER_PREFIX):
        return TokenKind.FOLDER
    if lowered.startswith(EXTENSION_PREFIX):
        return TokenKind.EXTENSION
    return TokenKind.NAME


def tokenize(raw: str) -> List[Token]:
    """
    Split a raw query into tokens.

    Args:
        raw: Query text as typed by the user

    Returns:
        Tokens in input order. Never raises.

    Example:
        tokenize('-#draft ."Reading Status"="In Progress"')
        -> [Token(NEGATION '-'), Token(TAG '#draft'),
            Token(PROPERTY '."Reading Status"="In Progress"')]
    """
    tokens = []

    for start, end, text in split_segments(raw or ''):
        if text.startswith('-') and len(text) > 1:
            tokens.append(Token(TokenKind.NEGATION, '-', start, start + 1))
            body = text[1:]
            kind = classify(body)
            if kind == TokenKind.CONNECTOR:
                # '-AND' is not an operator
                kind = TokenKind.NAME
            tokens.append(Token(kind, body, start + 1, end))
        else:
            tokens.append(Token(classify(text), text, start, end))

    return tokens


# =============================================================================
# Quoting helpers
# =============================================================================

def unquote(text: str) -> str:
    """
    Remove double quotes and resolve backslash escapes.

    Examples:
        unquote('"In Progress"')       -> 'In Progress'
        unquote('"He said \\"ok\\""')  -> 'He said "ok"'
        unquote('Status\\=Phase')      -> 'Status=Phase'
    """
    result = []
    i = 0
    while i < len(text):
        char = text[i]
        if char == '\\' and i + 1 < len(text):
            result.append(text[i + 1])
            i += 2
            continue
        if char != '"':
            result.append(char)
        i += 1
    return ''.join(result)


def split_unquoted(text: str, separator: str) -> Tuple[str, Optional[str]]:
    """
    Split raw text at the first separator outside quotes and escapes.

    Returns:
        (left, right) with raw text kept, or (text, None) when there is
        no separator
    """
    in_quotes = False
    i = 0
    while i < len(text):
        char = text[i]
        if char == '\\':
            i += 2
            continue
        if char == '"':
            in_quotes = not in_quotes
        elif char == separator and not in_quotes:
            return text[:i], text[i + 1:]
        i += 1
    return text, None


def quote(text: str) -> str:
    """
    Quote a key or value so the tokenizer reads it back unchanged.

    Whitespace and '"' force double quotes; '"', '=' and '\\' are escaped.
    """
    escaped = text.replace('\\', '\\\\').replace('"', '\\"').replace('=', '\\=')
    if any(c.isspace() for c in text) or '"' in text:
        return f'"{escaped}"'
    return escaped
