"""
Editing helpers for raw query strings.

UI actions such as "add tag with OR" rebuild the raw text and submit it
again; they never modify a parsed AST. A term that is already present is
removed instead, so the same action toggles.

Expression queries (only tags, properties and connectors) get an AND/OR
connector in front of an added term, and removal cleans up connectors
left dangling. Other queries just append the term and leave every other
word alone, because AND/OR are literal text there.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional

from notefilter.tag_utils import normalize_tag

from .ast import Operator
from .tokens import (
    CONNECTOR_WORDS, TokenKind, classify, quote, split_segments,
    split_unquoted, tokenize, unquote,
)


EXPRESSION_KINDS = frozenset({
    TokenKind.TAG, TokenKind.PROPERTY, TokenKind.CONNECTOR, TokenKind.NEGATION,
})


@dataclass(frozen=True)
class QueryUpdate:
    """Result of toggling a term in a raw query."""
    query: str
    action: str  # 'added', 'removed' or 'unchanged'
    changed: bool


def _is_expression(raw: str) -> bool:
    return all(token.kind in EXPRESSION_KINDS for token in tokenize(raw))


def _is_connector(word: str) -> bool:
    return word in CONNECTOR_WORDS


def _prune_connectors(words: List[str], removed_at: int) -> List[str]:
    """Remove connectors orphaned by deleting the word at removed_at."""
    words = list(words)

    if removed_at > 0 and _is_connector(words[removed_at - 1]):
        del words[removed_at - 1]

    while words and _is_connector(words[0]):
        del words[0]

    i = 0
    while i < len(words) - 1:
        if _is_connector(words[i]) and _is_connector(words[i + 1]):
            del words[i + 1]
        else:
            i += 1

    while words and _is_connector(words[-1]):
        words.pop()

    return words


def _toggle(raw: str, formatted: str, is_target: Callable[[str], bool],
            operator: Operator) -> QueryUpdate:
    trimmed = raw.strip()
    words = [text for _, _, text in split_segments(trimmed)]
    expression = _is_expression(trimmed)

    for index, word in enumerate(words):
        if is_target(word):
            remaining = words[:index] + words[index + 1:]
            if expression:
                remaining = _prune_connectors(remaining, index)
            query = ' '.join(remaining)
            return QueryUpdate(query, 'removed', query != trimmed)

    if not words:
        words = [formatted]
    elif not expression:
        words = words + [formatted]
    elif _is_connector(words[-1]):
        words = words[:-1] + [operator.value, formatted]
    else:
        words = words + [operator.value, formatted]

    query = ' '.join(words)
    return QueryUpdate(query, 'added', query != trimmed)


def update_query_with_tag(raw: str, tag: str,
                          operator: Operator = Operator.AND) -> QueryUpdate:
    """
    Add a tag term to a raw query, or remove it if present.

    Args:
        raw: Current query text
        tag: Tag path, with or without '#'
        operator: Connector used when adding to an expression query

    Returns:
        QueryUpdate with the new query text

    Examples:
        update_query_with_tag('#project/alpha', 'status/green', Operator.OR).query
        -> '#project/alpha OR #status/green'

        update_query_with_tag('#alpha OR #beta OR #gamma', 'beta').query
        -> '#alpha OR #gamma'
    """
    target = normalize_tag(tag)
    if not target:
        return QueryUpdate(raw.strip(), 'unchanged', False)

    def is_target(word: str) -> bool:
        return classify(word) == TokenKind.TAG and normalize_tag(unquote(word[1:])) == target

    return _toggle(raw, '#' + quote(tag.strip().lstrip('#')), is_target, operator)


def format_property(key: str, value: Optional[str] = None) -> str:
    """
    Format a property term for a raw query.

    Examples:
        format_property('status') -> '.status'
        format_property('Reading Status', 'In Progress') -> '."Reading Status"="In Progress"'
    """
    if value:
        return f".{quote(key)}={quote(value)}"
    return f".{quote(key)}"


def update_query_with_property(raw: str, key: str, value: Optional[str] = None,
                               operator: Operator = Operator.AND) -> QueryUpdate:
    """
    Add a property term to a raw query, or remove it if present.

    Keys compare case-insensitively and values exactly, like evaluation.

    Args:
        raw: Current query text
        key: Property key
        value: Property value, or None for a presence filter
        operator: Connector used when adding to an expression query

    Returns:
        QueryUpdate with the new query text
    """
    key = key.strip()
    value = value or None
    if not key:
        return QueryUpdate(raw.strip(), 'unchanged', False)

    def is_target(word: str) -> bool:
        if classify(word) != TokenKind.PROPERTY:
            return False
        key_raw, value_raw = split_unquoted(word[1:], '=')
        word_value = unquote(value_raw) if value_raw is not None else None
        return unquote(key_raw).strip().casefold() == key.casefold() and (word_value or None) == value

    return _toggle(raw, format_property(key, value), is_target, operator)
