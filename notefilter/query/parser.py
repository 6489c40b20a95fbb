"""
Parser for the search language.

Parsing runs in two passes:

1. Classification. A query is PURE when it holds only tag and property
   terms (negated or not) joined by well-placed AND/OR connectors, with at
   least one term. Everything else is MIXED.

2. Tree building under the chosen grammar.

    PURE:  AND binds tighter than OR, adjacent terms are implicitly ANDed.
           '#a OR #b AND #c'  ->  #a OR (#b AND #c)
    MIXED: every term is ANDed in one Conjunction and AND/OR are plain
           words matched against the filename.
           '#work OR ext:md'  ->  [#work & 'OR' & ext:md]

The parser never raises. A token it cannot turn into a filter (a date that
does not resolve, an empty 'folder:', a property without a key) becomes a
NameTerm with the token's raw text. An '@' token that is an unfinished
relative keyword ('@', '@to', '@c:') is dropped while the user types.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from notefilter.tag_utils import normalize_extension, split_path

from .ast import (
    Conjunction, Connector, DateFilter, ExtensionFilter, FolderFilter,
    NameTerm, Node, Operator, PropertyTerm, Query, QueryMode, TagTerm,
    TaskFilter,
)
from .dates import (
    DateField, DayOrder, day_first, is_partial_keyword, resolve_date,
    split_field_prefix,
)
from .tokens import (
    EXTENSION_PREFIX, FOLDER_PREFIX, Token, TokenKind, split_unquoted,
    tokenize, unquote,
)

logger = logging.getLogger(__name__)


# Token kinds allowed in a pure boolean query
PURE_OPERAND_KINDS = frozenset({TokenKind.TAG, TokenKind.PROPERTY})


@dataclass
class ParseContext:
    """
    Caller-supplied inputs that affect parsing.

    Attributes:
        now: Reference time for relative dates and open range ends
        default_date_field: Field used by '@' filters without 'c:'/'m:'
        day_order: Strategy for ambiguous numeric dates like 03/04/2026
    """
    now: datetime = field(default_factory=datetime.now)
    default_date_field: DateField = DateField.MODIFIED
    day_order: DayOrder = day_first


def classify_tokens(tokens: Sequence[Token]) -> QueryMode:
    """
    Decide whether a token stream is a pure boolean query.

    Connectors must sit between two operands; a leading, trailing or
    doubled connector makes the query mixed, so the words are matched
    literally instead.
    """
    has_operand = False
    expect_operand = True

    for token in tokens:
        if token.kind == TokenKind.NEGATION:
            continue
        if token.kind == TokenKind.CONNECTOR:
            if expect_operand:
                return QueryMode.MIXED
            expect_operand = True
            continue
        if token.kind not in PURE_OPERAND_KINDS:
            return QueryMode.MIXED
        has_operand = True
        expect_operand = False

    if not has_operand or expect_operand:
        return QueryMode.MIXED
    return QueryMode.PURE


class QueryParser:
    """
    Builds Query ASTs from token streams.

    Example:
        parser = QueryParser(ParseContext(now=datetime(2026, 2, 4, 12, 0)))
        query = parser.parse_query('folder:/work ext:md @thisweek')
    """

    def __init__(self, context: Optional[ParseContext] = None):
        self.context = context or ParseContext()

    def parse_query(self, raw: str) -> Query:
        """Tokenize and parse a raw query string."""
        raw = raw or ''
        tokens = tokenize(raw)
        mode = classify_tokens(tokens)
        return Query(raw_text=raw, ast=self._parse(tokens, mode), mode=mode)

    def parse(self, tokens: Sequence[Token]) -> Node:
        """Parse a token stream into an AST."""
        return self._parse(tokens, classify_tokens(tokens))

    def _parse(self, tokens: Sequence[Token], mode: QueryMode) -> Node:
        if mode == QueryMode.PURE:
            return self._parse_pure(tokens)
        return self._parse_mixed(tokens)

    # -------------------------------------------------------------------------
    # Grammars
    # -------------------------------------------------------------------------

    def _parse_pure(self, tokens: Sequence[Token]) -> Node:
        """Build an OR-of-ANDs tree; classification guarantees well-formed input."""
        groups: List[Node] = []
        current: Optional[Node] = None
        explicit_and = False
        negated = False

        for token in tokens:
            if token.kind == TokenKind.NEGATION:
                negated = True
                continue

            if token.kind == TokenKind.CONNECTOR:
                if token.text == Operator.OR.value:
                    if current is not None:
                        groups.append(current)
                    current = None
                else:
                    explicit_and = True
                continue

            term = self._build_term(token, negated)
            negated = False
            if term is None:
                continue

            if current is None:
                current = term
            elif explicit_and:
                current = Connector(Operator.AND, current, term)
            elif isinstance(current, Conjunction):
                current = Conjunction(current.terms + (term,))
            else:
                current = Conjunction((current, term))
            explicit_and = False

        if current is not None:
            groups.append(current)

        if not groups:
            return Conjunction()

        result = groups[0]
        for group in groups[1:]:
            result = Connector(Operator.OR, result, group)
        return result

    def _parse_mixed(self, tokens: Sequence[Token]) -> Node:
        """AND every term together; connectors become literal words."""
        terms: List[Node] = []
        negated = False

        for token in tokens:
            if token.kind == TokenKind.NEGATION:
                negated = True
                continue

            term = self._build_term(token, negated)
            negated = False
            if term is not None:
                terms.append(term)

        return Conjunction(tuple(terms))

    # -------------------------------------------------------------------------
    # Terms
    # -------------------------------------------------------------------------

    def _build_term(self, token: Token, negated: bool) -> Optional[Node]:
        """Turn one token into a term, or None to drop it."""
        kind = token.kind
        text = token.text

        if kind == TokenKind.NAME:
            value = unquote(text)
            return NameTerm(value, negated) if value else None

        if kind == TokenKind.CONNECTOR:
            return NameTerm(text, negated)

        if kind == TokenKind.TAG:
            path = unquote(text[1:]).strip().strip('/')
            return TagTerm(path or None, negated)

        if kind == TokenKind.PROPERTY:
            return self._build_property(token, negated)

        if kind == TokenKind.TASK:
            return TaskFilter(negated)

        if kind == TokenKind.FOLDER:
            value = unquote(text[len(FOLDER_PREFIX):]).strip()
            if not value:
                return self._degrade(token, negated, "empty folder")
            rooted = value.startswith('/')
            path = '/'.join(split_path(value))
            return FolderFilter(path, rooted, negated)

        if kind == TokenKind.EXTENSION:
            ext = normalize_extension(unquote(text[len(EXTENSION_PREFIX):]))
            if not ext:
                return self._degrade(token, negated, "empty extension")
            return ExtensionFilter(ext, negated)

        if kind == TokenKind.DATE:
            return self._build_date(token, negated)

        return self._degrade(token, negated, f"unexpected {kind.value} token")

    def _build_property(self, token: Token, negated: bool) -> Node:
        key_raw, value_raw = split_unquoted(token.text[1:], '=')
        key = unquote(key_raw).strip()
        if not key:
            return self._degrade(token, negated, "empty property key")

        value = unquote(value_raw) if value_raw is not None else None
        if value == '':
            # '.status=' while typing the value
            value = None
        return PropertyTerm(key, value, negated)

    def _build_date(self, token: Token, negated: bool) -> Optional[Node]:
        date_field, expression = split_field_prefix(token.text[1:])

        if is_partial_keyword(expression):
            logger.debug(f"Dropping unfinished date token {token.text!r}")
            return None

        date_range = resolve_date(expression, self.context.now, self.context.day_order)
        if date_range is None:
            return self._degrade(token, negated, "unresolvable date")

        return DateFilter(date_field or self.context.default_date_field, date_range, negated)

    def _degrade(self, token: Token, negated: bool, reason: str) -> NameTerm:
        logger.debug(f"Treating {token.text!r} as literal text: {reason}")
        return NameTerm(token.text, negated)


def parse(tokens: Sequence[Token], context: Optional[ParseContext] = None) -> Node:
    """
    Parse a token stream into an AST.

    Convenience function that creates a parser and parses.
    """
    return QueryParser(context).parse(tokens)


def parse_query(raw: str, context: Optional[ParseContext] = None) -> Query:
    """
    Parse a raw query string into a Query.

    Convenience function that creates a parser and parses.
    """
    return QueryParser(context).parse_query(raw)
