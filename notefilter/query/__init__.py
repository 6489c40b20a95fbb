"""
Notefilter Query Language - filter-box search over note metadata.

This module provides the search language typed into a note list's filter box:
- Tags with hierarchy (#project matches #project/alpha)
- Frontmatter properties (.status, ."Reading Status"="In Progress")
- Dates (@today, @c:2026-W05, @2026-02-01..2026-02-07)
- Folders, extensions and open tasks (folder:/work, ext:md, has:task)
- Boolean AND / OR between tag and property terms

Example usage:

    from notefilter.query import QuerySession
    from notefilter.models import load_notes

    notes = load_notes('snapshot.yaml')
    session = QuerySession()

    # Mixed query: every term must match
    for note in session.filter('folder:/work/meetings ext:md @thisweek', notes):
        print(note.path)

    # Pure query: AND binds tighter than OR
    q = session.query('#a OR #b AND #c')
    print(q.mode)  # QueryMode.PURE

    # Toggle a tag from a tag pane click
    from notefilter.query import update_query_with_tag, Operator

    update = update_query_with_tag('#project/alpha', 'status/green', Operator.OR)
    print(update.query)  # '#project/alpha OR #status/green'
"""

# Tokens
from .tokens import (
    TokenKind,
    Token,
    tokenize,
    unquote,
    quote,
)

# Dates
from .dates import (
    DateField,
    DateRange,
    DayOrder,
    day_first,
    month_first,
    locale_day_order,
    resolve_date,
)

# Query AST
from .ast import (
    Operator,
    QueryMode,
    NameTerm,
    TagTerm,
    PropertyTerm,
    TaskFilter,
    FolderFilter,
    ExtensionFilter,
    DateFilter,
    Connector,
    Conjunction,
    Term,
    Node,
    TERM_TYPES,
    NODE_TYPES,
    Query,
    iter_terms,
    has_active_criteria,
    needs_tag_lookup,
    needs_property_lookup,
    describe,
)

# Parser
from .parser import (
    ParseContext,
    QueryParser,
    classify_tokens,
    parse,
    parse_query,
)

# Evaluator
from .evaluator import (
    HANDLED_NODE_TYPES,
    matches,
    filter_notes,
)

# Session
from .session import (
    SearchProvider,
    QuerySession,
)

# Raw query editing
from .mutate import (
    QueryUpdate,
    format_property,
    update_query_with_tag,
    update_query_with_property,
)

__all__ = [
    # Tokens
    'TokenKind',
    'Token',
    'tokenize',
    'unquote',
    'quote',

    # Dates
    'DateField',
    'DateRange',
    'DayOrder',
    'day_first',
    'month_first',
    'locale_day_order',
    'resolve_date',

    # Query AST
    'Operator',
    'QueryMode',
    'NameTerm',
    'TagTerm',
    'PropertyTerm',
    'TaskFilter',
    'FolderFilter',
    'ExtensionFilter',
    'DateFilter',
    'Connector',
    'Conjunction',
    'Term',
    'Node',
    'TERM_TYPES',
    'NODE_TYPES',
    'Query',
    'iter_terms',
    'has_active_criteria',
    'needs_tag_lookup',
    'needs_property_lookup',
    'describe',

    # Parser
    'ParseContext',
    'QueryParser',
    'classify_tokens',
    'parse',
    'parse_query',

    # Evaluator
    'HANDLED_NODE_TYPES',
    'matches',
    'filter_notes',

    # Session
    'SearchProvider',
    'QuerySession',

    # Raw query editing
    'QueryUpdate',
    'format_property',
    'update_query_with_tag',
    'update_query_with_property',
]
