"""
notefilter - filter-box search for note collections

A small query language for the search box above a note list. A raw query
such as '#project/alpha OR #status/green' or
'folder:/work/meetings ext:md @thisweek' is tokenized, parsed into an AST
and evaluated against read-only metadata snapshots of the notes.

Example Usage:
    >>> from notefilter import NoteRecord, QuerySession
    >>> notes = [NoteRecord.from_path('work/standup.md', tags=('project/alpha',))]
    >>> QuerySession().filter('#project', notes)
    [NoteRecord('work/standup.md')]
"""

__version__ = "0.3.0"
__author__ = "notefilter Contributors"

# Configuration
from notefilter.config import FilterConfig, get_config, init_config

# Models
from notefilter.models import NoteRecord, NoteLoadError, load_notes

# Query
from notefilter.query import (
    Query,
    QueryMode,
    QueryParser,
    QuerySession,
    SearchProvider,
    matches,
    parse_query,
    tokenize,
    update_query_with_tag,
    update_query_with_property,
)

__all__ = [
    # Config
    "FilterConfig",
    "get_config",
    "init_config",
    # Models
    "NoteRecord",
    "NoteLoadError",
    "load_notes",
    # Query
    "Query",
    "QueryMode",
    "QueryParser",
    "QuerySession",
    "SearchProvider",
    "matches",
    "parse_query",
    "tokenize",
    "update_query_with_tag",
    "update_query_with_property",
]
