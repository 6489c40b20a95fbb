"""
Query session: caches the parsed query for the search box and runs it.

The host calls filter() after its own debounce with the current raw text and
a snapshot of note records. Re-renders with unchanged text reuse the cached
parse. The cache also rolls over when the local day changes, so '@today'
keeps meaning today.

When the host routes search to another full-text engine, search() hands the
raw text to that SearchProvider and narrows its path set with a scope query
evaluated by the same matches() over the same snapshot.
"""

import logging
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional, Sequence, Tuple

from .ast import Query
from .dates import DateField, DayOrder, day_first
from .evaluator import filter_notes, matches
from .parser import ParseContext, QueryParser

if TYPE_CHECKING:
    from notefilter.config import FilterConfig
    from notefilter.models import NoteRecord

logger = logging.getLogger(__name__)


class SearchProvider(ABC):
    """
    External full-text search engine.

    Receives the raw query string and returns the paths of matching notes.
    The contract is string in, path set out, whichever engine is active.
    """

    name: str = "external"

    @abstractmethod
    def search(self, raw_text: str) -> Iterable[str]:
        """Return paths of notes matching the raw query."""
        pass


class QuerySession:
    """
    Single-entry parse cache plus evaluation over note snapshots.

    Example:
        session = QuerySession()
        visible = session.filter('#work ext:md', notes)
    """

    def __init__(self,
                 default_date_field: DateField = DateField.MODIFIED,
                 day_order: DayOrder = day_first,
                 clock: Callable[[], datetime] = datetime.now,
                 provider: Optional[SearchProvider] = None):
        """
        Initialize a session.

        Args:
            default_date_field: Field for '@' filters without 'c:'/'m:'
            day_order: Strategy for ambiguous numeric dates
            clock: Source of 'now' (injectable for tests)
            provider: Optional external engine used by search()
        """
        self.default_date_field = default_date_field
        self.day_order = day_order
        self.clock = clock
        self.provider = provider
        self._cache_key: Optional[Tuple[str, date]] = None
        self._cached: Optional[Query] = None

    @classmethod
    def from_config(cls, config: "FilterConfig",
                    provider: Optional[SearchProvider] = None,
                    clock: Callable[[], datetime] = datetime.now) -> "QuerySession":
        """Create a session from configuration settings."""
        return cls(
            default_date_field=config.date_field(),
            day_order=config.day_order(),
            clock=clock,
            provider=provider,
        )

    def _parser(self, now: datetime) -> QueryParser:
        return QueryParser(ParseContext(
            now=now,
            default_date_field=self.default_date_field,
            day_order=self.day_order,
        ))

    def query(self, raw_text: str) -> Query:
        """
        Parse raw text, reusing the cached Query when the text is unchanged.

        Args:
            raw_text: Search box contents

        Returns:
            Parsed query (also useful for UI affordances)
        """
        raw_text = raw_text or ''
        now = self.clock()
        key = (raw_text, now.date())

        if self._cached is not None and self._cache_key == key:
            logger.debug(f"Query cache hit: {raw_text!r}")
            return self._cached

        parsed = self._parser(now).parse_query(raw_text)
        logger.debug(f"Parsed {raw_text!r} as {parsed.mode.value} query")
        self._cache_key = key
        self._cached = parsed
        return parsed

    def invalidate(self) -> None:
        """Drop the cached parse."""
        self._cache_key = None
        self._cached = None

    def filter(self, raw_text: str, notes: Sequence["NoteRecord"]) -> List["NoteRecord"]:
        """
        Return the notes matching raw_text, in snapshot order.

        Args:
            raw_text: Search box contents
            notes: Snapshot of note records captured by the caller

        Returns:
            Matching subsequence of notes
        """
        parsed = self.query(raw_text)
        if parsed.is_empty:
            return list(notes)
        return filter_notes(parsed.ast, notes)

    def search(self, raw_text: str, notes: Sequence["NoteRecord"],
               scope: Optional[str] = None) -> List["NoteRecord"]:
        """
        Search with the configured provider, limited to a scope.

        Without a provider this is filter() narrowed by the scope.

        Args:
            raw_text: Search box contents
            notes: Snapshot of note records captured by the caller
            scope: Optional query for the current folder/tag selection,
                   e.g. 'folder:/work' or '#project'

        Returns:
            Matching notes in snapshot order
        """
        scope_ast = self._parser(self.clock()).parse_query(scope).ast if scope else None

        if self.provider is None:
            results = self.filter(raw_text, notes)
            if scope_ast is None:
                return results
            return [note for note in results if matches(scope_ast, note)]

        paths = list(self.provider.search(raw_text))
        logger.debug(f"Provider {self.provider.name} returned {len(paths)} paths for {raw_text!r}")

        if scope_ast is None:
            allowed = set(paths)
            return [note for note in notes if note.path in allowed]
        return filter_notes(scope_ast, notes, paths=paths)
