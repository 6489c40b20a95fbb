"""
Evaluation of query ASTs against note snapshots.

matches() is a pure function: it reads a NoteRecord, never changes it, and
keeps no state between calls. Each node type has one handler in a dispatch
table that covers the whole AST union.
"""

from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional

from notefilter.tag_utils import (
    any_tag_matches, folder_contains_segments, normalize_extension,
    normalize_folder, normalize_tag, split_path,
)

from .ast import (
    Conjunction, Connector, DateFilter, ExtensionFilter, FolderFilter,
    NameTerm, Node, Operator, PropertyTerm, TagTerm, TaskFilter,
)
from .dates import DateField

if TYPE_CHECKING:
    from notefilter.models import NoteRecord


def _negate(result: bool, negated: bool) -> bool:
    return not result if negated else result


# =============================================================================
# Term handlers
# =============================================================================

def _match_name(term: NameTerm, note: "NoteRecord") -> bool:
    found = term.text.casefold() in (note.filename or '').casefold()
    return _negate(found, term.negated)


def _match_tag(term: TagTerm, note: "NoteRecord") -> bool:
    if term.path is None:
        found = any(normalize_tag(tag) for tag in note.tags)
    else:
        found = any_tag_matches(note.tags, term.path)
    return _negate(found, term.negated)


def _property_values(note: "NoteRecord", key: str) -> List[object]:
    """Values stored under a key, looked up case-insensitively."""
    wanted = key.casefold()
    return [value for k, value in note.properties.items() if k.casefold() == wanted]


def _has_content(value: object) -> bool:
    if value is None:
        return False
    if isinstance(value, (list, tuple, set, frozenset)):
        return any(_has_content(v) for v in value)
    return bool(str(value).strip())


def _equals_value(stored: object, expected: str) -> bool:
    # Case-sensitive on purpose: '.status=Done' does not match 'done'
    if isinstance(stored, (list, tuple, set, frozenset)):
        return any(_equals_value(v, expected) for v in stored)
    return stored == expected


def _match_property(term: PropertyTerm, note: "NoteRecord") -> bool:
    values = _property_values(note, term.key)
    if term.value is None:
        found = any(_has_content(v) for v in values)
    else:
        found = any(_equals_value(v, term.value) for v in values)
    return _negate(found, term.negated)


def _match_task(term: TaskFilter, note: "NoteRecord") -> bool:
    return _negate(bool(note.has_incomplete_task), term.negated)


def _match_folder(term: FolderFilter, note: "NoteRecord") -> bool:
    if term.rooted:
        found = normalize_folder(note.folder_path) == normalize_folder(term.path)
    else:
        found = folder_contains_segments(note.folder_path, split_path(term.path))
    return _negate(found, term.negated)


def _match_extension(term: ExtensionFilter, note: "NoteRecord") -> bool:
    found = normalize_extension(note.extension) == normalize_extension(term.ext)
    return _negate(found, term.negated)


def _match_date(term: DateFilter, note: "NoteRecord") -> bool:
    if term.field == DateField.CREATED:
        value = note.created_at
    else:
        value = note.modified_at
    return _negate(term.range.contains(value), term.negated)


def _match_connector(node: Connector, note: "NoteRecord") -> bool:
    if node.op == Operator.AND:
        return matches(node.left, note) and matches(node.right, note)
    return matches(node.left, note) or matches(node.right, note)


def _match_conjunction(node: Conjunction, note: "NoteRecord") -> bool:
    return all(matches(term, note) for term in node.terms)


_HANDLERS: Dict[type, Callable[..., bool]] = {
    NameTerm: _match_name,
    TagTerm: _match_tag,
    PropertyTerm: _match_property,
    TaskFilter: _match_task,
    FolderFilter: _match_folder,
    ExtensionFilter: _match_extension,
    DateFilter: _match_date,
    Connector: _match_connector,
    Conjunction: _match_conjunction,
}

HANDLED_NODE_TYPES = frozenset(_HANDLERS)


# =============================================================================
# Public API
# =============================================================================

def matches(node: Node, note: "NoteRecord") -> bool:
    """
    Check if a note satisfies a query AST.

    Args:
        node: Root of a parsed query
        note: Metadata snapshot of one note

    Returns:
        True when the note matches
    """
    handler = _HANDLERS.get(type(node))
    if handler is None:
        raise TypeError(f"Unknown query node: {node!r}")
    return handler(node, note)


def filter_notes(node: Node, notes: Iterable["NoteRecord"],
                 paths: Optional[Iterable[str]] = None) -> List["NoteRecord"]:
    """
    Select the notes matching a query AST, keeping their order.

    Args:
        node: Root of a parsed query
        notes: Note snapshot
        paths: Optional path set; notes outside it are skipped

    Returns:
        Matching notes in snapshot order
    """
    allowed = set(paths) if paths is not None else None
    return [
        note for note in notes
        if (allowed is None or note.path in allowed) and matches(node, note)
    ]
