"""
Query AST for the search language.

The AST is a closed union of frozen dataclasses. Leaf terms carry their own
'negated' flag; Connector and Conjunction combine terms. Nodes are never
mutated after the parser builds them.

Example:
    '#a OR #b AND #c' parses to

    Connector(
        op=Operator.OR,
        left=TagTerm('a'),
        right=Connector(Operator.AND, TagTerm('b'), TagTerm('c')),
    )
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Tuple, Union

from .dates import DateField, DateRange


class Operator(Enum):
    """Boolean connectors of the pure grammar."""
    AND = "AND"
    OR = "OR"


class QueryMode(Enum):
    """
    How a query was parsed.

    PURE: only tag/property terms and connectors; AND/OR are operators.
    MIXED: anything else; every term is ANDed and AND/OR are literal text.
    """
    PURE = "pure"
    MIXED = "mixed"


# =============================================================================
# Leaf terms
# =============================================================================

@dataclass(frozen=True)
class NameTerm:
    """Case-insensitive substring match on the filename."""
    text: str
    negated: bool = False


@dataclass(frozen=True)
class TagTerm:
    """
    Hierarchical tag match.

    A path of None is the bare '#': the note has at least one tag.
    """
    path: Optional[str]
    negated: bool = False


@dataclass(frozen=True)
class PropertyTerm:
    """Property presence (value None) or exact value match."""
    key: str
    value: Optional[str] = None
    negated: bool = False


@dataclass(frozen=True)
class TaskFilter:
    """Note has an incomplete task."""
    negated: bool = False


@dataclass(frozen=True)
class FolderFilter:
    """
    Folder match.

    rooted=False: the folder path contains the segments anywhere.
    rooted=True: the folder is exactly this path ('' is the root).
    """
    path: str
    rooted: bool = False
    negated: bool = False


@dataclass(frozen=True)
class ExtensionFilter:
    """File extension match; ext is normalized (lowercase, no dot)."""
    ext: str
    negated: bool = False


@dataclass(frozen=True)
class DateFilter:
    """Created or modified timestamp inside an inclusive range."""
    field: DateField
    range: DateRange
    negated: bool = False


# =============================================================================
# Combinators
# =============================================================================

@dataclass(frozen=True)
class Connector:
    """Explicit AND / OR between two subtrees (pure queries only)."""
    op: Operator
    left: "Node"
    right: "Node"


@dataclass(frozen=True)
class Conjunction:
    """Implicit AND of all terms; empty matches everything."""
    terms: Tuple["Node", ...] = ()


Term = Union[NameTerm, TagTerm, PropertyTerm, TaskFilter, FolderFilter, ExtensionFilter, DateFilter]
Node = Union[Term, Connector, Conjunction]

TERM_TYPES = (NameTerm, TagTerm, PropertyTerm, TaskFilter, FolderFilter, ExtensionFilter, DateFilter)
NODE_TYPES = TERM_TYPES + (Connector, Conjunction)


# =============================================================================
# Query
# =============================================================================

@dataclass(frozen=True)
class Query:
    """A parsed search: the raw text it came from, its AST and parse mode."""
    raw_text: str
    ast: Node
    mode: QueryMode = QueryMode.MIXED

    @property
    def is_empty(self) -> bool:
        """True when the query has no terms and matches every note."""
        return not has_active_criteria(self.ast)

    def __repr__(self):
        return f"Query({self.raw_text!r}, mode={self.mode.value})"


# =============================================================================
# Traversal
# =============================================================================

def children(node: Node) -> Tuple[Node, ...]:
    """Direct children of a node (empty for leaf terms)."""
    if isinstance(node, Connector):
        return (node.left, node.right)
    if isinstance(node, Conjunction):
        return node.terms
    return ()


def iter_terms(node: Node) -> Iterator[Term]:
    """Yield every leaf term of a tree, left to right."""
    if isinstance(node, TERM_TYPES):
        yield node
        return
    for child in children(node):
        yield from iter_terms(child)


def has_active_criteria(node: Node) -> bool:
    """Check if a tree has at least one term."""
    return next(iter_terms(node), None) is not None


def needs_tag_lookup(node: Node) -> bool:
    """Check if evaluating a tree reads note tags."""
    return any(isinstance(term, TagTerm) for term in iter_terms(node))


def needs_property_lookup(node: Node) -> bool:
    """Check if evaluating a tree reads note properties."""
    return any(isinstance(term, PropertyTerm) for term in iter_terms(node))


def describe(node: Node) -> str:
    """
    Render a node as compact text, mainly for logs and the CLI.

    Examples:
        describe(TagTerm('a', negated=True)) -> '-#a'
        describe(Connector(Operator.OR, TagTerm('a'), TagTerm('b'))) -> '(#a OR #b)'
    """
    if isinstance(node, Connector):
        return f"({describe(node.left)} {node.op.value} {describe(node.right)})"
    if isinstance(node, Conjunction):
        return '[' + ' & '.join(describe(t) for t in node.terms) + ']'

    prefix = '-' if getattr(node, 'negated', False) else ''
    if isinstance(node, NameTerm):
        return f"{prefix}{node.text!r}"
    if isinstance(node, TagTerm):
        return f"{prefix}#{node.path or ''}"
    if isinstance(node, PropertyTerm):
        if node.value is None:
            return f"{prefix}.{node.key}"
        return f"{prefix}.{node.key}={node.value!r}"
    if isinstance(node, TaskFilter):
        return f"{prefix}has:task"
    if isinstance(node, FolderFilter):
        return f"{prefix}folder:{'/' if node.rooted else ''}{node.path}"
    if isinstance(node, ExtensionFilter):
        return f"{prefix}ext:{node.ext}"
    if isinstance(node, DateFilter):
        return f"{prefix}@{node.field.value}[{node.range.start.isoformat()}..{node.range.end.isoformat()}]"
    raise TypeError(f"Unknown query node: {node!r}")
