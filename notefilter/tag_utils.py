"""
Tag and folder path utilities for hierarchical matching.
"""
from typing import Iterable, List, Optional


def normalize_tag(tag: str, separator: str = '/') -> str:
    """
    Normalize a tag for comparison.

    Strips a leading '#', surrounding separators and whitespace, and folds case.

    Args:
        tag: Raw tag (e.g., '#Projects/Alpha/')
        separator: Hierarchy separator

    Returns:
        Normalized tag path (e.g., 'projects/alpha')
    """
    tag = tag.strip()
    if tag.startswith('#'):
        tag = tag[1:]
    return tag.strip(separator).casefold()


def tag_matches(tag: str, prefix: str, separator: str = '/') -> bool:
    """
    Check whether a tag equals a prefix or is one of its descendants.

    'ai' matches 'ai' and 'ai/ml' but not 'ai-tools'.
    """
    tag = normalize_tag(tag, separator)
    prefix = normalize_tag(prefix, separator)
    if not tag or not prefix:
        return False
    return tag == prefix or tag.startswith(prefix + separator)


def any_tag_matches(tags: Iterable[str], prefix: str, separator: str = '/') -> bool:
    """Check if any tag in a collection matches the prefix hierarchically."""
    return any(tag_matches(tag, prefix, separator) for tag in tags)


def split_path(path: Optional[str], separator: str = '/') -> List[str]:
    """
    Split a folder path into its non-empty segments.

    The collection root ('', '/' or None) has no segments.
    """
    if not path:
        return []
    return [part for part in path.split(separator) if part]


def normalize_folder(path: Optional[str], separator: str = '/') -> str:
    """Normalize a folder path: no leading/trailing separators, lowercase."""
    return separator.join(split_path(path, separator)).casefold()


def folder_contains_segments(folder: Optional[str], segments: List[str]) -> bool:
    """
    Check if a folder path contains a run of segments.

    Matching is on whole segments, so 'meet' does not match 'meetings'.

    Examples:
        folder_contains_segments('work/meetings/2026', ['meetings']) -> True
        folder_contains_segments('work/meetings', ['work', 'meetings']) -> True
        folder_contains_segments('archive/meetings-old', ['meetings']) -> False
    """
    if not segments:
        return False

    parts = [p.casefold() for p in split_path(folder)]
    wanted = [s.casefold() for s in segments]
    size = len(wanted)

    for i in range(len(parts) - size + 1):
        if parts[i:i + size] == wanted:
            return True
    return False


def normalize_extension(ext: Optional[str]) -> str:
    """Normalize a file extension: no leading dot, lowercase."""
    if not ext:
        return ''
    return ext.strip().lstrip('.').casefold()
