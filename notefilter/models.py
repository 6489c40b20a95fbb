"""
Note metadata snapshots consumed by the filter search.

A NoteRecord is the read-only view of one note supplied by the metadata
index. The index itself (construction, persistence, incremental updates)
lives outside this package; callers hand in lists of records captured at
call time.
"""
import json
import logging
import posixpath
from dataclasses import dataclass, field
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import yaml

from notefilter.query.dates import to_local_naive

logger = logging.getLogger(__name__)


PropertyValue = Union[str, Tuple[str, ...]]


class NoteLoadError(Exception):
    """Error loading a note snapshot file."""
    pass


@dataclass(frozen=True)
class NoteRecord:
    """
    Read-only metadata snapshot for a single note.

    Attributes:
        path: Vault-relative path, e.g. 'work/meetings/standup.md'
        filename: Display name without extension, e.g. 'standup'
        extension: Extension without the dot, e.g. 'md'
        folder_path: Parent folder, '' for the collection root
        tags: Hierarchical tag paths in note order, without '#'
        properties: Frontmatter values keyed by property name
        created_at: Creation time (local, naive)
        modified_at: Last modification time (local, naive)
        has_incomplete_task: Whether the note has an unchecked task
    """
    path: str
    filename: str = ""
    extension: str = ""
    folder_path: str = ""
    tags: Tuple[str, ...] = ()
    properties: Mapping[str, PropertyValue] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    has_incomplete_task: bool = False

    @classmethod
    def from_path(cls, path: str, **kwargs: Any) -> "NoteRecord":
        """
        Build a record, deriving filename, extension and folder from the path.

        Explicit keyword arguments win over derived values.
        """
        folder, basename = posixpath.split(path.strip('/'))
        stem, dot, ext = basename.rpartition('.')
        if not dot:
            stem, ext = basename, ''

        values: Dict[str, Any] = {
            'filename': stem,
            'extension': ext,
            'folder_path': folder,
        }
        values.update(kwargs)
        return cls(path=path, **values)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NoteRecord":
        """
        Build a record from a plain dictionary (JSON/YAML snapshot entry).

        Accepts camelCase or snake_case keys. Timestamps may be datetimes,
        ISO strings or epoch milliseconds. Scalar property values are
        converted to strings and lists to tuples of strings.
        """
        if 'path' not in data:
            raise NoteLoadError(f"Note entry has no path: {data!r}")

        def pick(*names: str, default: Any = None) -> Any:
            for name in names:
                if name in data:
                    return data[name]
            return default

        kwargs: Dict[str, Any] = {}
        for key, names in (
            ('filename', ('filename', 'name', 'basename')),
            ('extension', ('extension', 'ext')),
            ('folder_path', ('folder_path', 'folderPath', 'folder')),
        ):
            value = pick(*names)
            if value is not None:
                kwargs[key] = str(value)

        tags = pick('tags', default=[]) or []
        if not isinstance(tags, (list, tuple, set)):
            # 'tags: work' is a single tag
            tags = [tags]
        kwargs['tags'] = tuple(str(t).lstrip('#') for t in tags)
        kwargs['properties'] = _coerce_properties(pick('properties', 'frontmatter', default={}) or {})
        kwargs['created_at'] = coerce_timestamp(pick('created_at', 'createdAt', 'created', 'ctime'))
        kwargs['modified_at'] = coerce_timestamp(pick('modified_at', 'modifiedAt', 'modified', 'mtime'))
        kwargs['has_incomplete_task'] = bool(pick('has_incomplete_task', 'hasIncompleteTask', 'has_task', default=False))

        return cls.from_path(str(data['path']), **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            'path': self.path,
            'filename': self.filename,
            'extension': self.extension,
            'folder_path': self.folder_path,
            'tags': list(self.tags),
            'properties': {
                k: list(v) if isinstance(v, tuple) else v
                for k, v in self.properties.items()
            },
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'modified_at': self.modified_at.isoformat() if self.modified_at else None,
            'has_incomplete_task': self.has_incomplete_task,
        }

    def __repr__(self):
        return f"NoteRecord({self.path!r})"


def _coerce_properties(raw: Mapping[str, Any]) -> Dict[str, PropertyValue]:
    """Coerce frontmatter values into strings and tuples of strings."""
    if not isinstance(raw, Mapping):
        raise NoteLoadError(f"Properties must be a mapping, got {type(raw).__name__}")

    properties: Dict[str, PropertyValue] = {}
    for key, value in raw.items():
        if value is None:
            properties[str(key)] = ''
        elif isinstance(value, (list, tuple, set)):
            properties[str(key)] = tuple('' if v is None else _scalar_text(v) for v in value)
        else:
            properties[str(key)] = _scalar_text(value)
    return properties


def _scalar_text(value: Any) -> str:
    # YAML booleans should read the way they were written in frontmatter
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def coerce_timestamp(value: Any) -> Optional[datetime]:
    """
    Convert a timestamp value into a local naive datetime.

    Args:
        value: datetime, ISO 8601 string, or epoch milliseconds

    Returns:
        Local datetime, or None for missing values
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return to_local_naive(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, bool):
        raise NoteLoadError(f"Invalid timestamp: {value!r}")
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000)
        except (OverflowError, OSError, ValueError):
            raise NoteLoadError(f"Timestamp out of range: {value!r}")
    if isinstance(value, str):
        try:
            return to_local_naive(datetime.fromisoformat(value.replace('Z', '+00:00')))
        except ValueError:
            raise NoteLoadError(f"Invalid timestamp: {value!r}")
    raise NoteLoadError(f"Invalid timestamp: {value!r}")


def load_notes(path: Union[str, Path]) -> List[NoteRecord]:
    """
    Load a note snapshot from a YAML or JSON file.

    The file holds either a list of note entries or a mapping with a
    'notes' list.

    Args:
        path: Snapshot file path

    Returns:
        List of NoteRecord objects in file order
    """
    path = Path(path)

    if not path.exists():
        raise NoteLoadError(f"Snapshot file not found: {path}")

    try:
        with open(path, encoding='utf-8') as f:
            if path.suffix.lower() == '.json':
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise NoteLoadError(f"Cannot parse snapshot {path}: {e}")
    except (UnicodeDecodeError, OSError) as e:
        raise NoteLoadError(f"Cannot read snapshot {path}: {e}")

    if isinstance(data, dict):
        data = data.get('notes')

    if not isinstance(data, list):
        raise NoteLoadError(f"Snapshot must contain a list of notes, got {type(data).__name__}")

    notes = []
    for entry in data:
        if not isinstance(entry, dict):
            raise NoteLoadError(f"Invalid note entry: {entry!r}")
        notes.append(NoteRecord.from_dict(entry))

    logger.debug(f"Loaded {len(notes)} notes from {path}")
    return notes
