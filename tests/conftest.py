import pytest
import json
import tempfile
import shutil
import os
from datetime import datetime

import yaml

from notefilter.models import NoteRecord


# Wednesday; the ISO week runs Mon 2026-02-02 .. Sun 2026-02-08
FIXED_NOW = datetime(2026, 2, 4, 12, 0)


@pytest.fixture
def now():
    """Fixed reference time for relative dates."""
    return FIXED_NOW


@pytest.fixture
def sample_note_data():
    """Sample snapshot entries as they appear in a YAML/JSON file."""
    return [
        {
            "path": "work/meetings/standup.md",
            "tags": ["project/alpha", "status/green"],
            "properties": {"status": "Done", "attendees": ["Ann", "Bob"]},
            "created_at": "2026-01-10T08:00:00",
            "modified_at": "2026-02-03T09:00:00",
        },
        {
            "path": "work/meetings/retro.txt",
            "tags": ["project/beta"],
            "properties": {},
            "created_at": "2026-02-02T10:00:00",
            "modified_at": "2026-02-04T10:00:00",
        },
        {
            "path": "work/meetings/kickoff.md",
            "tags": ["project/alpha"],
            "properties": {"status": "done"},
            "created_at": "2025-12-01T10:00:00",
            "modified_at": "2026-01-20T15:30:00",
        },
        {
            "path": "personal/reading/book-notes.md",
            "tags": ["reading"],
            "properties": {"Reading Status": "In Progress"},
            "created_at": "2026-02-01T07:00:00",
            "modified_at": "2026-02-07T23:00:00",
            "has_incomplete_task": True,
        },
        {
            "path": "inbox.md",
            "tags": [],
            "properties": {"status": ""},
            "created_at": "2026-02-08T00:00:00",
            "modified_at": "2026-02-08T00:00:00",
        },
        {
            "path": "archive/meetings-old/plan.md",
            "tags": ["project/alpha-old"],
            "properties": {"Status": "Draft"},
            "created_at": "2026-02-05T09:00:00",
            "modified_at": "2026-02-05T09:00:00",
            "has_incomplete_task": True,
        },
    ]


@pytest.fixture
def sample_notes(sample_note_data):
    """Sample notes as NoteRecord snapshots, in index order."""
    return [NoteRecord.from_dict(entry) for entry in sample_note_data]


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    temp_dir = tempfile.mkdtemp(prefix="notefilter_test_")
    yield temp_dir
    shutil.rmtree(temp_dir)


@pytest.fixture
def snapshot_yaml(temp_dir, sample_note_data):
    """Write the sample notes to a YAML snapshot file."""
    path = os.path.join(temp_dir, "notes.yaml")
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump({"notes": sample_note_data}, f)
    return path


@pytest.fixture
def snapshot_json(temp_dir, sample_note_data):
    """Write the sample notes to a JSON snapshot file."""
    path = os.path.join(temp_dir, "notes.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(sample_note_data, f)
    return path


@pytest.fixture
def isolated_home(temp_dir, monkeypatch):
    """Point HOME and cwd at an empty temp dir and clear NOTEFILTER_* vars."""
    home = os.path.join(temp_dir, "home")
    os.makedirs(home)
    monkeypatch.setenv("HOME", home)
    monkeypatch.chdir(temp_dir)
    for key in list(os.environ):
        if key.startswith("NOTEFILTER_"):
            monkeypatch.delenv(key)
    return temp_dir
