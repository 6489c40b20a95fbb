"""
Tests for NoteRecord snapshots and snapshot file loading.
"""
import json
import os
import pytest
from datetime import date, datetime, timezone

from notefilter.models import NoteLoadError, NoteRecord, coerce_timestamp, load_notes


class TestNoteRecord:
    """Test NoteRecord construction."""

    def test_from_path_derives_fields(self):
        note = NoteRecord.from_path('work/meetings/standup.md')
        assert note.filename == 'standup'
        assert note.extension == 'md'
        assert note.folder_path == 'work/meetings'

    def test_from_path_root_note(self):
        note = NoteRecord.from_path('inbox.md')
        assert note.folder_path == ''
        assert note.filename == 'inbox'

    def test_from_path_without_extension(self):
        note = NoteRecord.from_path('notes/README')
        assert note.filename == 'README'
        assert note.extension == ''

    def test_from_path_multiple_dots(self):
        note = NoteRecord.from_path('archive.2025.md')
        assert note.filename == 'archive.2025'
        assert note.extension == 'md'

    def test_explicit_values_win(self):
        note = NoteRecord.from_path('a/b.md', filename='Custom Title')
        assert note.filename == 'Custom Title'

    def test_is_immutable(self):
        note = NoteRecord.from_path('a.md')
        with pytest.raises(AttributeError):
            note.filename = 'changed'

    def test_repr(self):
        assert repr(NoteRecord.from_path('a.md')) == "NoteRecord('a.md')"


class TestFromDict:
    """Test building records from snapshot entries."""

    def test_snake_case(self):
        note = NoteRecord.from_dict({
            'path': 'work/standup.md',
            'tags': ['#project/alpha', 'status'],
            'properties': {'status': 'Done'},
            'modified_at': '2026-02-03T09:00:00',
            'has_incomplete_task': True,
        })
        assert note.tags == ('project/alpha', 'status')
        assert note.properties == {'status': 'Done'}
        assert note.modified_at == datetime(2026, 2, 3, 9, 0)
        assert note.created_at is None
        assert note.has_incomplete_task is True

    def test_camel_case(self):
        note = NoteRecord.from_dict({
            'path': 'work/standup.md',
            'folderPath': 'work',
            'createdAt': '2026-01-01T00:00:00',
            'hasIncompleteTask': True,
        })
        assert note.folder_path == 'work'
        assert note.created_at == datetime(2026, 1, 1)
        assert note.has_incomplete_task is True

    def test_property_values_coerced(self):
        note = NoteRecord.from_dict({
            'path': 'a.md',
            'properties': {'count': 3, 'done': True, 'authors': ['Ann', None], 'empty': None},
        })
        assert note.properties == {
            'count': '3',
            'done': 'true',
            'authors': ('Ann', ''),
            'empty': '',
        }

    def test_missing_path(self):
        with pytest.raises(NoteLoadError):
            NoteRecord.from_dict({'tags': ['a']})

    def test_properties_must_be_mapping(self):
        with pytest.raises(NoteLoadError):
            NoteRecord.from_dict({'path': 'a.md', 'properties': ['status']})

    def test_single_tag_string(self):
        note = NoteRecord.from_dict({'path': 'a.md', 'tags': '#work'})
        assert note.tags == ('work',)

    def test_single_tag_scalar(self):
        note = NoteRecord.from_dict({'path': 'a.md', 'tags': 2026})
        assert note.tags == ('2026',)

    def test_to_dict(self):
        note = NoteRecord.from_dict({
            'path': 'a.md',
            'tags': ['x'],
            'properties': {'authors': ['Ann']},
            'modified_at': '2026-02-03T09:00:00',
        })
        data = note.to_dict()
        assert data['tags'] == ['x']
        assert data['properties'] == {'authors': ['Ann']}
        assert data['modified_at'] == '2026-02-03T09:00:00'
        json.dumps(data)


class TestCoerceTimestamp:
    """Test timestamp coercion."""

    def test_none_and_empty(self):
        assert coerce_timestamp(None) is None
        assert coerce_timestamp('') is None

    def test_naive_datetime(self):
        value = datetime(2026, 2, 3, 9, 0)
        assert coerce_timestamp(value) == value

    def test_aware_datetime_to_local(self):
        value = datetime(2026, 2, 3, 9, 0, tzinfo=timezone.utc)
        assert coerce_timestamp(value) == value.astimezone().replace(tzinfo=None)

    def test_zulu_string(self):
        expected = datetime(2026, 2, 3, 9, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
        assert coerce_timestamp('2026-02-03T09:00:00Z') == expected

    def test_date(self):
        assert coerce_timestamp(date(2026, 2, 3)) == datetime(2026, 2, 3)

    def test_epoch_millis(self):
        expected = datetime.fromtimestamp(1770000000)
        assert coerce_timestamp(1770000000000) == expected

    @pytest.mark.parametrize("value", ['yesterday', True, [2026]])
    def test_invalid(self, value):
        with pytest.raises(NoteLoadError):
            coerce_timestamp(value)

    @pytest.mark.parametrize("value", [99999999999999999999, float('inf'), float('nan')])
    def test_epoch_out_of_range(self, value):
        with pytest.raises(NoteLoadError):
            coerce_timestamp(value)


class TestLoadNotes:
    """Test loading snapshot files."""

    def test_load_yaml(self, snapshot_yaml):
        notes = load_notes(snapshot_yaml)
        assert len(notes) == 6
        assert notes[0].path == 'work/meetings/standup.md'
        assert notes[0].properties['attendees'] == ('Ann', 'Bob')

    def test_load_json_list(self, snapshot_json):
        notes = load_notes(snapshot_json)
        assert [n.path for n in notes][:2] == ['work/meetings/standup.md', 'work/meetings/retro.txt']
        assert notes[3].has_incomplete_task is True
        assert notes[3].properties == {'Reading Status': 'In Progress'}

    def test_yaml_dates_and_datetimes(self, temp_dir):
        path = os.path.join(temp_dir, 'notes.yml')
        with open(path, 'w', encoding='utf-8') as f:
            f.write("- path: a.md\n  created_at: 2026-02-01\n  modified_at: 2026-02-03 09:00:00\n")
        (note,) = load_notes(path)
        assert note.created_at == datetime(2026, 2, 1)
        assert note.modified_at == datetime(2026, 2, 3, 9, 0)

    def test_missing_file(self, temp_dir):
        with pytest.raises(NoteLoadError):
            load_notes(os.path.join(temp_dir, 'missing.yaml'))

    def test_malformed_json(self, temp_dir):
        path = os.path.join(temp_dir, 'bad.json')
        with open(path, 'w', encoding='utf-8') as f:
            f.write('{not json')
        with pytest.raises(NoteLoadError):
            load_notes(path)

    def test_wrong_shape(self, temp_dir):
        path = os.path.join(temp_dir, 'bad.yaml')
        with open(path, 'w', encoding='utf-8') as f:
            f.write('notes: 3\n')
        with pytest.raises(NoteLoadError):
            load_notes(path)

    def test_invalid_entry(self, temp_dir):
        path = os.path.join(temp_dir, 'bad.yaml')
        with open(path, 'w', encoding='utf-8') as f:
            f.write('- just a string\n')
        with pytest.raises(NoteLoadError):
            load_notes(path)

    def test_yaml_single_tag(self, temp_dir):
        path = os.path.join(temp_dir, 'notes.yaml')
        with open(path, 'w', encoding='utf-8') as f:
            f.write("- path: a.md\n  tags: work\n")
        (note,) = load_notes(path)
        assert note.tags == ('work',)

    def test_epoch_out_of_range(self, temp_dir):
        path = os.path.join(temp_dir, 'notes.json')
        with open(path, 'w', encoding='utf-8') as f:
            json.dump([{'path': 'a.md', 'modified_at': 99999999999999999999}], f)
        with pytest.raises(NoteLoadError):
            load_notes(path)

    @pytest.mark.parametrize("name", ['bad.json', 'bad.yaml'])
    def test_invalid_utf8(self, temp_dir, name):
        path = os.path.join(temp_dir, name)
        with open(path, 'wb') as f:
            f.write(b'\xff\xfe')
        with pytest.raises(NoteLoadError):
            load_notes(path)

    def test_directory_path(self, temp_dir):
        with pytest.raises(NoteLoadError):
            load_notes(temp_dir)
