"""
Unit tests for storage.py
"""
import json
from unittest.mock import Mock, patch

import pytest

from notetree.config import META_DIR_NAME, META_FILE_NAME, meta_file_path
from notetree.models import OrderMode, OrderNode
from notetree.storage import (
    LOAD_WARNING,
    MetaFormatError,
    MetaStore,
    node_from_record,
    node_to_record,
)
from notetree.sync import SyncEngine
from tests.fixtures.mock_listing import make_listing


@pytest.fixture
def meta_path(tmp_path):
    """Sidecar location under a temporary notes root."""
    return meta_file_path(tmp_path)


@pytest.fixture
def sample_tree():
    """Tree with nested folders, files and both order modes."""
    root = OrderNode()
    root.files = {"readme.md": 0, "todo.md": 1}
    work = root.get_folder(["work"])
    work.files = {"plan.md": 1, "notes.md": 0}
    scratch = root.get_folder(["work", "scratch"])
    scratch.order_mode = OrderMode.UNORDERED
    root.get_folder(["empty"])
    return root


def assert_same_tree(left: OrderNode, right: OrderNode):
    assert left.name == right.name
    assert left.order_mode is right.order_mode
    assert left.files == right.files
    assert set(left.folders) == set(right.folders)
    for key in left.folders:
        assert_same_tree(left.folders[key], right.folders[key])


def test_meta_file_path(tmp_path):
    """Test the sidecar location derived from the notes root."""
    assert meta_file_path(tmp_path) == tmp_path / META_DIR_NAME / META_FILE_NAME


def test_node_to_record(sample_tree):
    """Test the serialized schema."""
    record = node_to_record(sample_tree)

    assert record["name"] == ""
    assert record["isOrdered"] is True
    assert record["files"] == {"readme.md": 0, "todo.md": 1}
    work = record["folders"]["work"]
    assert work["files"] == {"plan.md": 1, "notes.md": 0}
    assert work["folders"]["scratch"]["isOrdered"] is False
    assert record["folders"]["empty"] == {
        "name": "empty", "isOrdered": True, "files": {}, "folders": {}
    }


def test_node_from_record_defaults_to_ordered():
    """Test that records without isOrdered load as ordered."""
    node = node_from_record({
        "name": "root",
        "files": {"a.md": 0},
        "folders": {"sub": {"name": "sub", "files": {}, "folders": {}}},
    })

    assert node.is_ordered
    assert node.folders["sub"].is_ordered
    assert node.files == {"a.md": 0}


def test_node_from_record_tolerates_missing_mappings():
    """Test that absent files/folders load as empty."""
    node = node_from_record({"name": "bare"})

    assert node.files == {}
    assert node.folders == {}


def test_node_from_record_uses_key_when_name_missing():
    """Test that child names fall back to the folder key."""
    node = node_from_record({"folders": {"sub": {}}})

    assert node.folders["sub"].name == "sub"


@pytest.mark.parametrize("record", [
    [],
    {"isOrdered": "yes"},
    {"files": []},
    {"files": {"a.md": "first"}},
    {"files": {"a.md": -1}},
    {"files": {"a.md": True}},
    {"folders": {"sub": 3}},
    {"name": 12},
])
def test_node_from_record_rejects_malformed(record):
    """Test that schema violations raise MetaFormatError."""
    with pytest.raises(MetaFormatError):
        node_from_record(record)


def test_round_trip(meta_path, sample_tree):
    """Test that save followed by load reproduces the tree."""
    assert MetaStore(meta_path).save(sample_tree) is True

    loaded = MetaStore(meta_path).load()

    assert loaded is not None
    assert_same_tree(loaded, sample_tree)


def test_round_trip_through_engine(tmp_path):
    """Test persisting a tree built through the engine operations."""
    engine = SyncEngine(tmp_path)
    engine.sync_folders(make_listing("work", "drafts"))
    engine.sync_files(make_listing("a.md", "b.md", "c.md"), "work")
    engine.move_up("c.md", "work")
    engine.set_order_mode(OrderMode.UNORDERED, "drafts")
    assert engine.save() is True

    fresh = SyncEngine(tmp_path)
    assert fresh.load() is True

    assert_same_tree(fresh.tree, engine.tree)
    assert fresh.node_for("work").files == {"a.md": 0, "c.md": 1, "b.md": 2}


def test_save_writes_versioned_json(meta_path, sample_tree):
    """Test the on-disk document."""
    MetaStore(meta_path).save(sample_tree)

    with open(meta_path) as f:
        record = json.load(f)

    assert record["version"] == 1
    assert record["folders"]["work"]["name"] == "work"
    assert "version" not in record["folders"]["work"]


def test_save_overwrites_previous_record(meta_path, sample_tree):
    """Test that each save replaces the whole record."""
    store = MetaStore(meta_path)
    store.save(sample_tree)

    store.save(OrderNode())

    loaded = store.load()
    assert loaded.folders == {}
    assert loaded.files == {}


def test_save_replaces_file_in_place_of_meta_dir(tmp_path, sample_tree):
    """Test that a plain file at the metadata folder path is replaced."""
    (tmp_path / META_DIR_NAME).write_text("not a folder")
    store = MetaStore(meta_file_path(tmp_path))

    assert store.save(sample_tree) is True
    assert (tmp_path / META_DIR_NAME).is_dir()


def test_save_failure_is_swallowed(meta_path, sample_tree, caplog):
    """Test that write errors are logged and reported as False."""
    store = MetaStore(meta_path)

    with patch("builtins.open", side_effect=PermissionError("read-only")):
        result = store.save(sample_tree)

    assert result is False
    assert "Failed to save meta record" in caplog.text


def test_load_missing_record(meta_path):
    """Test that a missing record loads nothing without warning."""
    warn = Mock()

    assert MetaStore(meta_path, warn=warn).load() is None
    warn.assert_not_called()


def test_load_legacy_record_without_version(meta_path):
    """Test loading a record written before the version field existed."""
    meta_path.parent.mkdir()
    meta_path.write_text(json.dumps({
        "name": "",
        "files": {"a.md": 1, "b.md": 0},
        "folders": {"old": {"name": "old", "isOrdered": False, "files": {}, "folders": {}}},
    }))

    loaded = MetaStore(meta_path).load()

    assert loaded.is_ordered
    assert loaded.files == {"a.md": 1, "b.md": 0}
    assert not loaded.folders["old"].is_ordered


@pytest.mark.parametrize("content", [
    "{not json",
    json.dumps({"files": {"a.md": "x"}}),
    json.dumps({"version": 99, "files": {}}),
])
def test_load_failure_warns(meta_path, content, caplog):
    """Test that unreadable records warn the user and load nothing."""
    meta_path.parent.mkdir()
    meta_path.write_text(content)
    warn = Mock()

    assert MetaStore(meta_path, warn=warn).load() is None

    warn.assert_called_once_with(LOAD_WARNING)
    assert "ordering may be lost" in LOAD_WARNING
    assert "Failed to load meta record" in caplog.text


def test_engine_keeps_tree_when_load_fails(tmp_path):
    """Test that a failed load leaves the in-memory tree alone."""
    path = meta_file_path(tmp_path)
    path.parent.mkdir()
    path.write_text("[1, 2")
    engine = SyncEngine(tmp_path, store=MetaStore(path, warn=Mock()))
    engine.sync_files(make_listing("a.md"))
    tree = engine.tree

    assert engine.load() is False
    assert engine.tree is tree
    assert engine.tree.files == {"a.md": 0}
