"""Tests for the installed manifest store."""

import json

import pytest

from aipman.errors import ManifestError
from aipman.manifest import ManifestStore
from aipman.package import Package


def test_load_creates_empty_manifest(store):
    assert not store.path.exists()
    assert store.load() == []
    assert store.path.exists()
    assert json.loads(store.path.read_text()) == []


def test_save_then_load(store):
    packages = [Package("foo", "1.0", "Foo", "https://example.com/foo"),
                Package("bar", "2.0", "Bar", "https://example.com/bar.zip", True)]
    store.save(packages)
    assert store.load() == packages


def test_save_of_load_is_a_no_op(store):
    store.path.parent.mkdir(parents=True)
    store.path.write_text(json.dumps([
        {"name": "foo", "version": "1.0", "description": "Foo", "url": "https://example.com/foo"},
        {"name": "bar", "version": "2.0", "description": "Bar", "url": "https://example.com/bar.zip",
         "compressed": True},
    ]))
    before = json.loads(store.path.read_text())
    store.save(store.load())
    assert json.loads(store.path.read_text()) == before


def test_save_leaves_no_temp_file(store):
    store.save([Package("foo", "1.0", "", "u")])
    assert [p.name for p in store.path.parent.iterdir()] == [store.path.name]


def test_corrupt_manifest_is_fatal(store):
    store.path.parent.mkdir(parents=True)
    store.path.write_text("[{oops")
    with pytest.raises(ManifestError):
        store.load()


def test_non_array_manifest_is_fatal(store):
    store.path.parent.mkdir(parents=True)
    store.path.write_text("{}")
    with pytest.raises(ManifestError):
        store.load()


def test_invalid_entry_is_fatal(store):
    store.path.parent.mkdir(parents=True)
    store.path.write_text(json.dumps([{"name": "foo"}]))
    with pytest.raises(ManifestError):
        store.load()


def test_duplicate_entries_keep_first(store, capsys):
    store.path.parent.mkdir(parents=True)
    store.path.write_text(json.dumps([
        {"name": "foo", "version": "2.0", "description": "", "url": "u"},
        {"name": "foo", "version": "1.0", "description": "", "url": "u"},
    ]))
    assert store.load() == [Package("foo", "2.0", "", "u")]
    assert "more than once" in capsys.readouterr().out


def test_save_refuses_duplicates(store):
    with pytest.raises(ManifestError, match="foo"):
        store.save([Package("foo", "1.0", "", "u"), Package("foo", "2.0", "", "u")])


def test_store_creates_missing_parent(tmp_path, console):
    store = ManifestStore(tmp_path / "a" / "b" / "list.json", console=console)
    assert store.load() == []


def test_entry_with_path_in_name_is_fatal(store):
    store.path.parent.mkdir(parents=True)
    store.path.write_text(json.dumps([{"name": "../../bin/foo", "version": "1.0", "url": "u"}]))
    with pytest.raises(ManifestError, match="#0"):
        store.load()
