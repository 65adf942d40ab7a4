"""Tests for PathCollection and SinglePathSelection."""

from signature_browser.services.path_collection import PathCollection, SinglePathSelection
from signature_browser.services.path_resolver import PathResolver


def test_add_path_notifies_with_full_list():
    changes = []
    collection = PathCollection([[1, 2]], on_change=changes.append)
    assert collection.add_path([3]) is True
    assert changes == [[[1, 2], [3]]]


def test_duplicate_and_empty_paths_are_ignored():
    changes = []
    collection = PathCollection([[1, 2]], on_change=changes.append)
    assert collection.add_path([1, 2]) is False
    assert collection.add_path([]) is False
    assert changes == []
    assert len(collection) == 1


def test_path_equality_is_order_sensitive():
    collection = PathCollection([[1, 2]])
    assert collection.add_path([2, 1]) is True
    assert [2, 1] in collection


def test_remove_path():
    changes = []
    collection = PathCollection([[1], [2]], on_change=changes.append)
    assert collection.remove_path([1]) is True
    assert collection.remove_path([1]) is False
    assert changes == [[[2]]]


def test_initial_paths_are_deduplicated():
    assert PathCollection([[1], [1], [2]]).paths == [[1], [2]]


def test_set_paths_does_not_notify():
    changes = []
    collection = PathCollection(on_change=changes.append)
    collection.set_paths([[5], [], [5], [6]])
    assert collection.paths == [[5], [6]]
    assert changes == []


def test_collection_resolved_sorted(api):
    collection = PathCollection([[11], [10, 12]])
    displays = [r.display for r in collection.resolved(PathResolver(api))]
    assert displays == ["[1] A / [1] A1", "[2] B"]


def test_single_selection_replaces():
    changes = []
    selection = SinglePathSelection([1], on_change=changes.append)
    assert selection.initial_path == [1]
    assert selection.select([2, 3]) is True
    assert selection.path == [2, 3]
    assert changes == [[2, 3]]


def test_single_selection_same_or_empty_is_noop():
    changes = []
    selection = SinglePathSelection([1], on_change=changes.append)
    assert selection.select([1]) is False
    assert selection.select([]) is False
    assert changes == []


def test_single_selection_clear():
    changes = []
    selection = SinglePathSelection([1], on_change=changes.append)
    assert selection.clear() is True
    assert selection.clear() is False
    assert selection.path is None
    assert selection.initial_path == []
    assert changes == [None]


def test_single_selection_resolved(api):
    resolver = PathResolver(api)
    assert SinglePathSelection().resolved(resolver) is None
    assert SinglePathSelection([10]).resolved(resolver).display == "[1] A"
