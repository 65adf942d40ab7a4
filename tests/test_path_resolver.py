"""Tests for resolving ID paths into display strings."""

from concurrent.futures import ThreadPoolExecutor

from signature_browser.services.path_resolver import PathResolver, ResolvedPath


def test_resolve_empty_path(api):
    assert PathResolver(api).resolve([]) == ResolvedPath((), "")
    assert api.lookups == []


def test_resolve_joins_labels(api):
    resolved = PathResolver(api).resolve([10, 12])
    assert resolved == ResolvedPath((10, 12), "[1] A / [1] A1")


def test_failed_lookup_becomes_placeholder(api):
    api.fail_ids = {12}
    resolved = PathResolver(api).resolve([10, 12])
    assert resolved.display == "[1] A / [Error ID: 12]"


def test_custom_marker_and_separator(api):
    resolver = PathResolver(api, error_marker="Missing", separator=" > ")
    assert resolver.resolve([10, 99]).display == "[1] A > [Missing ID: 99]"


def test_element_without_index_shows_name_only(api):
    api.add_element(40, 1, "Plain")
    assert PathResolver(api).resolve([40]).display == "Plain"


def test_resolve_many_sorted_by_display(api):
    api.add_element(50, 1, "Beta", index="2")
    api.add_element(51, 1, "Alpha", index="1")
    resolved = PathResolver(api).resolve_many([[50], [51]])
    assert [r.display for r in resolved] == ["[1] Alpha", "[2] Beta"]
    assert [r.id_path for r in resolved] == [(51,), (50,)]


def test_resolve_many_looks_up_shared_ids_once(api):
    PathResolver(api).resolve_many([[10, 12], [10, 11], [10]])
    assert sorted(api.lookups) == [10, 11, 12]


def test_resolve_many_skips_empty_paths(api):
    assert PathResolver(api).resolve_many([[], [11]]) == [ResolvedPath((11,), "[2] B")]


def test_memoization_is_per_call(api):
    resolver = PathResolver(api)
    resolver.resolve([10])
    resolver.resolve([10])
    assert api.lookups == [10, 10]


def test_concurrent_resolution_is_idempotent(api):
    resolver = PathResolver(api)
    with ThreadPoolExecutor(max_workers=2) as pool:
        first, second = pool.map(resolver.resolve, [[10, 12, 99], [10, 12, 99]])
    assert first == second
    assert first.display == "[1] A / [1] A1 / [Error ID: 99]"
