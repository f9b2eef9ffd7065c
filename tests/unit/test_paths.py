"""
Unit tests for resource path composition.

Covers combine_paths, absolute url detection and the parent url rules for
string and queryable bases.
"""

import pytest

from sp_rest_client.paths import ResolvedPath, combine_paths, is_url_absolute, resolve_path


WEB = "https://contoso.sharepoint.com/sites/dev"


class TestCombinePaths:
    """Tests for combine_paths."""

    def test_single_separator_between_parts(self):
        assert combine_paths("_api/web/", "/lists") == "_api/web/lists"

    def test_ignores_empty_and_none(self):
        assert combine_paths("_api/web", None) == "_api/web"
        assert combine_paths("_api/web", "") == "_api/web"
        assert combine_paths(None, "lists") == "lists"

    def test_backslashes_become_slashes(self):
        assert combine_paths("_api\\web", "\\lists") == "_api/web/lists"

    def test_absolute_base(self):
        assert combine_paths(WEB + "/", "_api/web") == WEB + "/_api/web"

    def test_many_parts(self):
        assert combine_paths("a", "b", "c/", "/d") == "a/b/c/d"


class TestIsUrlAbsolute:
    """Tests for is_url_absolute."""

    @pytest.mark.parametrize("url", [WEB, "http://host/x", "HTTPS://HOST", "//cdn.example.com/x"])
    def test_absolute(self, url):
        assert is_url_absolute(url)

    @pytest.mark.parametrize("url", ["_api/web", "/sites/dev", "items(1)", ""])
    def test_relative(self, url):
        assert not is_url_absolute(url)


class TestResolvePathStrings:
    """Tests for resolve_path with string bases."""

    @pytest.mark.parametrize("path", [None, "_api/web", "_api/web/lists('a/b')"])
    def test_absolute_base_is_its_own_parent(self, path):
        resolved = resolve_path(WEB, path)
        assert resolved.url == combine_paths(WEB, path)
        assert resolved.parent_url == WEB

    def test_base_without_separator(self):
        resolved = resolve_path("_api", "web")
        assert resolved == ResolvedPath("_api/web", "_api")

    def test_property_of_indexed_item(self):
        resolved = resolve_path("_api/web/lists/items(19)/fields")
        assert resolved.parent_url == "_api/web/lists/items(19)"
        assert resolved.url == "_api/web/lists/items(19)/fields"

    def test_property_of_indexed_item_with_path(self):
        resolved = resolve_path("_api/web/lists/items(19)/fields", "Title")
        assert resolved.parent_url == "_api/web/lists/items(19)"
        assert resolved.url == "_api/web/lists/items(19)/fields/Title"

    def test_indexed_item(self):
        resolved = resolve_path("_api/web/lists/items(19)", "versions")
        assert resolved.parent_url == "_api/web/lists/items"
        assert resolved.url == "_api/web/lists/items(19)/versions"

    def test_method_call_segment(self):
        resolved = resolve_path("_api/web/lists/getByTitle('Tasks')", "items")
        assert resolved.parent_url == "_api/web/lists/getByTitle"
        assert resolved.url == "_api/web/lists/getByTitle('Tasks')/items"

    def test_plain_relative_path(self):
        resolved = resolve_path("_api/web/lists", "getById('1')")
        assert resolved.parent_url == "_api/web"
        assert resolved.url == "_api/web/lists/getById('1')"

    def test_url_is_prefixed_by_parent(self):
        for base, path in [("_api/web/items(3)/fields", None), ("_api/web/items(3)", "x"), ("_api/web", "lists")]:
            resolved = resolve_path(base, path)
            assert resolved.url.startswith(resolved.parent_url)


class TestResolvePathObjects:
    """Tests for resolve_path with an object exposing a url."""

    def test_uses_object_url_as_parent(self):
        class Node:
            url = "_api/web/lists/items(19)"

        resolved = resolve_path(Node(), "versions")
        assert resolved.parent_url == "_api/web/lists/items(19)"
        assert resolved.url == "_api/web/lists/items(19)/versions"
