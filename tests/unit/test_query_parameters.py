"""
Unit tests for the query parameter accumulator and url serialization.
"""

import logging

from sp_rest_client.query import QueryParameters, serialize_url_and_query


class TestQueryParameters:
    """Tests for QueryParameters."""

    def test_empty(self):
        query = QueryParameters()
        assert query.count == 0
        assert len(query) == 0
        assert query.get("$select") is None
        assert query.get_keys() == []

    def test_add_and_get(self):
        query = QueryParameters()
        query.add("$top", "5")
        assert query.get("$top") == "5"
        assert "$top" in query
        assert query.count == 1

    def test_last_write_wins_and_keeps_position(self):
        query = QueryParameters()
        query.add("$filter", "a")
        query.add("$top", "5")
        query.add("$filter", "b")
        assert query.get_keys() == ["$filter", "$top"]
        assert query.get_values() == ["b", "5"]

    def test_merge_overwrites_and_leaves_other_untouched(self):
        query = QueryParameters({"$select": "Id", "$top": "1"})
        other = QueryParameters({"$top": "10", "$skip": "20"})
        query.merge(other)
        assert list(query.items()) == [("$select", "Id"), ("$top", "10"), ("$skip", "20")]
        assert list(other.items()) == [("$top", "10"), ("$skip", "20")]

    def test_merge_mapping(self):
        query = QueryParameters()
        query.merge({"@target": "'https://other'"})
        assert query.get("@target") == "'https://other'"

    def test_remove_and_clear(self):
        query = QueryParameters({"a": "1", "b": "2"})
        assert query.remove("a") == "1"
        assert query.remove("missing") is None
        query.clear()
        assert query.count == 0

    def test_copy_is_independent(self):
        query = QueryParameters({"a": "1"})
        copied = query.copy()
        copied.add("b", "2")
        assert "b" not in query
        assert copied == {"a": "1", "b": "2"}


class TestSerializeUrlAndQuery:
    """Tests for serialize_url_and_query."""

    def test_no_parameters(self):
        assert serialize_url_and_query("_api/web", QueryParameters()) == "_api/web"

    def test_parameters_in_insertion_order(self):
        query = QueryParameters()
        query.add("$select", "Title,Id")
        query.add("$top", "5")
        assert serialize_url_and_query("_api/web/lists", query) == "_api/web/lists?$select=Title,Id&$top=5"

    def test_aliased_parameter_rewrite(self):
        query = QueryParameters({"$select": "Title,Id"})
        url = "_api/web/getFolderByServerRelativeUrl('!@p1::Some long value')/files"
        assert serialize_url_and_query(url, query) == (
            "_api/web/getFolderByServerRelativeUrl(@p1)/files?@p1='Some long value'&$select=Title,Id"
        )

    def test_several_aliases(self):
        url = "_api/web/a('!@p1::one')/b('!@p2::two')"
        assert serialize_url_and_query(url, QueryParameters()) == "_api/web/a(@p1)/b(@p2)?@p1='one'&@p2='two'"

    def test_accumulated_entry_wins_over_alias(self):
        query = QueryParameters({"@p1": "'override'"})
        result = serialize_url_and_query("_api/x('!@p1::value')", query)
        assert result == "_api/x(@p1)?@p1='override'"

    def test_value_with_special_characters(self):
        result = serialize_url_and_query("_api/x('!@p1::a/b(c)?d')", QueryParameters())
        assert result == "_api/x(@p1)?@p1='a/b(c)?d'"

    def test_malformed_token_left_verbatim(self):
        url = "_api/x('!@p1:value')"
        assert serialize_url_and_query(url, QueryParameters()) == url

    def test_does_not_modify_query(self):
        query = QueryParameters({"$top": "1"})
        serialize_url_and_query("_api/x('!@p1::v')", query)
        assert query.get_keys() == ["$top"]

    def test_rewrite_is_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="sp_rest_client.query"):
            serialize_url_and_query("_api/x('!@p1::v')", QueryParameters())
        assert "label: @p1" in caplog.text
