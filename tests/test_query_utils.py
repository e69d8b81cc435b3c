from datetime import datetime, timedelta, timezone

import pytest

import media_catalog.utils.query_utils as qutils


@pytest.mark.parametrize("raw, expected", [
    (None, 1),
    ("", 1),
    ("abc", 1),
    ("0", 1),
    ("3", 3),
    (" 4 ", 4),
    ("-2", 1),
    (7, 7),
])
def test_parse_positive_int_page(raw, expected):
    assert qutils.parse_positive_int(raw, 1) == expected


def test_parse_list_query_applies_defaults_and_clamps_limit():
    query = qutils.parse_list_query(page=None, limit="500", search="  dark ",
                                    record_type="", sort_by=None,
                                    default_limit=10, max_limit=100)
    assert query.page == 1
    assert query.limit == 100
    assert query.search == "dark"
    assert query.type is None
    assert query.sort_by == "-createdAt"

    negative = qutils.parse_list_query(page="-3", limit="-1")
    assert (negative.page, negative.limit) == (1, 1)


def test_filter_search_is_or_across_fields_and_case_insensitive():
    f = qutils.RecordFilter(owner="alice", search="DARK")
    assert f.matches({"owner": "alice", "title": "Dark Matter", "director": "x", "genre": "y"})
    assert f.matches({"owner": "alice", "title": "x", "director": "Darko", "genre": None})
    assert f.matches({"owner": "alice", "title": "x", "director": "y", "genre": "dark comedy"})
    assert not f.matches({"owner": "alice", "title": "Light", "director": "y"})
    assert not f.matches({"owner": "bob", "title": "Dark Matter"})


def test_filter_search_is_literal_not_a_pattern():
    f = qutils.RecordFilter(owner="alice", search="(.*")
    assert not f.matches({"owner": "alice", "title": "Anything"})
    assert f.matches({"owner": "alice", "title": "Odd (.*) title"})


def test_filter_type_and_search_are_combined():
    f = qutils.RecordFilter(owner="alice", search="dark", type="Movie")
    assert not f.matches({"owner": "alice", "title": "Dark Matter", "type": "TV Show"})
    assert f.matches({"owner": "alice", "title": "Dark Waters", "type": "Movie"})


def test_parse_sort_spec():
    assert qutils.parse_sort_spec("-createdAt") == [("createdAt", True)]
    assert qutils.parse_sort_spec("type, -year +title") == [
        ("type", False), ("year", True), ("title", False)]
    assert qutils.parse_sort_spec("password -year") == [("year", True)]
    assert qutils.parse_sort_spec("nonsense") == [("createdAt", True)]


def test_sort_documents_multi_key_with_missing_values():
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    docs = [
        {"id": "a", "type": "Movie", "rating": 7.0, "createdAt": base},
        {"id": "b", "type": "TV Show", "rating": 9.0, "createdAt": base + timedelta(seconds=1)},
        {"id": "c", "type": "Movie", "createdAt": base + timedelta(seconds=2)},
        {"id": "d", "type": "Movie", "rating": 8.5, "createdAt": base + timedelta(seconds=3)},
    ]
    ordered = qutils.sort_documents(docs, [("type", False), ("rating", True)])
    assert [d["id"] for d in ordered] == ["d", "a", "c", "b"]

    ascending = qutils.sort_documents(docs, [("rating", False)])
    assert [d["id"] for d in ascending] == ["c", "a", "d", "b"]


def test_sort_documents_keeps_creation_order_for_ties():
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    docs = [
        {"id": "late", "year": 2000, "createdAt": base + timedelta(seconds=5)},
        {"id": "early", "year": 2000, "createdAt": base},
    ]
    assert [d["id"] for d in qutils.sort_documents(docs, [("year", True)])] == ["early", "late"]


def test_page_math():
    assert qutils.page_offset(1, 10) == 0
    assert qutils.page_offset(3, 10) == 20
    assert qutils.page_count(0, 10) == 0
    assert qutils.page_count(10, 10) == 1
    assert qutils.page_count(11, 10) == 2
