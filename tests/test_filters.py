"""
Venue Admin — Listing Filter Tests
====================================

What:  Query-string parsers and the search / pagination layers.
"""

import uuid
from datetime import timezone

import pytest
from sqlalchemy import select

from venue_admin.exceptions import ValidationError
from venue_admin.models.venue import Venue
from venue_admin.services.filters import (
    compact,
    paginate,
    parse_bool_list,
    parse_datetime,
    parse_optional_uuid,
    parse_uuid_list,
    search_condition,
)


class TestParsers:

    def test_bool_list_accepts_scalar_and_json_array(self):
        assert parse_bool_list("true", "is_active") == [True]
        assert parse_bool_list("[true, false]", "is_active") == [True, False]
        assert parse_bool_list('["false"]', "is_active") == [False]

    def test_bool_list_empty_means_no_filter(self):
        assert parse_bool_list(None, "is_active") is None
        assert parse_bool_list("  ", "is_active") is None

    def test_bool_list_rejects_garbage(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_bool_list("[yes]", "is_active")
        assert exc_info.value.key == "is_active"

    def test_uuid_list(self):
        a, b = uuid.uuid4(), uuid.uuid4()
        assert parse_uuid_list(str(a), "ground") == [a]
        assert parse_uuid_list(f'["{a}", "{b}"]', "ground") == [a, b]

    def test_uuid_list_rejects_bad_id(self):
        with pytest.raises(ValidationError, match='"ground" must be a valid id'):
            parse_uuid_list('["nope"]', "ground")

    def test_optional_uuid(self):
        assert parse_optional_uuid("", "city") is None
        with pytest.raises(ValidationError):
            parse_optional_uuid("123", "city")

    def test_datetime_naive_is_utc(self):
        value = parse_datetime("2026-03-01", "start_date")
        assert value.tzinfo == timezone.utc
        assert (value.year, value.month, value.day) == (2026, 3, 1)

    def test_datetime_trailing_z(self):
        value = parse_datetime("2026-03-01T10:30:00Z", "start_date")
        assert value.hour == 10 and value.utcoffset().total_seconds() == 0

    def test_datetime_required_and_valid(self):
        with pytest.raises(ValidationError, match="is required"):
            parse_datetime(None, "end_date")
        with pytest.raises(ValidationError, match="valid date"):
            parse_datetime("yesterday", "end_date")


class TestQueryLayers:

    def test_blank_search_adds_nothing(self):
        assert search_condition("  ", [Venue.name]) is None
        assert compact(None, search_condition(None, [Venue.name])) == []

    def test_search_is_case_insensitive_partial_match(self):
        condition = search_condition("stad", [Venue.name, Venue.address])
        sql = str(select(Venue.id).where(condition)).lower()
        assert "lower(venues.name) like lower" in sql
        assert "lower(venues.address) like lower" in sql

    def test_search_escapes_wildcards(self):
        condition = search_condition("50%_off", [Venue.name])
        compiled = select(Venue.id).where(condition).compile()
        assert "%50\\%\\_off%" in compiled.params.values()

    def test_paginate(self):
        sql = str(paginate(select(Venue.id), offset=10, limit=5))
        assert "LIMIT" in sql and "OFFSET" in sql
