"""Tests for URL assembly, path sanitization and case conversion."""

from __future__ import annotations

import pytest

from dynapi.client.paths import (
    build_query_string,
    build_url,
    camel_to_kebab,
    convert_object_keys,
    kebab_to_camel,
    sanitize_path,
)
from dynapi.exceptions import InvalidUsageError


class TestCaseConversion:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("getUserProfile", "get-user-profile"),
            ("users", "users"),
            ("userID", "user-id"),
            ("already-kebab", "already-kebab"),
        ],
    )
    def test_camel_to_kebab(self, value: str, expected: str) -> None:
        assert camel_to_kebab(value) == expected

    def test_kebab_to_camel(self) -> None:
        assert kebab_to_camel("get-user-profile") == "getUserProfile"
        assert kebab_to_camel("plain") == "plain"

    def test_convert_object_keys(self) -> None:
        assert convert_object_keys({"pageSize": 10, "sortBy": "name"}, camel_to_kebab) == {
            "page-size": 10,
            "sort-by": "name",
        }


class TestSanitizePath:
    def test_strips_markup_characters(self) -> None:
        assert sanitize_path("/users/<script>'x'\"") == "/users/scriptx"

    def test_removes_traversal(self) -> None:
        assert sanitize_path("/users/../admin") == "/users/admin"

    def test_collapses_slashes(self) -> None:
        assert sanitize_path("//users///list") == "/users/list"

    def test_empty_path_raises(self) -> None:
        with pytest.raises(InvalidUsageError):
            sanitize_path("")


class TestQueryString:
    def test_drops_none(self) -> None:
        assert build_query_string({"a": 1, "b": None}) == "a=1"

    def test_encodes_keys_and_values(self) -> None:
        assert build_query_string({"q": "a b&c", "x/y": "1"}) == "q=a%20b%26c&x%2Fy=1"

    def test_booleans_and_lists(self) -> None:
        assert build_query_string({"active": True, "ids": [1, 2]}) == "active=true&ids=1%2C2"

    def test_empty(self) -> None:
        assert build_query_string(None) == ""
        assert build_query_string({}) == ""


class TestBuildUrl:
    def test_joins_base_and_path(self) -> None:
        assert build_url("https://api.example.com/", "/users/list") == "https://api.example.com/users/list"

    def test_base_with_prefix(self) -> None:
        assert build_url("https://api.example.com/v1", "users") == "https://api.example.com/v1/users"

    def test_appends_query(self) -> None:
        url = build_url("https://api.example.com", "/posts/search", {"page": 2, "q": None})
        assert url == "https://api.example.com/posts/search?page=2"

    def test_kebab_case_converts_path_and_query_keys(self) -> None:
        url = build_url(
            "https://api.example.com",
            "/userAccounts/getProfile",
            {"pageSize": 5},
            use_kebab_case=True,
        )
        assert url == "https://api.example.com/user-accounts/get-profile?page-size=5"

    def test_kebab_case_off_keeps_names(self) -> None:
        url = build_url("https://api.example.com", "/users/getProfile", {"pageSize": 5})
        assert url == "https://api.example.com/users/getProfile?pageSize=5"
