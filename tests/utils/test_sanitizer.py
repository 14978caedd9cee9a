"""Tests for argument sanitization."""

import re

from jobsignal.utils.sanitizer import FILTERED, RECURSIVE, sanitize


class TestSanitize:
    def test_scalars_pass_through(self):
        assert sanitize(42, ["password"]) == 42
        assert sanitize("text", ["password"]) == "text"
        assert sanitize(None, ["password"]) is None

    def test_filters_matching_keys(self):
        result = sanitize({"password": "hunter2", "email": "a@example.com"}, ["password"])
        assert result == {"password": FILTERED, "email": "a@example.com"}

    def test_exact_match_only_for_strings(self):
        result = sanitize({"password_hint": "pet", "password": "x"}, ["password"])
        assert result == {"password_hint": "pet", "password": FILTERED}

    def test_regex_filters(self):
        pattern = re.compile(r"(?i)token|secret")
        result = sanitize({"API_TOKEN": "t", "client_secret": "s", "name": "n"}, [pattern])
        assert result == {"API_TOKEN": FILTERED, "client_secret": FILTERED, "name": "n"}

    def test_nested_structures(self):
        arguments = [{"user": {"password": "x", "id": 1}}, ({"password": "y"},)]

        result = sanitize(arguments, ["password"])

        assert result == [{"user": {"password": FILTERED, "id": 1}}, [{"password": FILTERED}]]

    def test_non_string_keys_are_compared_as_strings(self):
        assert sanitize({1: "one"}, ["1"]) == {1: FILTERED}

    def test_no_filters(self):
        data = [{"password": "x"}]
        assert sanitize(data) == data

    def test_input_is_not_mutated(self):
        data = [{"password": "x"}]
        result = sanitize(data, ["password"])

        assert data == [{"password": "x"}]
        assert result is not data

    def test_recursive_values(self):
        data: dict = {"name": "loop"}
        data["self"] = data

        assert sanitize(data, []) == {"name": "loop", "self": RECURSIVE}

    def test_repeated_but_not_recursive_values(self):
        shared = {"password": "x"}
        result = sanitize([shared, shared], ["password"])
        assert result == [{"password": FILTERED}, {"password": FILTERED}]
