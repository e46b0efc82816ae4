"""
Tests for KCQL selector building and parsing.
"""

import pytest

from kcql import selectors
from kcql.exceptions import SelectorError


class TestFieldTerms:
    """Tests for field selector terms."""

    def test_plain(self):
        assert selectors.field_term("metadata.name", "web") == "metadata.name=web"

    def test_escaping(self):
        assert selectors.field_term("spec.x", "a,b=c\\d") == "spec.x=a\\,b\\=c\\\\d"

    def test_scalars(self):
        assert selectors.field_term("spec.replicas", 3) == "spec.replicas=3"
        assert selectors.field_term("spec.paused", True) == "spec.paused=true"

    def test_non_scalar(self):
        with pytest.raises(SelectorError):
            selectors.field_term("spec", {"a": 1})


class TestLabelTerms:
    """Tests for label selector terms and validation."""

    def test_valid(self):
        assert selectors.label_term("app", "web") == "app=web"
        assert selectors.label_term("app.kubernetes.io/name", "web-1") == "app.kubernetes.io/name=web-1"
        assert selectors.label_term("tier", "") == "tier="

    @pytest.mark.parametrize("key", ["-bad", "bad-", "a" * 64, "Bad.Prefix/name", "/name", "a/b/"])
    def test_invalid_key(self, key):
        with pytest.raises(SelectorError) as exc:
            selectors.label_term(key, "x")
        assert exc.value.key == key

    def test_invalid_value(self):
        with pytest.raises(SelectorError) as exc:
            selectors.label_term("app", "has space")
        assert exc.value.value == "has space"


class TestParseSelector:
    """Tests for parse_selector()."""

    def test_terms(self):
        assert selectors.parse_selector("a=1,b==2,c!=3") == [
            ("a", "=", "1"),
            ("b", "=", "2"),
            ("c", "!=", "3"),
        ]

    def test_empty(self):
        assert selectors.parse_selector("") == []

    def test_escapes_round_trip(self):
        term = selectors.field_term("spec.x", "a,b=c")
        assert selectors.parse_selector(term) == [("spec.x", "=", "a,b=c")]

    def test_missing_operator(self):
        with pytest.raises(SelectorError):
            selectors.parse_selector("novalue")
