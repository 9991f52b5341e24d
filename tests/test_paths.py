"""Tests for dotted-path addressing into documents."""

import pytest

from site_editor.errors import InvalidPath
from site_editor.paths import (
    MISSING,
    ambiguous_keys,
    get_value,
    join_path,
    set_value,
    split_path,
)


@pytest.fixture
def doc() -> dict:
    return {
        "title": "A",
        "team": [{"name": "Ada", "links": {"site": "ada.dev"}}],
        "tags": ["x", "y"],
    }


class TestGetValue:
    def test_nested_mapping_and_index(self, doc: dict) -> None:
        assert get_value(doc, ("team", 0, "name")) == "Ada"
        assert get_value(doc, ("team", 0, "links", "site")) == "ada.dev"

    def test_empty_path_is_the_document(self, doc: dict) -> None:
        assert get_value(doc, ()) is doc

    def test_missing_key(self, doc: dict) -> None:
        assert get_value(doc, ("nope",)) is MISSING

    def test_index_out_of_range(self, doc: dict) -> None:
        assert get_value(doc, ("team", 5, "name")) is MISSING

    def test_through_a_scalar(self, doc: dict) -> None:
        assert get_value(doc, ("title", "inner")) is MISSING

    def test_text_segment_on_sequence(self, doc: dict) -> None:
        assert get_value(doc, ("tags", "first")) is MISSING

    def test_negative_index(self, doc: dict) -> None:
        assert get_value(doc, ("tags", -1)) is MISSING

    def test_decimal_text_indexes_sequence(self, doc: dict) -> None:
        assert get_value(doc, ("tags", "1")) == "y"

    def test_integer_mapping_key(self) -> None:
        assert get_value({2024: {"title": "Year"}}, ("2024", "title")) == "Year"

    def test_missing_is_falsy(self) -> None:
        assert not MISSING
        assert repr(MISSING) == "MISSING"


class TestSetValue:
    def test_replace_leaf(self, doc: dict) -> None:
        set_value(doc, ("team", 0, "name"), "Grace")
        assert doc["team"][0]["name"] == "Grace"

    def test_replace_sequence_item(self, doc: dict) -> None:
        set_value(doc, ("tags", 1), "z")
        assert doc["tags"] == ["x", "z"]

    def test_new_key_on_existing_mapping(self, doc: dict) -> None:
        set_value(doc, ("team", 0, "role"), "lead")
        assert doc["team"][0]["role"] == "lead"

    def test_empty_path(self, doc: dict) -> None:
        with pytest.raises(InvalidPath):
            set_value(doc, (), "x")

    def test_missing_intermediate(self, doc: dict) -> None:
        with pytest.raises(InvalidPath):
            set_value(doc, ("settings", "theme"), "dark")
        assert "settings" not in doc

    def test_intermediate_scalar(self, doc: dict) -> None:
        with pytest.raises(InvalidPath):
            set_value(doc, ("title", "inner"), "x")

    def test_index_out_of_range(self, doc: dict) -> None:
        with pytest.raises(InvalidPath):
            set_value(doc, ("tags", 2), "z")

    def test_text_index_on_sequence(self, doc: dict) -> None:
        with pytest.raises(InvalidPath):
            set_value(doc, ("tags", "last"), "z")

    def test_negative_index(self, doc: dict) -> None:
        with pytest.raises(InvalidPath):
            set_value(doc, ("tags", -1), "z")
        assert doc["tags"] == ["x", "y"]


class TestDottedText:
    def test_join(self) -> None:
        assert join_path(("team", 0, "name")) == "team.0.name"

    def test_split_without_document(self) -> None:
        assert split_path("team.0.name") == ("team", 0, "name")

    def test_split_against_document(self, doc: dict) -> None:
        assert split_path("tags.1", doc) == ("tags", 1)

    def test_decimal_mapping_key_stays_text(self) -> None:
        assert split_path("versions.1", {"versions": {"1": "one"}}) == ("versions", "1")

    def test_integer_mapping_key_resolved(self) -> None:
        assert split_path("2024.title", {2024: {"title": "x"}}) == (2024, "title")

    @pytest.mark.parametrize("text", ["", "  ", "a..b", ".a", "a."])
    def test_malformed(self, text: str) -> None:
        with pytest.raises(InvalidPath):
            split_path(text)


class TestAmbiguousKeys:
    def test_reports_dotted_keys(self) -> None:
        doc = {"a.b": 1, "c": {"d.e": 2, "f": [{"g.h": 3}]}}
        assert ambiguous_keys(doc) == [("a.b",), ("c", "d.e"), ("c", "f", 0, "g.h")]

    def test_nothing_to_report(self, doc: dict) -> None:
        assert ambiguous_keys(doc) == []
