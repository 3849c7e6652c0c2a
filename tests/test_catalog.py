"""Tests for lucide_picker catalog module."""

import json

import pytest

from lucide_picker.catalog import IconCatalog, IconEntry, filter_names, load


class TestLoad:
    """Tests for loading catalog sources."""

    def test_load_from_mapping(self, scenario_icons):
        """Test loading from an in-memory mapping keeps insertion order."""
        icons = load(scenario_icons)
        assert list(icons) == ["rocket", "settings", "rocket-ship"]
        assert icons["rocket"] == ("launch", "space")

    def test_load_from_path(self, temp_dir, scenario_icons):
        """Test loading from a JSON file."""
        path = temp_dir / "icons.json"
        path.write_text(json.dumps(scenario_icons))

        icons = load(path)
        assert icons["settings"] == ("gear", "config")

    def test_load_from_json_text(self):
        """Test loading from JSON text."""
        icons = load('{"zap": ["flash", "lightning"]}')
        assert icons == {"zap": ("flash", "lightning")}

    def test_missing_file_is_empty(self, temp_dir):
        """Test that a missing catalog file yields an empty catalog."""
        assert load(temp_dir / "nope.json") == {}

    def test_invalid_json_is_empty(self, temp_dir):
        """Test that malformed JSON yields an empty catalog."""
        path = temp_dir / "icons.json"
        path.write_text("{not json")
        assert load(path) == {}

    def test_non_object_json_is_empty(self, temp_dir):
        """Test that a JSON array is rejected."""
        path = temp_dir / "icons.json"
        path.write_text('["rocket", "settings"]')
        assert load(path) == {}

    def test_non_list_tags_become_empty(self):
        """Test that tag values which are not lists are dropped."""
        icons = load({"rocket": "launch", "zap": None, "x": [1, "close"]})
        assert icons["rocket"] == ()
        assert icons["zap"] == ()
        assert icons["x"] == ("1", "close")


class TestFilterNames:
    """Tests for the substring filter."""

    def test_scenario_launch(self, scenario_icons):
        """Test that a tag query returns matches in catalog order."""
        names = list(scenario_icons)
        assert filter_names(names, "launch", scenario_icons) == ["rocket", "rocket-ship"]

    def test_scenario_gear(self, scenario_icons):
        names = list(scenario_icons)
        assert filter_names(names, "gear", scenario_icons) == ["settings"]

    def test_scenario_no_match(self, scenario_icons):
        names = list(scenario_icons)
        assert filter_names(names, "zzz", scenario_icons) == []

    def test_empty_query_returns_all(self, scenario_icons):
        """Test that an empty query returns every name unchanged."""
        names = list(scenario_icons)
        result = filter_names(names, "", scenario_icons)
        assert result == names
        assert result is not names

    def test_whitespace_query_returns_all(self, scenario_icons):
        names = list(scenario_icons)
        assert filter_names(names, "   ", scenario_icons) == names

    def test_query_is_trimmed_and_lowercased(self, scenario_icons):
        """Test case-insensitive matching on a padded query."""
        names = list(scenario_icons)
        assert filter_names(names, "  LAUNCH ", scenario_icons) == ["rocket", "rocket-ship"]

    def test_matches_name_substring(self, scenario_icons):
        names = list(scenario_icons)
        assert filter_names(names, "ship", scenario_icons) == ["rocket-ship"]

    def test_matches_across_name_and_tag(self, scenario_icons):
        """Test that the composite string joins name and tags with spaces."""
        names = list(scenario_icons)
        assert filter_names(names, "rocket launch", scenario_icons) == ["rocket"]

    def test_multi_word_tag(self):
        icons = {"search": ["find", "magnifying glass"], "zap": ["flash"]}
        assert filter_names(list(icons), "magnifying gl", icons) == ["search"]

    def test_names_missing_from_icons_match_on_name(self):
        """Test that a name without tags still matches on its own text."""
        assert filter_names(["rocket", "zap"], "zap", {}) == ["zap"]


class TestIconCatalog:
    """Tests for the IconCatalog wrapper."""

    def test_default_catalog_loads(self):
        """Test that the bundled catalog has entries."""
        catalog = IconCatalog.default()
        assert len(catalog) > 0
        assert "rocket" in catalog
        assert "settings" in catalog

    @pytest.mark.parametrize("query", ["arrow", "LAUNCH", "e", "direction", "cancel", "zzz"])
    def test_search_is_ordered_subset(self, query):
        """Test that results keep catalog order and all contain the query."""
        catalog = IconCatalog.default()
        result = catalog.search(query)

        positions = [catalog.names.index(name) for name in result]
        assert positions == sorted(positions)
        for name in result:
            composite = f"{name} {' '.join(catalog.tags(name))}".lower()
            assert query.strip().lower() in composite

    def test_search_empty_returns_all(self):
        catalog = IconCatalog.default()
        assert catalog.search("") == catalog.names

    def test_get_entry(self, scenario_icons):
        """Test looking up an entry."""
        catalog = IconCatalog(scenario_icons)
        entry = catalog.get("rocket")
        assert entry == IconEntry(name="rocket", tags=("launch", "space"))
        assert entry.searchable_text() == "rocket launch space"
        assert catalog.get("missing") is None

    def test_entries_are_immutable(self, scenario_icons):
        catalog = IconCatalog(scenario_icons)
        entry = catalog.entries()[0]
        with pytest.raises(Exception):
            entry.name = "other"

    def test_to_dict(self, scenario_icons):
        catalog = IconCatalog(scenario_icons)
        assert catalog.to_dict() == scenario_icons

    def test_from_source(self, temp_dir, scenario_icons):
        path = temp_dir / "icons.json"
        path.write_text(json.dumps(scenario_icons))
        catalog = IconCatalog.from_source(path)
        assert catalog.names == ["rocket", "settings", "rocket-ship"]
