"""
Tests for language name conversion.
"""

import json
from collections import Counter

import pytest

from itunes_connect.languages import (
    LanguageConverter,
    to_full_language,
    to_language_code,
)


@pytest.fixture
def converter():
    """Converter using the packaged mapping."""
    return LanguageConverter()


class TestLanguageConverter:
    """Test conversions in both directions."""

    @pytest.mark.parametrize(
        "name,locale",
        [
            ("English", "en-US"),
            ("English_CA", "en-CA"),
            ("Brazilian Portuguese", "pt-BR"),
            ("German", "de-DE"),
            ("Simplified Chinese", "zh-Hans"),
        ],
    )
    def test_known_names(self, converter, name, locale):
        """Test names convert to locales and back."""
        assert converter.from_itc_to_standard(name) == locale
        assert converter.from_standard_to_itc(locale) == name

    def test_alternatives(self, converter):
        """Test alternative spellings match in the reverse direction."""
        assert converter.from_standard_to_itc("de") == "German"
        assert converter.from_standard_to_itc("zh-CN") == "Simplified Chinese"
        assert converter.from_standard_to_itc("pt_BR") == "Brazilian Portuguese"

    def test_unknown_values(self, converter):
        """Test unknown values return None instead of raising."""
        assert converter.from_itc_to_standard("Klingon") is None
        assert converter.from_standard_to_itc("tlh-KL") is None
        assert converter.from_itc_to_standard("") is None

    def test_round_trip(self, converter):
        """Test every uniquely mapped name survives a round trip."""
        entries = converter.mapping
        keys = Counter()
        for entry in entries:
            keys[entry["locale"]] += 1
            for alternative in entry.get("alternatives") or []:
                keys[alternative] += 1

        checked = 0
        for entry in entries:
            if keys[entry["locale"]] != 1:
                continue
            locale = converter.from_itc_to_standard(entry["name"])
            assert converter.from_standard_to_itc(locale) == entry["name"]
            checked += 1
        assert checked > 0

    def test_mapping_loaded_lazily(self, tmp_path):
        """Test the file is only read on the first lookup, and only once."""
        path = tmp_path / "mapping.json"
        converter = LanguageConverter(mapping_path=path)

        path.write_text(json.dumps([{"name": "Elvish", "locale": "el-ME", "alternatives": []}]))
        assert converter.from_itc_to_standard("Elvish") == "el-ME"

        path.write_text(json.dumps([]))
        assert converter.from_itc_to_standard("Elvish") == "el-ME"

    def test_explicit_mapping(self):
        """Test entries passed in directly."""
        converter = LanguageConverter(mapping=[{"name": "Pirate", "locale": "en-PR"}])
        assert converter.from_standard_to_itc("en-PR") == "Pirate"
        assert converter.from_standard_to_itc("en-US") is None


class TestModuleFunctions:
    """Test the shared converter shortcuts."""

    def test_to_language_code(self):
        assert to_language_code("French_CA") == "fr-CA"
        assert to_language_code("Nonexistent") is None

    def test_to_full_language(self):
        assert to_full_language("ja") == "Japanese"
        assert to_full_language("xx") is None
