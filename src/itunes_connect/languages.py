"""
Conversion between iTunes Connect language names and standard locale codes.

iTunes Connect labels languages with its own names ("English_CA",
"Brazilian Portuguese") while everything else speaks locale codes
("en-CA", "pt-BR"). The mapping table ships with the package as
``assets/languageMapping.json``.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_MAPPING_PATH = Path(__file__).parent / "assets" / "languageMapping.json"


class LanguageConverter:
    """
    Looks up language names in the iTunes Connect mapping table.

    The table is read on first lookup and kept for the lifetime of the
    converter.

    Args:
        mapping_path: Path to a JSON mapping file (defaults to the packaged one)
        mapping: Already loaded mapping entries, used instead of a file
    """

    def __init__(
        self,
        mapping_path: Optional[Union[str, Path]] = None,
        mapping: Optional[List[Dict]] = None,
    ):
        self.mapping_path = Path(mapping_path) if mapping_path else DEFAULT_MAPPING_PATH
        self._mapping: Optional[List[Dict]] = list(mapping) if mapping is not None else None
        self._lock = threading.Lock()

    @property
    def mapping(self) -> List[Dict]:
        """The mapping entries, loaded once."""
        if self._mapping is None:
            with self._lock:
                if self._mapping is None:
                    self._mapping = self._load_mapping()
        return self._mapping

    def _load_mapping(self) -> List[Dict]:
        logger.debug(f"Loading language mapping from {self.mapping_path}")
        with open(self.mapping_path, "r", encoding="utf-8") as f:
            return json.load(f)

    def from_itc_to_standard(self, name: str) -> Optional[str]:
        """
        Convert an iTunes Connect name (English_CA, Brazilian Portuguese)
        to a locale code (en-CA, pt-BR).

        Returns None when the name is unknown.
        """
        for entry in self.mapping:
            if entry.get("name") == name:
                return entry.get("locale")
        return None

    def from_standard_to_itc(self, locale: str) -> Optional[str]:
        """
        Convert a locale code (en-US, de-DE) to the iTunes Connect name
        (English, German). Alternative spellings listed for an entry match too.

        Returns None when the locale is unknown.
        """
        for entry in self.mapping:
            if entry.get("locale") == locale or locale in (entry.get("alternatives") or []):
                return entry.get("name")
        return None


_default_converter = LanguageConverter()


def to_language_code(name: str) -> Optional[str]:
    """Convert an iTunes Connect language name to a locale code."""
    return _default_converter.from_itc_to_standard(name)


def to_full_language(locale: str) -> Optional[str]:
    """Convert a locale code to the iTunes Connect language name."""
    return _default_converter.from_standard_to_itc(locale)
