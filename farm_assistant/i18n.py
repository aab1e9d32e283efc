import json
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional

TRANSLATIONS_FILE = Path(__file__).resolve().parent / "translations.json"
DEFAULT_LANGUAGE = "en"

LANGUAGES = {
    "en": "English",
    "ta": "தமிழ் (Tamil)",
    "kn": "ಕನ್ನಡ (Kannada)",
}


@lru_cache(maxsize=None)
def load_translations(path: Path = TRANSLATIONS_FILE) -> Dict[str, Dict[str, str]]:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


class TextProvider:
    """Looks a key up in the selected language, then English, then returns the key."""

    def __init__(self, language: str = DEFAULT_LANGUAGE, translations: Optional[Dict[str, Dict[str, str]]] = None):
        self.translations = translations if translations is not None else load_translations()
        self.language = language if language in self.translations else DEFAULT_LANGUAGE

    def __call__(self, key: str) -> str:
        value = self.translations.get(self.language, {}).get(key)
        if value:
            return value
        return self.translations.get(DEFAULT_LANGUAGE, {}).get(key) or key
