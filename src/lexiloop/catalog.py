"""Loading catalog entries from JSON files."""
import json
from pathlib import Path
from typing import List, Union

# Field names used by the web app's vocabulary table
FIELD_ALIASES = {
    "english_word": "source_text",
    "hebrew_translation": "target_text",
}

FIELDS = {"source_text", "target_text", "category", "level", "example_sentence", "priority", "pronunciation"}
REQUIRED_FIELDS = {"source_text", "target_text", "category", "level"}


def normalize_record(raw: dict) -> dict:
    """Catalog record with canonical field names; unknown fields are dropped."""
    record = {}
    for key, value in raw.items():
        key = FIELD_ALIASES.get(key, key)
        if key in FIELDS:
            record[key] = value
    missing = REQUIRED_FIELDS - record.keys()
    if missing:
        raise ValueError(f"Catalog record is missing {', '.join(sorted(missing))}: {raw}")
    record["priority"] = int(record.get("priority") or 0)
    record.setdefault("example_sentence", "")
    return record


def load_catalog(path: Union[str, Path]) -> List[dict]:
    """Read a JSON list of catalog records."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("words", [])
    return [normalize_record(item) for item in data]
