"""Mapping between learner level names and catalog level tags."""
from typing import List, Optional

# Profile levels and CEFR levels to the level tags used in the catalog
LEVEL_TAGS = {
    "letters": ["basic", "בסיסי"],
    "beginner": ["basic", "בסיסי", "beginner"],
    "elementary": ["basic", "בסיסי", "elementary"],
    "basic": ["basic", "בסיסי", "beginner", "elementary"],
    "intermediate": ["intermediate"],
    "upper-intermediate": ["advanced", "upper-intermediate"],
    "advanced": ["advanced", "upper-intermediate"],
    "a1": ["basic", "בסיסי"],
    "a2": ["basic", "intermediate"],
    "b1": ["intermediate"],
    "b2": ["advanced"],
    "c1": ["advanced"],
    "c2": ["advanced"],
}

AUDIENCE_LEVEL_TAGS = {
    "kids": ["basic", "בסיסי"],
    "students": ["basic", "intermediate"],
    "business": ["intermediate", "advanced"],
}

DEFAULT_LEVEL_TAGS = ["basic"]


def resolve_levels(level: Optional[str]) -> List[str]:
    """Catalog level tags for a level name.

    Unknown levels are matched literally; an empty level matches everything
    and returns an empty list.
    """
    if not level or not level.strip():
        return []
    key = level.strip().lower()
    return list(LEVEL_TAGS.get(key, [level.strip()]))


def levels_for_profile(skill_level: Optional[str], audience_type: Optional[str]) -> List[str]:
    """Level tags for onboarding: the skill level wins, then the audience type."""
    if skill_level:
        return resolve_levels(skill_level)
    if audience_type:
        return list(AUDIENCE_LEVEL_TAGS.get(audience_type.strip().lower(), DEFAULT_LEVEL_TAGS))
    return list(DEFAULT_LEVEL_TAGS)


def split_categories(category) -> List[str]:
    """Category tags from a comma-separated string or a list."""
    if not category:
        return []
    if isinstance(category, str):
        items = category.split(",")
    else:
        items = category
    return [item.strip() for item in items if item and item.strip()]
