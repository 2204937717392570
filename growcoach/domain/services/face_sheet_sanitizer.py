"""
Face sheet sanitization.

Turns arbitrary client JSON into the bounded intake-profile schema. Every
selectable field is restricted to a closed option set, every score to a
closed range and every free-text field to a maximum length. Nothing in
here raises on bad input; unknown or malformed values fall back to
defaults.
"""

import math
import re
from typing import Any, Dict, Iterable, List, Optional, Sequence

# ============================================================================
# OPTION SETS
# ============================================================================

HONORIFIC_OPTIONS = ("san", "kun", "chan", "noHonorific", "english", "other")
GENDER_OPTIONS = (
    "female", "male", "nonBinary", "transWoman", "transMan",
    "xGender", "noAnswer", "other", "selfDescribe",
)
EMPLOYMENT_TYPES = ("fullTime", "partTime", "dispatch", "student", "other")
WORK_PATTERNS = ("day", "twoShift", "threeShift", "nightOnly", "flexRemote", "other")
LIVING_ARRANGEMENTS = ("alone", "withFamily", "withOthers", "noAnswer")
CARE_RESPONSIBILITIES = ("childcare", "caregiving", "pets", "none", "other")
PERSONALITY_TRAITS = (
    "extraversion", "agreeableness", "conscientiousness",
    "emotionalStability", "openness",
)
PERSONALITY_TAGS = (
    "logical", "empathetic", "careful", "challenging", "planned",
    "flexible", "observant", "quickDecider", "other",
)
LIFE_AREAS = (
    "sleep", "nutrition", "activity", "work", "learning", "family",
    "friends", "hobby", "finance", "housing", "physicalHealth", "mental",
    "rest", "digital", "timeManagement",
)
COACHING_TOPICS = (
    "sleepFatigue", "stressCare", "timeManagement", "communication",
    "careerLearning", "healthHabits", "finance", "relationships",
    "selfCompassion", "selfEfficacy", "other",
)
SAFETY_CONCERNS = ("none", "insomnia", "selfHarm", "domesticViolence", "substance", "other")

DEFAULT_LIVING_ARRANGEMENT = "noAnswer"
MAX_STARRED_TOPICS = 3

TRAIT_RANGE = (1, 5)
SATISFACTION_RANGE = (0, 10)

# Maximum lengths for free-text fields
TEXT_LIMITS: Dict[str, int] = {
    "nickname": 40,
    "honorificOther": 40,
    "genderOther": 40,
    "genderFreeText": 200,
    "age": 10,
    "role": 80,
    "organization": 120,
    "employmentOther": 80,
    "workPatternOther": 80,
    "weeklyHours": 20,
    "stressors": 1000,
    "supportResources": 1000,
    "household": 200,
    "careOther": 80,
    "careTime": 200,
    "tagOther": 80,
    "strengths": 500,
    "cautions": 500,
    "areaNote": 200,
    "dailyRoutine": 1000,
    "topicOther": 80,
    "challenge": 500,
    "kpi": 200,
    "concernOther": 200,
}

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")


# ============================================================================
# FIELD COERCION
# ============================================================================

def sanitize_text(value: Any, max_length: int) -> str:
    """Normalize line endings, drop control characters, trim and truncate."""
    if not isinstance(value, str):
        return ""
    text = value.replace("\r\n", "\n").replace("\r", "\n")
    text = _CONTROL_CHARS.sub("", text).strip()
    return text[:max_length].rstrip()


def sanitize_multi(value: Any, allowed: Sequence[str]) -> List[str]:
    """Intersect with the allowed set, dedupe, keep first-seen order."""
    if not isinstance(value, list):
        return []
    allowed_set = set(allowed)
    selected: List[str] = []
    for item in value:
        if isinstance(item, str) and item in allowed_set and item not in selected:
            selected.append(item)
    return selected


def sanitize_single(value: Any, allowed: Sequence[str], default: str) -> str:
    if isinstance(value, str) and value in allowed:
        return value
    return default


def sanitize_score(value: Any, bounds: Iterable[int]) -> Optional[int]:
    """Parse, round and clamp a score; unusable input becomes None."""
    low, high = bounds
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    if not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    # half-up rounding, as the client does
    return min(max(math.floor(number + 0.5), low), high)


def _section(payload: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = payload.get(key)
    return value if isinstance(value, dict) else {}


def _text(section: Dict[str, Any], key: str, limit_key: str = None) -> str:
    return sanitize_text(section.get(key), TEXT_LIMITS[limit_key or key])


# ============================================================================
# SECTIONS
# ============================================================================

def _sanitize_basic(section: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "nickname": _text(section, "nickname"),
        "honorifics": sanitize_multi(section.get("honorifics"), HONORIFIC_OPTIONS),
        "honorificOther": _text(section, "honorificOther"),
        "gender": sanitize_multi(section.get("gender"), GENDER_OPTIONS),
        "genderOther": _text(section, "genderOther"),
        "genderFreeText": _text(section, "genderFreeText"),
        "age": _text(section, "age"),
    }


def _sanitize_work(section: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "role": _text(section, "role"),
        "organization": _text(section, "organization"),
        "employmentTypes": sanitize_multi(section.get("employmentTypes"), EMPLOYMENT_TYPES),
        "employmentOther": _text(section, "employmentOther"),
        "workPatterns": sanitize_multi(section.get("workPatterns"), WORK_PATTERNS),
        "workPatternOther": _text(section, "workPatternOther"),
        "weeklyHours": _text(section, "weeklyHours"),
        "stressors": _text(section, "stressors"),
        "supportResources": _text(section, "supportResources"),
    }


def _sanitize_family(section: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "livingArrangement": sanitize_single(
            section.get("livingArrangement"), LIVING_ARRANGEMENTS, DEFAULT_LIVING_ARRANGEMENT
        ),
        "household": _text(section, "household"),
        "careResponsibilities": sanitize_multi(
            section.get("careResponsibilities"), CARE_RESPONSIBILITIES
        ),
        "careOther": _text(section, "careOther"),
        "careTime": _text(section, "careTime"),
    }


def _sanitize_personality(section: Dict[str, Any]) -> Dict[str, Any]:
    traits = _section(section, "traits")
    return {
        "traits": {
            trait: sanitize_score(traits.get(trait), TRAIT_RANGE)
            for trait in PERSONALITY_TRAITS
        },
        "tags": sanitize_multi(section.get("tags"), PERSONALITY_TAGS),
        "tagOther": _text(section, "tagOther"),
        "strengths": _text(section, "strengths"),
        "cautions": _text(section, "cautions"),
    }


def _sanitize_life_inventory(section: Dict[str, Any]) -> Dict[str, Any]:
    areas = _section(section, "areas")
    sanitized_areas = {}
    for area in LIFE_AREAS:
        entry = _section(areas, area)
        sanitized_areas[area] = {
            "satisfaction": sanitize_score(entry.get("satisfaction"), SATISFACTION_RANGE),
            "note": _text(entry, "note", "areaNote"),
        }
    return {
        "areas": sanitized_areas,
        "dailyRoutine": _text(section, "dailyRoutine"),
    }


def sanitize_topics(value: Any) -> List[Dict[str, Any]]:
    """
    Dedupe topic selections by id and cap stars.

    Entries may be ``{"id": ..., "starred": ...}`` objects or bare ids.
    Stars are capped at MAX_STARRED_TOPICS in input order before unknown
    ids are dropped, so the fourth starred entry is never starred even
    when an earlier one is not a known topic.
    """
    if not isinstance(value, list):
        return []

    allowed = set(COACHING_TOPICS)
    seen = set()
    topics: List[Dict[str, Any]] = []
    stars = 0

    for item in value:
        if isinstance(item, str):
            topic_id, starred = item, False
        elif isinstance(item, dict):
            topic_id, starred = item.get("id"), item.get("starred") is True
        else:
            continue

        if not isinstance(topic_id, str) or topic_id in seen:
            continue
        seen.add(topic_id)

        if starred and stars < MAX_STARRED_TOPICS:
            stars += 1
        else:
            starred = False

        if topic_id in allowed:
            topics.append({"id": topic_id, "starred": starred})

    return topics


def _sanitize_coaching(section: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "topics": sanitize_topics(section.get("topics")),
        "topicOther": _text(section, "topicOther"),
        "challenge": _text(section, "challenge"),
        "kpi": _text(section, "kpi"),
    }


def _sanitize_safety(section: Dict[str, Any]) -> Dict[str, Any]:
    concerns = sanitize_multi(section.get("concerns"), SAFETY_CONCERNS)
    if "none" in concerns and len(concerns) > 1:
        concerns = [concern for concern in concerns if concern != "none"]
    return {
        "concerns": concerns,
        "concernOther": _text(section, "concernOther"),
        "consent": section.get("consent") is True,
    }


# ============================================================================
# ENTRY POINTS
# ============================================================================

def sanitize_face_sheet(payload: Any) -> Optional[Dict[str, Any]]:
    """
    Coerce client JSON into a fully populated face sheet.

    Returns None only when the top-level value is not an object.
    """
    if not isinstance(payload, dict):
        return None

    return {
        "basic": _sanitize_basic(_section(payload, "basic")),
        "work": _sanitize_work(_section(payload, "work")),
        "family": _sanitize_family(_section(payload, "family")),
        "personality": _sanitize_personality(_section(payload, "personality")),
        "lifeInventory": _sanitize_life_inventory(_section(payload, "lifeInventory")),
        "coaching": _sanitize_coaching(_section(payload, "coaching")),
        "safety": _sanitize_safety(_section(payload, "safety")),
    }


def empty_face_sheet() -> Dict[str, Any]:
    """Face sheet with every field at its default."""
    return sanitize_face_sheet({})
