"""Plain-text rendering of a face sheet for generator context."""

from typing import Any, Dict, List, Optional

MAX_SUMMARY_LENGTH = 2000


def _join(values: List[str], other: str = "") -> str:
    items = [value for value in values if value != "other"]
    if other:
        items.append(other)
    elif "other" in values:
        items.append("other")
    return ", ".join(items)


def _line(lines: List[str], label: str, value: Any) -> None:
    if value:
        lines.append(f"- {label}: {value}")


def summarize_face_sheet(face_sheet: Optional[Dict[str, Any]]) -> str:
    """
    Summarize a sanitized face sheet.

    Only filled-in fields are rendered. An empty or missing sheet yields
    an empty string.
    """
    if not face_sheet:
        return ""

    lines: List[str] = []

    basic = face_sheet["basic"]
    _line(lines, "Nickname", basic["nickname"])
    _line(lines, "Preferred form of address", _join(basic["honorifics"], basic["honorificOther"]))
    gender = _join(basic["gender"], basic["genderOther"])
    if basic["genderFreeText"]:
        gender = f"{gender} ({basic['genderFreeText']})" if gender else basic["genderFreeText"]
    _line(lines, "Gender", gender)
    _line(lines, "Age", basic["age"])

    work = face_sheet["work"]
    role = " at ".join(part for part in (work["role"], work["organization"]) if part)
    _line(lines, "Work", role)
    _line(lines, "Employment", _join(work["employmentTypes"], work["employmentOther"]))
    _line(lines, "Work pattern", _join(work["workPatterns"], work["workPatternOther"]))
    _line(lines, "Weekly hours", work["weeklyHours"])
    _line(lines, "Work stressors", work["stressors"])
    _line(lines, "Support at work", work["supportResources"])

    family = face_sheet["family"]
    if family["livingArrangement"] != "noAnswer":
        _line(lines, "Living arrangement", family["livingArrangement"])
    _line(lines, "Household", family["household"])
    _line(lines, "Care responsibilities", _join(family["careResponsibilities"], family["careOther"]))
    _line(lines, "Care time", family["careTime"])

    personality = face_sheet["personality"]
    traits = ", ".join(
        f"{trait} {score}/5"
        for trait, score in personality["traits"].items()
        if score is not None
    )
    _line(lines, "Self-rated traits", traits)
    _line(lines, "Personality", _join(personality["tags"], personality["tagOther"]))
    _line(lines, "Strengths", personality["strengths"])
    _line(lines, "Watch-outs", personality["cautions"])

    inventory = face_sheet["lifeInventory"]
    areas = []
    for area, entry in inventory["areas"].items():
        if entry["satisfaction"] is None and not entry["note"]:
            continue
        text = area
        if entry["satisfaction"] is not None:
            text += f" {entry['satisfaction']}/10"
        if entry["note"]:
            text += f" ({entry['note']})"
        areas.append(text)
    _line(lines, "Life satisfaction", "; ".join(areas))
    _line(lines, "Daily routine", inventory["dailyRoutine"])

    coaching = face_sheet["coaching"]
    topics = [
        f"{topic['id']} (priority)" if topic["starred"] else topic["id"]
        for topic in coaching["topics"]
    ]
    _line(lines, "Coaching topics", _join(topics, coaching["topicOther"]))
    _line(lines, "Current challenge", coaching["challenge"])
    _line(lines, "Success measure", coaching["kpi"])

    safety = face_sheet["safety"]
    concerns = [concern for concern in safety["concerns"] if concern != "none"]
    _line(lines, "Safety concerns", _join(concerns, safety["concernOther"]))

    if not lines:
        return ""

    summary = "User profile (face sheet):\n" + "\n".join(lines)
    return summary[:MAX_SUMMARY_LENGTH]
