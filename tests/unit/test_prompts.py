"""
Unit Tests: Prompt Assembly

Tests the ordered prompt fragments sent to the generator.
"""

from growcoach.application.prompts import (
    COACH_PERSONAS,
    OUTPUT_FORMAT_INSTRUCTION,
    build_prompt_parts,
    format_turn,
    stage_index,
)
from growcoach.domain.entities import Message, SessionEntry
from growcoach.domain.services import validate_state
from growcoach.domain.value_objects import CoachType, Stage


def test_format_turn():
    assert format_turn("user", "hi") == "USER: hi"
    assert format_turn("coach", "hello") == "COACH: hello"


def test_parts_order_with_summary_and_history():
    entry = SessionEntry(
        user_id="u1",
        session_id="s1",
        stage=Stage.GOAL,
        face_sheet_summary="User profile (face sheet):\n- Nickname: Mika",
        messages=[
            Message.create_user_message("I am tired", 1),
            Message.create_coach_message(
                "What would rested look like?", 2, validate_state({"stage": "goal"}), CoachType.AKITO
            ),
        ],
    )

    parts = build_prompt_parts(entry, "Eight hours", CoachType.KANON)

    assert parts[0].endswith(COACH_PERSONAS[CoachType.KANON])
    assert parts[1:] == [
        "User profile (face sheet):\n- Nickname: Mika",
        "Current stage: goal",
        "USER: I am tired",
        "COACH: What would rested look like?",
        "USER: Eight hours",
        OUTPUT_FORMAT_INSTRUCTION,
    ]


def test_parts_without_summary():
    entry = SessionEntry(user_id="u1", session_id="s1", face_sheet_summary="")

    parts = build_prompt_parts(entry, "Hello", CoachType.AKITO)

    assert len(parts) == 4
    assert parts[1] == "Current stage: intro"


def test_every_coach_type_has_a_persona():
    assert set(COACH_PERSONAS) == set(CoachType)


def test_stage_index_follows_protocol_order():
    assert stage_index(Stage.INTRO) == 0
    assert stage_index(Stage.CLOSING) == 6
    assert stage_index(Stage.GOAL) < stage_index(Stage.WILL)
