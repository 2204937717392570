"""Coaching stage value objects."""

import re
from enum import Enum
from typing import Any, Dict, Optional


class Stage(str, Enum):
    """Stages of the GROW coaching protocol, in protocol order."""
    INTRO = "intro"
    INVENTORY = "inventory"
    GOAL = "goal"
    REALITY = "reality"
    OPTIONS = "options"
    WILL = "will"
    CLOSING = "closing"


INITIAL_STAGE = Stage.INTRO

_NON_LETTERS = re.compile(r"[^a-z]+")

_STAGES_BY_VALUE: Dict[str, Stage] = {stage.value: stage for stage in Stage}

# Keys are already lowercased with non-letters stripped
STAGE_ALIASES: Dict[str, Stage] = {
    # goal
    "g": Stage.GOAL,
    "goals": Stage.GOAL,
    "goalsetting": Stage.GOAL,
    # reality
    "r": Stage.REALITY,
    "current": Stage.REALITY,
    "currentreality": Stage.REALITY,
    # options
    "o": Stage.OPTIONS,
    "option": Stage.OPTIONS,
    "alternatives": Stage.OPTIONS,
    # will
    "w": Stage.WILL,
    "wayforward": Stage.WILL,
    "action": Stage.WILL,
    "actionplan": Stage.WILL,
    "plan": Stage.WILL,
    # closing
    "wrap": Stage.CLOSING,
    "wrapup": Stage.CLOSING,
    "review": Stage.CLOSING,
    "close": Stage.CLOSING,
    "closure": Stage.CLOSING,
    "summary": Stage.CLOSING,
    # intro
    "introduction": Stage.INTRO,
    "opening": Stage.INTRO,
    "start": Stage.INTRO,
    "welcome": Stage.INTRO,
    # inventory
    "lifeinventory": Stage.INVENTORY,
    "stocktaking": Stage.INVENTORY,
    "stocktake": Stage.INVENTORY,
}


def normalize_stage(value: Any) -> Optional[Stage]:
    """
    Map a free-form stage token onto the stage vocabulary.

    Accepts any value; returns None when nothing matches. Never raises.

    Examples:
        >>> normalize_stage("Goal")
        <Stage.GOAL: 'goal'>
        >>> normalize_stage("Wrap-up")
        <Stage.CLOSING: 'closing'>
        >>> normalize_stage("lunch") is None
        True
    """
    if isinstance(value, Stage):
        return value
    if not isinstance(value, str):
        return None

    token = _NON_LETTERS.sub("", value.lower())
    if not token:
        return None

    stage = _STAGES_BY_VALUE.get(token)
    if stage is not None:
        return stage
    return STAGE_ALIASES.get(token)
