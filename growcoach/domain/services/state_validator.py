"""
State validation for generator payloads.

The generator is an untrusted source: every field is coerced into the
expected type, falling back to an empty default. Only a payload that is
not a JSON object at all is rejected.
"""

import logging
import math
from typing import Any, List, Optional, Union

from ..entities import CoachingState, Reality, Resources, Plan
from ..exceptions import MalformedModelOutputError
from ..value_objects import Stage, INITIAL_STAGE, normalize_stage

logger = logging.getLogger(__name__)

SCORE_MIN = 0
SCORE_MAX = 10


def coerce_string(value: Any) -> str:
    """Trimmed string, or empty string for anything else."""
    if isinstance(value, str):
        return value.strip()
    return ""


def coerce_string_list(value: Any) -> List[str]:
    """Keep non-empty trimmed strings, drop everything else."""
    if not isinstance(value, list):
        return []
    items = []
    for item in value:
        if isinstance(item, str):
            text = item.strip()
            if text:
                items.append(text)
    return items


def parse_number(value: Any) -> Optional[float]:
    """Finite float from a number or numeric string, else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return None
    if isinstance(value, str):
        value = value.strip()
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number


def clamp_score(value: Any) -> Optional[Union[int, float]]:
    """
    Clamp a 0-10 score; non-numeric and non-finite values become None.

    Integral results are returned as int.
    """
    number = parse_number(value)
    if number is None:
        return None
    number = min(max(number, SCORE_MIN), SCORE_MAX)
    if float(number).is_integer():
        return int(number)
    return number


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def validate_state(payload: Any, fallback_stage: Optional[Stage] = None) -> CoachingState:
    """
    Coerce a parsed JSON payload into a fully populated CoachingState.

    Args:
        payload: Parsed JSON value from the generator reply
        fallback_stage: Stage used when the payload has no usable stage
            (normally the session's previous stage)

    Raises:
        MalformedModelOutputError: payload is not a JSON object
    """
    if not isinstance(payload, dict):
        raise MalformedModelOutputError("state payload is not an object")

    stage = normalize_stage(payload.get("stage"))
    if stage is None:
        stage = normalize_stage(fallback_stage) or INITIAL_STAGE
        if "stage" in payload:
            logger.warning(
                f"Unrecognized stage {payload.get('stage')!r}, keeping {stage.value}"
            )

    reality = _as_dict(payload.get("reality"))
    resources = _as_dict(payload.get("resources"))
    plan = _as_dict(payload.get("plan"))

    return CoachingState(
        stage=stage,
        user_goals=coerce_string_list(payload.get("user_goals")),
        reality=Reality(
            facts=coerce_string_list(reality.get("facts")),
            obstacles=coerce_string_list(reality.get("obstacles")),
            supports=coerce_string_list(reality.get("supports")),
            score_0to10=clamp_score(reality.get("score_0to10")),
        ),
        resources=Resources(
            internal=coerce_string_list(resources.get("internal")),
            external=coerce_string_list(resources.get("external")),
        ),
        options=coerce_string_list(payload.get("options")),
        plan=Plan(
            first_step=coerce_string(plan.get("first_step")),
            when_where=coerce_string(plan.get("when_where")),
            measure_of_success=coerce_string(plan.get("measure_of_success")),
            if_then=coerce_string(plan.get("if_then")),
            planB=coerce_string(plan.get("planB")),
        ),
        risks=coerce_string_list(payload.get("risks")),
        agreements=coerce_string_list(payload.get("agreements")),
        next_prompt_to_user=coerce_string(payload.get("next_prompt_to_user")),
    )
