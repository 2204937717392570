"""Coaching state domain entity."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from ..value_objects import Stage, INITIAL_STAGE

Score = Optional[Union[int, float]]


@dataclass
class Reality:
    """Current-situation snapshot gathered in the reality stage."""

    facts: List[str] = field(default_factory=list)
    obstacles: List[str] = field(default_factory=list)
    supports: List[str] = field(default_factory=list)
    score_0to10: Score = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "facts": list(self.facts),
            "obstacles": list(self.obstacles),
            "supports": list(self.supports),
            "score_0to10": self.score_0to10,
        }


@dataclass
class Resources:
    """Internal and external resources the user can draw on."""

    internal: List[str] = field(default_factory=list)
    external: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "internal": list(self.internal),
            "external": list(self.external),
        }


@dataclass
class Plan:
    """Action plan agreed in the will stage."""

    first_step: str = ""
    when_where: str = ""
    measure_of_success: str = ""
    if_then: str = ""
    planB: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "first_step": self.first_step,
            "when_where": self.when_where,
            "measure_of_success": self.measure_of_success,
            "if_then": self.if_then,
            "planB": self.planB,
        }


@dataclass
class CoachingState:
    """
    Structured outcome of one coaching turn.

    Every field is always present and well typed. Instances are produced
    by the state validator, which coerces whatever the generator returned.
    """

    stage: Stage = INITIAL_STAGE
    user_goals: List[str] = field(default_factory=list)
    reality: Reality = field(default_factory=Reality)
    resources: Resources = field(default_factory=Resources)
    options: List[str] = field(default_factory=list)
    plan: Plan = field(default_factory=Plan)
    risks: List[str] = field(default_factory=list)
    agreements: List[str] = field(default_factory=list)
    next_prompt_to_user: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON wire shape."""
        return {
            "stage": self.stage.value,
            "user_goals": list(self.user_goals),
            "reality": self.reality.to_dict(),
            "resources": self.resources.to_dict(),
            "options": list(self.options),
            "plan": self.plan.to_dict(),
            "risks": list(self.risks),
            "agreements": list(self.agreements),
            "next_prompt_to_user": self.next_prompt_to_user,
        }
