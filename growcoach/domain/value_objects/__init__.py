"""Domain value objects module."""

from .stage import Stage, INITIAL_STAGE, STAGE_ALIASES, normalize_stage
from .coach_type import CoachType, DEFAULT_COACH_TYPE

__all__ = [
    "Stage",
    "INITIAL_STAGE",
    "STAGE_ALIASES",
    "normalize_stage",
    "CoachType",
    "DEFAULT_COACH_TYPE",
]
