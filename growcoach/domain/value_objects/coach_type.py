"""Coach persona value objects."""

from enum import Enum
from typing import Any, Optional


class CoachType(str, Enum):
    """Available coach personas."""
    AKITO = "akito"     # calm, evidence-driven
    KANON = "kanon"     # light humour, tiny habits
    NARUKA = "naruka"   # structured decisions, if-then plans

    @classmethod
    def parse(cls, value: Any) -> Optional["CoachType"]:
        """Return the matching coach type or None."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


DEFAULT_COACH_TYPE = CoachType.AKITO
