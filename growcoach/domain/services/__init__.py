"""Domain services module."""

from .payload_extractor import ExtractedPayload, extract_payload, find_balanced_span
from .state_validator import validate_state, clamp_score
from .face_sheet_sanitizer import sanitize_face_sheet, empty_face_sheet
from .face_sheet_summary import summarize_face_sheet

__all__ = [
    "ExtractedPayload",
    "extract_payload",
    "find_balanced_span",
    "validate_state",
    "clamp_score",
    "sanitize_face_sheet",
    "empty_face_sheet",
    "summarize_face_sheet",
]
