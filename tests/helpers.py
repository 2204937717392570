"""Test doubles shared across test modules."""

import json
from typing import Callable, List

from growcoach.application.interfaces import IAIService


def coach_reply(message: str, **state) -> str:
    """Build a generator reply in the expected message + JSON format."""
    state.setdefault("stage", "goal")
    return f"{message}\n\n---\n**State JSON:**\n{json.dumps(state)}"


class ScriptedAIService(IAIService):
    """AI service returning canned replies and recording prompts."""

    def __init__(self, replies: List[str] = None, responder: Callable[[List[str]], str] = None):
        self.replies = list(replies or [])
        self.responder = responder
        self.calls: List[List[str]] = []

    async def generate(self, parts: List[str]) -> str:
        self.calls.append(list(parts))
        if self.responder is not None:
            return self.responder(parts)
        if not self.replies:
            return coach_reply("Tell me more.")
        return self.replies.pop(0)

    async def health_check(self):
        return {"scripted": True}
