from __future__ import annotations

import logging
from typing import Callable, Optional

from esper import World

from happymatch.components.narrative_message import NarrativeMessage
from happymatch.events.bus import (
    EventBus,
    EVENT_LEVEL_ENDED,
    EVENT_LEVEL_STARTED,
    EVENT_NARRATIVE_READY,
)

logger = logging.getLogger(__name__)

NarrativeProvider = Callable[[str], Optional[str]]

DEFAULT_MESSAGES = {
    "won": "You are a puzzle master! \U0001F31F",
    "lost": "Don't give up! Try again! \U0001F4AA",
}


def build_prompt(status: str, score: int, moves_remaining: int) -> str:
    if status == "won":
        return (
            f"I just beat a level in a Match-3 game! Score: {score}, Moves left: {moves_remaining}. "
            "Give me a very short, funny, enthusiastic congratulatory message (max 2 sentences) with emojis."
        )
    return (
        f"I just lost a Match-3 game level. Score: {score}. "
        "Give me a short, funny, encouraging message to try again (max 2 sentences) with emojis."
    )


class NarrativeSystem:
    """Asks an optional text provider for an end-of-level message.

    The provider is any callable taking a prompt and returning text. When it is
    missing, raises, or answers with nothing, a fixed message is used instead.
    """

    def __init__(self, world: World, event_bus: EventBus, *, provider: NarrativeProvider | None = None):
        self.world = world
        self.event_bus = event_bus
        self.provider = provider
        self.event_bus.subscribe(EVENT_LEVEL_ENDED, self.on_level_ended)
        self.event_bus.subscribe(EVENT_LEVEL_STARTED, self.on_level_started)

    def on_level_ended(self, sender, **kwargs):
        status = kwargs.get("status", "lost")
        score = int(kwargs.get("score", 0))
        moves_remaining = int(kwargs.get("moves_remaining", 0))
        text = self.generate(status, score, moves_remaining)
        message = self._message()
        message.status = status
        message.text = text
        self.event_bus.emit(EVENT_NARRATIVE_READY, status=status, text=text)

    def on_level_started(self, sender, **kwargs):
        message = self._message()
        message.status = ""
        message.text = ""

    def generate(self, status: str, score: int, moves_remaining: int) -> str:
        fallback = DEFAULT_MESSAGES.get(status, DEFAULT_MESSAGES["lost"])
        if self.provider is None:
            return fallback
        prompt = build_prompt(status, score, moves_remaining)
        try:
            text = self.provider(prompt)
        except Exception as exc:
            logger.warning("Narrative provider failed, using default message: %s", exc)
            return fallback
        if not text or not text.strip():
            logger.warning("Narrative provider returned no text, using default message")
            return fallback
        return text.strip()

    def _message(self) -> NarrativeMessage:
        for _, message in self.world.get_component(NarrativeMessage):
            return message
        entity = self.world.create_entity(NarrativeMessage())
        return self.world.component_for_entity(entity, NarrativeMessage)
